"""
Lispy - Main Entry Point
A small Lisp with S-Expressions, Q-Expressions, closures and currying
"""

import sys
import argparse
import os
from typing import List

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from parsing import create_parser, pretty_print_cst
from error_handling import LispyParseError
from interpreter import LispyInterpreter, create_interpreter
from reader import read_value
from environment import env_names
from stdlib import BUILTINS
from values import Error, show_value


VERSION = "0.1.0"
HISTORY_FILE = "~/.lispy_history"
HISTORY_LENGTH = 1000


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='lispy',
      description='Lispy - a small Lisp with Q-Expressions',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s                       # Interactive mode
  %(prog)s prelude.lspy app.lspy # Load files in order
  %(prog)s -i prelude.lspy       # Load a file, then go interactive
  %(prog)s --parse app.lspy      # Parse and show CST
  %(prog)s --debug app.lspy      # Trace evaluation
        """
  )

  parser.add_argument(
      'files',
      nargs='*',
      help='Lispy source files to load, in order'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode after loading files'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse files and show CST instead of evaluating'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for parsing and evaluation'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=f'Lispy v{VERSION}'
  )

  return parser


def parse_files(paths: List[str], debug: bool = False) -> int:
  """Parse source files and show their CST; returns an exit status"""
  parser = create_parser(debug)
  status = 0
  for path in paths:
    try:
      root = parser.parse_file(path)
      print(f"{path}:")
      print(pretty_print_cst(root))
    except FileNotFoundError:
      print(f"Error: Source file '{path}' not found")
      status = 1
    except PermissionError:
      print(f"Error: Permission denied reading '{path}'")
      status = 1
    except UnicodeDecodeError as e:
      print(f"Error: Cannot decode file '{path}': {e}")
      print("  Hint: Make sure the file is a text file with UTF-8 encoding")
      status = 1
    except LispyParseError as e:
      print(f"Parse error in '{path}':\n{e}")
      status = 1
  return status


def load_files(interpreter: LispyInterpreter, paths: List[str]) -> int:
  """Load each file into the interpreter's root environment

  Errors from individual top-level forms are printed by the loader and do
  not stop the file; a file that cannot be read or parsed is reported once.
  """
  status = 0
  for path in paths:
    try:
      result = interpreter.load_file(path)
    except Exception as e:
      print(f"Unexpected error while loading '{path}': {e}")
      if interpreter.debug:
        import traceback
        traceback.print_exc()
      status = 1
      continue

    if isinstance(result, Error):
      print(show_value(result))
      status = 1
  return status


def setup_readline(interpreter: LispyInterpreter) -> None:
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # first run, no history yet

  readline.set_history_length(HISTORY_LENGTH)

  commands = [":parse", ":env", ":help"]

  def completer(text, state):
    names = env_names(interpreter.global_env) + commands
    options = sorted(name for name in names if name.startswith(text))
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.set_completer_delims(" \t\n(){}")
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(_write_history, history_file)


def _write_history(history_file: str) -> None:
  try:
    readline.write_history_file(history_file)
  except OSError:
    pass


def show_help() -> None:
  print("REPL Commands:")
  print("  :parse <expr>     - Show parsed CST")
  print("  :env              - Show user-defined bindings")
  print("  :help             - Show this help")
  print("  Ctrl+c / Ctrl+d   - Exit")
  print()
  print("Language:")
  print("  + 1 2 3                      - Call a function")
  print("  def {x} 5                    - Global binding")
  print("  def {add} (\\ {x y} {+ x y})  - Define a function")
  print("  add 1                        - Partial application")
  print("  {head tail}                  - Q-Expression, never evaluated")


def show_env(interpreter: LispyInterpreter) -> None:
  user_bindings = {name: value for name, value in interpreter.global_env.bindings.items()
                   if name not in BUILTINS}
  if not user_bindings:
    print("  (no user-defined bindings)")
    return
  for name, value in user_bindings.items():
    val_str = show_value(value)
    if len(val_str) > 60:
      val_str = val_str[:57] + "..."
    print(f"  {name} = {val_str}")


def run_interactive_mode(interpreter: LispyInterpreter) -> None:
  """Read a line, evaluate it in the persistent root environment, print"""
  print(f"Lispy Version {VERSION}")
  print("Press Ctrl+c to Exit, ':help' for commands")
  if interpreter.debug:
    print("Debug mode enabled")
  print()

  setup_readline(interpreter)

  while True:
    try:
      code = input("lispy> ")

      if not code.strip():
        continue

      if code.startswith(":parse "):
        try:
          print(pretty_print_cst(interpreter.parser.parse_string(code[7:])))
        except LispyParseError as e:
          print(f"Parse error: {e}")
        continue

      if code.strip() == ":env":
        show_env(interpreter)
        continue

      if code.strip() == ":help":
        show_help()
        continue

      try:
        root = interpreter.parser.parse_string(code)
      except LispyParseError as e:
        print(f"Parse error: {e}")
        continue

      print(show_value(interpreter.eval(read_value(root))))

    except KeyboardInterrupt:
      print("\nGoodbye!")
      break
    except EOFError:
      print("\nGoodbye!")
      break
    except Exception as e:
      print(f"Unexpected error: {e}")
      if interpreter.debug:
        import traceback
        traceback.print_exc()
      if isinstance(e, RecursionError):
        print("  Hint: recursion too deep for the host stack; check for a missing base case")


def main() -> None:
  """Main entry point for Lispy"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()

  if args.parse:
    if not args.files:
      arg_parser.error("--parse needs at least one file")
    sys.exit(parse_files(args.files, debug=args.debug))

  interpreter = create_interpreter(debug=args.debug)

  status = load_files(interpreter, args.files)
  if not args.files or args.interactive:
    run_interactive_mode(interpreter)
  sys.exit(status)


if __name__ == "__main__":
  main()
