"""
Test configuration for Lispy tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import create_interpreter
from values import show_value


@pytest.fixture
def interpreter():
  """A fresh interpreter with its own root environment"""
  return create_interpreter()


@pytest.fixture
def run(interpreter):
  """Evaluate one line of input and return the printed result"""
  def run_line(code):
    return show_value(interpreter.eval_string(code))
  return run_line
