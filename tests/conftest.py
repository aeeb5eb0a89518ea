"""Pytest configuration for the cxxfront test suite."""

import sys
from pathlib import Path

import pytest

# Add backend directory to path for cxxfront imports
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

SAMPLE_PROGRAM = """#include <iostream>
int add(int a, int b) {
  int s = a + b;
  return s;
}
int main() {
  int x;
  x = add(1, 2);
  return 0;
}
"""


@pytest.fixture
def sample_program() -> str:
    return SAMPLE_PROGRAM
