"""gopherlint package root."""

from gopherlint.exceptions import LintError, LoadError
from gopherlint.invariants import never

__all__ = ["__version__", "LintError", "LoadError", "never"]

__version__ = "0.1.0"
