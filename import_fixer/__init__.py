"""
Import Fixer - analyze and rewrite import statements in Python source files.

This package removes unused imports, inserts imports for undefined names,
drops duplicate import lines and hands canonical ordering to isort, using
flake8 diagnostics and line-level pattern matching rather than a parser.
"""

__version__ = "0.1.0"
__author__ = "Import Fixer Team"

from .models import Finding, FindingKind, SourceBuffer, FixReport
from .config import Config, ToolConfig, load_config
from .exceptions import (
    ImportFixerError,
    ToolNotFoundError,
    ToolTimeoutError,
    EmptyBufferError,
    ConfigurationError
)
from .diagnostics import DiagnosticSource, Flake8Extractor
from .rewriter import RewriteEngine
from .sorter import ImportSorter
from .fixer import ImportFixer

__all__ = [
    "Finding",
    "FindingKind",
    "SourceBuffer",
    "FixReport",
    "Config",
    "ToolConfig",
    "load_config",
    "ImportFixerError",
    "ToolNotFoundError",
    "ToolTimeoutError",
    "EmptyBufferError",
    "ConfigurationError",
    "DiagnosticSource",
    "Flake8Extractor",
    "RewriteEngine",
    "ImportSorter",
    "ImportFixer"
]
