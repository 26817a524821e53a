"""
Utility functions and helpers for the Import Fixer.

This module provides common utilities for logging, scoped snapshot files
and running the external analyzer and sorter executables.
"""

import difflib
import logging
import os
import subprocess
import sys
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from .config import ToolConfig
from .exceptions import ToolNotFoundError, ToolTimeoutError


logger = logging.getLogger(__name__)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    structured: bool = False
) -> logging.Logger:
    """
    Set up logging configuration for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path. If None, logs to console only.
        structured: Emit JSON records instead of plain text lines.

    Returns:
        logging.Logger: Configured logger instance.
    """
    from .logging_config import StructuredFormatter

    logger = logging.getLogger("import_fixer")
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Clear existing handlers
    logger.handlers.clear()

    if structured:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    # Diagnostics go to stderr so --diff output on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).expanduser().parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(Path(log_file).expanduser())
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


@contextmanager
def snapshot_file(text: str, suffix: str = ".py") -> Iterator[str]:
    """
    Write ``text`` to a fresh, uniquely named temporary file and yield its path.

    The file is removed when the block exits, whether it exits normally or
    by exception.
    """
    fd, path = tempfile.mkstemp(prefix="import-fixer-", suffix=suffix)
    try:
        # newline="" keeps the buffer's line endings byte for byte
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        yield path
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass


def read_text(path: str) -> str:
    """Read a file as UTF-8 without translating line endings."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def resolve_executable(tool: ToolConfig, name: str) -> str:
    """
    Locate the executable for ``tool``.

    Raises:
        ToolNotFoundError: If neither the configured path nor a PATH search finds it.
    """
    executable = tool.resolve()
    if executable is None:
        raise ToolNotFoundError(
            f"{name} executable not found",
            f"'{tool.path}' is not a file and is not on PATH"
        )
    return executable


def run_tool(tool: ToolConfig, name: str, extra_args: List[str], target: str) -> str:
    """
    Run an external tool against ``target`` and return combined stdout and stderr.

    A nonzero exit status is not treated as an error; linters exit nonzero
    whenever they report something.

    Raises:
        ToolNotFoundError: If the executable cannot be located.
        ToolTimeoutError: If the tool runs longer than ``tool.timeout`` seconds.
    """
    executable = resolve_executable(tool, name)
    cmd_args = [executable, *tool.default_args, *extra_args, target]

    logger.debug(f"Running {name}: {' '.join(cmd_args)}")

    try:
        result = subprocess.run(
            cmd_args,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            timeout=tool.timeout
        )
    except subprocess.TimeoutExpired:
        raise ToolTimeoutError(
            f"{name} timed out",
            f"no result after {tool.timeout}s"
        )

    if result.returncode != 0:
        logger.debug(f"{name} exited with status {result.returncode}")

    return result.stdout or ""


def unified_diff(before: str, after: str, path: str) -> str:
    """Render the change between two versions of a file as a unified diff."""
    return "".join(difflib.unified_diff(
        before.splitlines(keepends=True),
        after.splitlines(keepends=True),
        fromfile=f"a/{path}",
        tofile=f"b/{path}"
    ))
