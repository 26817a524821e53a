"""
Shared fixtures for Import Fixer tests.

Provides configurations, fake diagnostic sources and sorters so the fixer
can be exercised without flake8 or isort installed.
"""

import subprocess
from typing import Dict, List, Optional

import pytest

from import_fixer.config import Config, ToolConfig
from import_fixer.diagnostics import DiagnosticSource
from import_fixer.models import Finding, FindingKind, SourceBuffer


class FakeDiagnostics(DiagnosticSource):
    """Diagnostic source returning canned findings and recording every query."""

    def __init__(self, unused: Optional[List[str]] = None, undefined: Optional[List[str]] = None):
        self.unused = unused or []
        self.undefined = undefined or []
        self.unused_queries: List[str] = []
        self.undefined_queries: List[str] = []

    def find_unused(self, text: str) -> List[Finding]:
        self.unused_queries.append(text)
        return [Finding(FindingKind.UNUSED_IMPORT, value) for value in self.unused]

    def find_undefined(self, text: str) -> List[Finding]:
        self.undefined_queries.append(text)
        return [Finding(FindingKind.UNDEFINED_NAME, value) for value in self.undefined]


class IdentitySorter:
    """Sorter stand-in that leaves text untouched."""

    def __init__(self):
        self.calls: List[str] = []

    def sort(self, text: str) -> str:
        self.calls.append(text)
        return text


def completed(output: str = "", returncode: int = 0) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=output)


@pytest.fixture
def test_config():
    """Configuration pointing at fake tool paths with a small alias table."""
    return Config(
        analyzer=ToolConfig(
            path="/opt/tools/flake8",
            default_args=["--max-line-length=100", "--select=F401,F821", "--isolated"],
            timeout=5
        ),
        sorter=ToolConfig(
            path="/opt/tools/isort",
            default_args=["--profile=black", "--line-length=100"],
            timeout=5
        ),
        aliases={"numpy": "np", "pandas": "pd"},
        fix_on_save=False,
        log_level="DEBUG"
    )


@pytest.fixture
def fake_diagnostics():
    return FakeDiagnostics()


@pytest.fixture
def identity_sorter():
    return IdentitySorter()


@pytest.fixture
def sample_buffer():
    """Buffer with a typical import block and the cursor inside the body."""
    text = (
        "import os\n"
        "import sys\n"
        "from collections import OrderedDict, defaultdict\n"
        "\n"
        "print(sys.path, OrderedDict())\n"
    )
    return SourceBuffer(text=text, cursor=text.index("print"), path="sample.py")


@pytest.fixture
def source_file(tmp_path):
    """Write a Python file under a temporary directory and return its path."""
    def _write(text: str, name: str = "module.py") -> str:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write
