"""
Diagnostic extraction from the external static analyzer.

This module runs flake8 against a snapshot of a buffer and turns its
text output into ``Finding`` objects. The analyzer is hidden behind the
``DiagnosticSource`` interface so tests and alternative analyzers can be
plugged into the fixer without spawning processes.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional

from .config import ToolConfig
from .models import Finding, FindingKind
from .utils import run_tool, snapshot_file


logger = logging.getLogger(__name__)

UNUSED_IMPORT_RE = re.compile(r"F401 '([^']+)' imported but unused")
UNDEFINED_NAME_RE = re.compile(r"F821 undefined name '([^']+)'")
_LOCATION_RE = re.compile(r":(\d+):(\d+):")

_PATTERNS = {
    FindingKind.UNUSED_IMPORT: UNUSED_IMPORT_RE,
    FindingKind.UNDEFINED_NAME: UNDEFINED_NAME_RE,
}


def parse_findings(output: str, kind: FindingKind) -> List[Finding]:
    """
    Extract findings of one kind from analyzer output.

    Lines that do not match the message template for ``kind`` are skipped.
    Findings come back in the order they appear in the output.
    """
    pattern = _PATTERNS[kind]
    findings = []
    for line in output.splitlines():
        match = pattern.search(line)
        if match is None:
            if line.strip():
                logger.debug(f"Ignoring analyzer line: {line}")
            continue

        lineno: Optional[int] = None
        column: Optional[int] = None
        location = _LOCATION_RE.search(line[:match.start()])
        if location:
            lineno, column = int(location.group(1)), int(location.group(2))

        findings.append(Finding(kind=kind, value=match.group(1), line=lineno, column=column))
    return findings


def parse_unused_imports(output: str) -> List[Finding]:
    return parse_findings(output, FindingKind.UNUSED_IMPORT)


def parse_undefined_names(output: str) -> List[Finding]:
    return parse_findings(output, FindingKind.UNDEFINED_NAME)


class DiagnosticSource(ABC):
    """
    Capability interface for anything that can report import problems.

    Implementations receive the full buffer text and return findings for it.
    """

    @abstractmethod
    def find_unused(self, text: str) -> List[Finding]:
        """Return unused-import findings for ``text``."""
        pass

    @abstractmethod
    def find_undefined(self, text: str) -> List[Finding]:
        """Return undefined-name findings for ``text``."""
        pass


class Flake8Extractor(DiagnosticSource):
    """
    Diagnostic source backed by the flake8 command line tool.

    Each query writes the text to its own temporary file, runs flake8 with
    the configured arguments plus a ``--select`` for the requested code,
    and deletes the file before returning.
    """

    def __init__(self, config: ToolConfig):
        self.config = config

    def run(self, text: str, kind: FindingKind) -> str:
        """
        Run the analyzer on ``text`` restricted to ``kind`` and return its raw output.

        Raises:
            ToolNotFoundError: If the flake8 executable cannot be located.
            ToolTimeoutError: If flake8 does not finish in time.
        """
        with snapshot_file(text) as path:
            return run_tool(self.config, "analyzer", [f"--select={kind.value}"], path)

    def find_unused(self, text: str) -> List[Finding]:
        findings = parse_unused_imports(self.run(text, FindingKind.UNUSED_IMPORT))
        logger.debug(f"Analyzer reported {len(findings)} unused import(s)")
        return findings

    def find_undefined(self, text: str) -> List[Finding]:
        findings = parse_undefined_names(self.run(text, FindingKind.UNDEFINED_NAME))
        logger.debug(f"Analyzer reported {len(findings)} undefined name(s)")
        return findings
