"""
Fix-pass orchestration.

``ImportFixer`` wires the diagnostic source, rewrite engine and sorter
together. Each step of a full pass runs to completion before the next one
starts, and each step that needs diagnostics queries the analyzer against
the buffer as it is at that moment.
"""

import logging
import threading
import weakref
from contextlib import contextmanager
from typing import List, Optional

from .config import Config
from .diagnostics import DiagnosticSource, Flake8Extractor
from .exceptions import EmptyBufferError
from .logging_config import StepTimer
from .models import Finding, FixReport, SourceBuffer
from .rewriter import RewriteEngine
from .sorter import ImportSorter


logger = logging.getLogger(__name__)


@contextmanager
def preserve_cursor(buffer: SourceBuffer):
    """
    Restore the buffer's cursor offset when the block exits.

    The offset is not remapped through edits, so lines removed above it
    shift the cursor's position in the text.
    """
    saved = buffer.cursor
    try:
        yield
    finally:
        buffer.move_cursor(saved)


class ImportFixer:
    """
    Runs import fix-passes over source buffers.

    Collaborators default to the flake8 extractor, the isort sorter and a
    rewrite engine using the configured alias table; any of them can be
    injected instead.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        diagnostics: Optional[DiagnosticSource] = None,
        sorter: Optional[ImportSorter] = None,
        engine: Optional[RewriteEngine] = None
    ):
        self.config = config or Config()
        self.diagnostics = diagnostics or Flake8Extractor(self.config.analyzer)
        self.sorter = sorter or ImportSorter(self.config.sorter)
        self.engine = engine or RewriteEngine(self.config.aliases)
        self.timer = StepTimer(logger)

        # One lock per live buffer so overlapping passes on the same buffer serialize
        self._locks = weakref.WeakKeyDictionary()
        self._locks_guard = threading.Lock()

    def _lock_for(self, buffer: SourceBuffer) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(buffer, threading.Lock())

    def remove_unused_imports(self, buffer: SourceBuffer) -> List[str]:
        """
        Remove imports the analyzer reports as unused.

        Raises:
            EmptyBufferError: If the buffer has no content. Nothing is run.
        """
        if buffer.is_empty():
            raise EmptyBufferError(
                "Cannot fix imports in an empty buffer",
                buffer.path
            )

        findings = self.diagnostics.find_unused(buffer.text)
        return self.engine.remove_unused(buffer, [f.removal_key for f in findings])

    def insert_missing_imports(self, buffer: SourceBuffer) -> List[str]:
        """Insert imports guessed from the analyzer's undefined-name reports."""
        findings = self.diagnostics.find_undefined(buffer.text)
        return self.engine.insert_missing(buffer, [f.value for f in findings])

    def remove_duplicate_imports(self, buffer: SourceBuffer) -> int:
        return self.engine.deduplicate(buffer)

    def sort_imports(self, buffer: SourceBuffer) -> bool:
        """Replace the buffer with its canonically sorted text; True if it changed."""
        sorted_text = self.sorter.sort(buffer.text)
        if sorted_text == buffer.text:
            return False
        buffer.replace_text(sorted_text)
        return True

    def fix_imports(self, buffer: SourceBuffer) -> FixReport:
        """
        Run the full pass: remove unused, insert missing, deduplicate, sort.

        Edits made by earlier steps stay in the buffer if a later step fails.
        The cursor offset is restored on every exit path.
        """
        report = FixReport()
        context = {'path': buffer.path} if buffer.path else {}

        with self._lock_for(buffer), preserve_cursor(buffer):
            with self.timer.time_step('remove_unused', **context):
                report.removed = self.remove_unused_imports(buffer)
            with self.timer.time_step('insert_missing', **context):
                report.inserted = self.insert_missing_imports(buffer)
            with self.timer.time_step('deduplicate', **context):
                report.duplicates_removed = self.remove_duplicate_imports(buffer)
            with self.timer.time_step('sort', **context):
                report.sorted_changed = self.sort_imports(buffer)

        return report

    def check(self, buffer: SourceBuffer) -> List[Finding]:
        """Report unused imports and undefined names without editing the buffer."""
        if buffer.is_empty():
            return []
        return (
            self.diagnostics.find_unused(buffer.text)
            + self.diagnostics.find_undefined(buffer.text)
        )

    def on_save(self, buffer: SourceBuffer) -> Optional[FixReport]:
        """Save hook: run a full pass when fix-on-save is enabled, else do nothing."""
        if not self.config.fix_on_save:
            return None
        return self.fix_imports(buffer)

    def toggle_fix_on_save(self) -> bool:
        self.config.fix_on_save = not self.config.fix_on_save
        logger.info(
            f"Fix imports on save {'enabled' if self.config.fix_on_save else 'disabled'}"
        )
        return self.config.fix_on_save
