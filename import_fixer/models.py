"""
Core data models for the Import Fixer.

This module defines the findings produced from analyzer output, the
editable source buffer the rewrite engine works on, and the report
returned by a fix-pass.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any


class FindingKind(Enum):
    """Kinds of analyzer diagnostics the fixer acts on."""
    UNUSED_IMPORT = "F401"
    UNDEFINED_NAME = "F821"


@dataclass(frozen=True)
class Finding:
    """
    One parsed analyzer diagnostic.

    ``value`` is the dotted module path for unused imports and the bare
    identifier for undefined names.
    """
    kind: FindingKind
    value: str
    line: Optional[int] = None
    column: Optional[int] = None

    @property
    def code(self) -> str:
        return self.kind.value

    @property
    def removal_key(self) -> str:
        """Last segment of a dotted path: ``os.path`` -> ``path``."""
        return self.value.rsplit('.', 1)[-1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "value": self.value,
            "line": self.line,
            "column": self.column
        }


@dataclass(eq=False)
class SourceBuffer:
    """
    Editable text of one source file plus a cursor offset.

    Stands in for an editor buffer: rewrites replace ``text`` and the
    orchestrator saves and restores ``cursor`` around a fix-pass.
    """
    text: str = ""
    cursor: int = 0
    path: Optional[str] = None

    def __post_init__(self):
        self.cursor = self._clamp(self.cursor)

    def _clamp(self, offset: int) -> int:
        return max(0, min(offset, len(self.text)))

    def is_empty(self) -> bool:
        return len(self.text) == 0

    @property
    def newline(self) -> str:
        """Line terminator of the first line: ``"\\r\\n"`` or ``"\\n"``."""
        end = self.text.find("\n")
        if end > 0 and self.text[end - 1] == "\r":
            return "\r\n"
        return "\n"

    def lines(self) -> List[str]:
        """Physical lines without their terminators."""
        if not self.text:
            return []
        lines = self.text.split("\n")
        if self.text.endswith("\n"):
            lines.pop()
        if self.newline == "\r\n":
            lines = [line[:-1] if line.endswith("\r") else line for line in lines]
        return lines

    def set_lines(self, lines: List[str]) -> None:
        """
        Replace the text with ``lines`` joined by the buffer's newline.

        A trailing newline is kept if there was one. A file that mixes
        endings comes back with the ending of its first line throughout.
        """
        newline = self.newline
        trailing = self.text.endswith("\n")
        text = newline.join(lines)
        if trailing and lines:
            text += newline
        self.replace_text(text)

    def replace_text(self, text: str) -> None:
        self.text = text
        self.cursor = self._clamp(self.cursor)

    def move_cursor(self, offset: int) -> None:
        self.cursor = self._clamp(offset)


@dataclass
class FixReport:
    """Summary of what one fix-pass changed in a buffer."""
    removed: List[str] = field(default_factory=list)
    inserted: List[str] = field(default_factory=list)
    duplicates_removed: int = 0
    sorted_changed: bool = False

    @property
    def changed(self) -> bool:
        return bool(
            self.removed or self.inserted or self.duplicates_removed or self.sorted_changed
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "removed": list(self.removed),
            "inserted": list(self.inserted),
            "duplicates_removed": self.duplicates_removed,
            "sorted_changed": self.sorted_changed
        }
