"""
Rewrite engine for import statements.

Applies the four line-oriented transformations of a fix-pass to a
``SourceBuffer``: remove unused imports, insert missing imports, drop
duplicate import lines and clean up empty from-imports.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .import_lines import (
    import_block_head,
    is_import_line,
    remove_empty_from_imports,
    remove_from_import,
    remove_simple_import,
)
from .models import SourceBuffer


logger = logging.getLogger(__name__)


def remove_unused(lines: List[str], names: Iterable[str]) -> List[str]:
    """Remove every import of each name, then sweep empty from-imports once."""
    for name in names:
        lines = remove_simple_import(lines, name)
        lines = remove_from_import(lines, name)
    return remove_empty_from_imports(lines)


def synthesize_import(identifier: str, aliases: Dict[str, str]) -> str:
    """
    Guess an import statement that would define ``identifier``.

    A configured alias wins (``np`` -> ``import numpy as np``); anything else
    becomes ``from <identifier lowercased> import <identifier>``, which is
    not checked against real modules.
    """
    for module, alias in aliases.items():
        if alias == identifier:
            return f"import {module} as {alias}"
    return f"from {identifier.lower()} import {identifier}"


def insert_missing(
    lines: List[str],
    identifiers: Iterable[str],
    aliases: Dict[str, str]
) -> Tuple[List[str], List[str]]:
    """
    Insert one synthesized import per identifier at the import block head.

    Each line goes in at the same index, so later identifiers end up above
    earlier ones. Without an existing import line nothing is inserted.

    Returns:
        The new lines and the import statements that were inserted.
    """
    head = import_block_head(lines)
    if head is None:
        return lines, []

    lines = list(lines)
    inserted = []
    for identifier in identifiers:
        statement = synthesize_import(identifier, aliases)
        lines.insert(head, statement)
        inserted.append(statement)
    return lines, inserted


def deduplicate(lines: List[str]) -> Tuple[List[str], int]:
    """
    Keep the first occurrence of each import line, dropping exact repeats.

    Comparison is on the raw line text, so whitespace variants survive.
    """
    seen = set()
    result = []
    dropped = 0
    for line in lines:
        if is_import_line(line):
            if line in seen:
                dropped += 1
                continue
            seen.add(line)
        result.append(line)
    return result, dropped


def cleanup_empty(lines: List[str]) -> List[str]:
    return remove_empty_from_imports(lines)


class RewriteEngine:
    """Buffer-level front end to the line transformations."""

    def __init__(self, aliases: Optional[Dict[str, str]] = None):
        self.aliases = aliases if aliases is not None else {}

    def remove_unused(self, buffer: SourceBuffer, names: Iterable[str]) -> List[str]:
        """
        Remove imports of ``names`` from the buffer.

        Returns:
            The names whose removal actually changed the buffer.
        """
        removed = []
        lines = buffer.lines()
        for name in names:
            updated = remove_from_import(remove_simple_import(lines, name), name)
            if updated != lines:
                removed.append(name)
            lines = updated
        lines = cleanup_empty(lines)

        if lines != buffer.lines():
            buffer.set_lines(lines)
        for name in removed:
            logger.info(f"Removed unused import: {name}")
        return removed

    def insert_missing(self, buffer: SourceBuffer, identifiers: Iterable[str]) -> List[str]:
        identifiers = list(identifiers)
        lines, inserted = insert_missing(buffer.lines(), identifiers, self.aliases)
        if not inserted and identifiers:
            logger.warning(
                f"No import block to anchor {len(identifiers)} missing import(s); skipped"
            )
        if inserted:
            buffer.set_lines(lines)
            for statement in inserted:
                logger.info(f"Inserted import: {statement}")
        return inserted

    def deduplicate(self, buffer: SourceBuffer) -> int:
        lines, dropped = deduplicate(buffer.lines())
        if dropped:
            buffer.set_lines(lines)
            logger.info(f"Removed {dropped} duplicate import line(s)")
        return dropped

    def cleanup_empty(self, buffer: SourceBuffer) -> None:
        lines = buffer.lines()
        cleaned = cleanup_empty(lines)
        if cleaned != lines:
            buffer.set_lines(cleaned)
