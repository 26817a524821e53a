"""
Line-level model of Python import statements.

Recognizes the two single-line import forms and edits them in place:

    import <module>[, <module>...]
    from <module> import <name>[, <name>...]

Every regular expression the fixer uses lives here, so a parser-backed
implementation can replace this module without touching the rewrite engine.
All functions take and return lists of physical lines and never modify
lines that are not imports.
"""

import re
from typing import List, Optional, Tuple


SIMPLE_IMPORT_RE = re.compile(r'^import .*$')
FROM_IMPORT_RE = re.compile(r'^from .* import.*$')
EMPTY_FROM_IMPORT_RE = re.compile(r'^from .* import[ \t\r]*$')
IMPORT_BLOCK_HEAD_RE = re.compile(r'^(?:import|from) ')

_FROM_PARTS_RE = re.compile(r'^from (.*?) import(.*)$')


def is_simple_import(line: str) -> bool:
    return SIMPLE_IMPORT_RE.match(line) is not None


def is_from_import(line: str) -> bool:
    return FROM_IMPORT_RE.match(line) is not None


def is_import_line(line: str) -> bool:
    """True for either import form."""
    return is_simple_import(line) or is_from_import(line)


def is_empty_from_import(line: str) -> bool:
    """True for a from-import whose name list is empty or only whitespace."""
    return EMPTY_FROM_IMPORT_RE.match(line) is not None


def parse_from_import(line: str) -> Optional[Tuple[str, List[str]]]:
    """
    Split a from-import line into its module path and imported names.

    Names are comma separated and whitespace trimmed, in source order.
    Returns None for lines that are not from-imports.
    """
    if not is_from_import(line):
        return None
    match = _FROM_PARTS_RE.match(line)
    if match is None:
        return None
    module, names = match.group(1), match.group(2)
    return module, [name.strip() for name in names.split(',')]


def format_from_import(module: str, names: List[str]) -> str:
    return f"from {module} import {', '.join(names)}"


def remove_simple_import(lines: List[str], name: str) -> List[str]:
    """
    Drop every ``import ...`` line that mentions ``name`` as a whole word.

    The whole physical line goes, so ``import os, sys`` loses ``sys`` too
    when ``os`` is the target.
    """
    word = re.compile(r'\b' + re.escape(name) + r'\b')
    return [
        line for line in lines
        if not (is_simple_import(line) and word.search(line))
    ]


def remove_from_import(lines: List[str], name: str) -> List[str]:
    """
    Remove ``name`` from every ``from X import ...`` line that lists it.

    The remaining names keep their order and the line is rebuilt as
    ``from X import a, b``. A line left with no names is deleted.
    """
    result = []
    for line in lines:
        parsed = parse_from_import(line)
        if parsed is None:
            result.append(line)
            continue

        module, names = parsed
        if name not in names:
            result.append(line)
            continue

        remaining = list(names)
        remaining.remove(name)
        if remaining:
            # A stray carriage return stays on the rebuilt line
            ending = "\r" if line.endswith("\r") else ""
            result.append(format_from_import(module, remaining) + ending)
    return result


def remove_empty_from_imports(lines: List[str]) -> List[str]:
    return [line for line in lines if not is_empty_from_import(line)]


def import_block_head(lines: List[str]) -> Optional[int]:
    """
    Index of the first line starting an import statement, or None.

    The keyword must be followed by a space, so a line merely beginning
    with the letters ``import`` or ``from`` (``fromage = 1``,
    ``important()``) is not a head.
    """
    for index, line in enumerate(lines):
        if IMPORT_BLOCK_HEAD_RE.match(line):
            return index
    return None
