"""
Command-line interface for Import Fixer.

This module provides the ``import-fixer`` entry point: the individual
rewrite commands, the full fix-pass, a read-only check report, the save
hook and its toggle, and default configuration creation.
"""

import argparse
import json
import logging
import os
import sys
from typing import Callable, Dict, List, Optional

from . import __version__
from .config import Config, load_config, find_config_file, save_config, create_default_config_file
from .exceptions import ConfigurationError, ImportFixerError
from .fixer import ImportFixer
from .models import SourceBuffer
from .utils import read_text, setup_logging, unified_diff


logger = logging.getLogger("import_fixer.cli")

DEFAULT_CONFIG_FILE = "import-fixer.yaml"


def load_buffer(path: str) -> SourceBuffer:
    return SourceBuffer(text=read_text(path), path=path)


def write_buffer(buffer: SourceBuffer) -> None:
    with open(buffer.path, "w", encoding="utf-8", newline="") as f:
        f.write(buffer.text)


def _describe(result) -> str:
    if hasattr(result, "to_dict"):
        return json.dumps(result.to_dict())
    return str(result)


def _operations(fixer: ImportFixer) -> Dict[str, Callable[[SourceBuffer], object]]:
    return {
        'fix': fixer.fix_imports,
        'remove-unused': fixer.remove_unused_imports,
        'insert-missing': fixer.insert_missing_imports,
        'dedupe': fixer.remove_duplicate_imports,
        'sort': fixer.sort_imports,
        'save': fixer.on_save,
    }


def process_files(fixer: ImportFixer, command: str, paths: List[str], show_diff: bool = False) -> bool:
    """
    Apply ``command`` to every file in ``paths``.

    Files are written back only when their content changed, unless
    ``show_diff`` is set, in which case the diff is printed instead.
    A failure on one file is logged and the remaining files still run.

    Returns:
        bool: True if every file was processed without error.
    """
    operation = _operations(fixer)[command]
    ok = True

    for path in paths:
        try:
            buffer = load_buffer(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"❌ Cannot read {path}: {e}")
            ok = False
            continue

        original = buffer.text
        try:
            result = operation(buffer)
        except ImportFixerError as e:
            logger.error(f"❌ {path}: {e}")
            ok = False
            continue

        logger.debug(f"{command} {path}: {_describe(result)}")

        if buffer.text == original:
            continue

        if show_diff:
            sys.stdout.write(unified_diff(original, buffer.text, path))
        else:
            write_buffer(buffer)
            logger.info(f"✅ Updated {path}")

    return ok


def log_step_summary(fixer: ImportFixer) -> None:
    """Log per-step timing totals gathered over a run at DEBUG level."""
    for step, stats in fixer.timer.summary().items():
        logger.debug(
            f"Step {step}: {stats['count']} run(s), total {stats['total']:.3f}s, "
            f"mean {stats['mean']:.3f}s, max {stats['max']:.3f}s",
            extra={'step': step, 'phase': 'summary', **stats}
        )


def check_files(fixer: ImportFixer, paths: List[str]) -> int:
    """
    Print a table of unused imports and undefined names for ``paths``.

    Returns:
        int: Number of findings, or -1 if any file could not be checked.
    """
    from tabulate import tabulate

    rows = []
    failed = False
    for path in paths:
        try:
            findings = fixer.check(load_buffer(path))
        except (OSError, UnicodeDecodeError, ImportFixerError) as e:
            logger.error(f"❌ {path}: {e}")
            failed = True
            continue

        for finding in findings:
            rows.append([path, finding.line or "", finding.code, finding.value])

    if rows:
        print(tabulate(rows, headers=["File", "Line", "Code", "Name"], tablefmt="grid"))
    else:
        print("✅ No import problems found")

    return -1 if failed else len(rows)


def toggle_fix_on_save(config: Config, config_path: Optional[str]) -> bool:
    """Flip ``fix_on_save`` and persist it to the config file."""
    fixer = ImportFixer(config)
    enabled = fixer.toggle_fix_on_save()
    save_config(config, config_path or find_config_file() or DEFAULT_CONFIG_FILE)
    return enabled


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="import-fixer",
        description="Import Fixer - remove unused, add missing and sort Python imports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  import-fixer fix app.py                # Full fix-pass, rewrite in place
  import-fixer fix --diff app.py         # Show the changes without writing
  import-fixer remove-unused app.py      # Only remove unused imports
  import-fixer check src/*.py            # Report problems as a table
  import-fixer init-config               # Write import-fixer.yaml
  import-fixer toggle-fix-on-save        # Enable/disable the save hook
        """
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        help="Path to configuration file (default: ./import-fixer.yaml or ~/.import-fixer/config.yaml)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level (default: from config, INFO)"
    )

    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write logs to this file"
    )

    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default="text",
        help="Log record format (default: text)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Import Fixer {__version__}"
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    file_commands = {
        'fix': 'Remove unused, insert missing, deduplicate and sort imports',
        'remove-unused': 'Remove imports reported as unused',
        'insert-missing': 'Insert imports for undefined names',
        'dedupe': 'Remove duplicate import lines',
        'sort': 'Sort imports with the configured sorter',
        'save': 'Save hook: run the full fix-pass only when fix_on_save is enabled',
    }
    for name, help_text in file_commands.items():
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument('files', nargs='+', help='Python files to process')
        command_parser.add_argument(
            '--diff', action='store_true',
            help='Print a unified diff instead of rewriting the files'
        )

    check_parser = subparsers.add_parser('check', help='Report unused imports and undefined names')
    check_parser.add_argument('files', nargs='+', help='Python files to check')

    subparsers.add_parser('toggle-fix-on-save', help='Enable or disable fixing imports on save')

    init_parser = subparsers.add_parser('init-config', help='Write a default configuration file')
    init_parser.add_argument(
        'path', nargs='?', default=DEFAULT_CONFIG_FILE,
        help=f'Where to write the file (default: {DEFAULT_CONFIG_FILE})'
    )
    init_parser.add_argument('--force', action='store_true', help='Overwrite an existing file')

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    if args.command == 'init-config':
        if os.path.exists(args.path) and not args.force:
            print(f"⚠️  Configuration file already exists: {args.path} (use --force to overwrite)")
            sys.exit(1)
        create_default_config_file(args.path)
        print(f"✅ Configuration saved to {args.path}")
        return

    setup_logging(args.log_level or "INFO", args.log_file, structured=args.log_format == "json")

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logger.error(f"❌ Configuration error: {e}")
        print()
        print("💡 Tip: Run 'import-fixer init-config' to create a default configuration.")
        sys.exit(1)

    if args.log_level is None:
        logging.getLogger("import_fixer").setLevel(getattr(logging, config.log_level, logging.INFO))

    if args.command == 'toggle-fix-on-save':
        enabled = toggle_fix_on_save(config, args.config)
        print(f"Fix imports on save: {'enabled' if enabled else 'disabled'}")
        return

    fixer = ImportFixer(config)

    if args.command == 'check':
        count = check_files(fixer, args.files)
        if count != 0:
            sys.exit(1)
        return

    ok = process_files(fixer, args.command, args.files, show_diff=args.diff)
    log_step_summary(fixer)
    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
