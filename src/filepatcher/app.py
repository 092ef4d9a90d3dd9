"""file-patcher command-line entrypoint (lifecycle verbs + CLI selftest)."""

from __future__ import annotations

import argparse
import logging
import sys

from .core.applier import DEFAULT_APPLY_OPTIONS
from .core.errors import ApplyConflictError, PatchError
from .core.lifecycle import PatchLifecycleManager, DEFAULT_STORAGE_ROOT
from .core.selftests import FilePatcherSelfTests

logger = logging.getLogger("filepatcher")
_handler: logging.Handler | None = None


def _run_selftests_cli() -> int:
    ok, report = FilePatcherSelfTests.run()
    print(report)
    return 0 if ok else 2


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    global _handler
    if _handler is not None:
        logger.removeHandler(_handler)
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(_handler)
    logger.setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="file-patcher",
        description="A tool for creating and applying patches to source files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Workflow:
  file-patcher create src/app.py    # snapshot into patches/app.py/app.py, then edit that copy
  file-patcher commit src/app.py    # write patches/app.py/app.py.patch
  file-patcher apply src/app.py     # src/app.py becomes a symlink to the patched result
  file-patcher revert src/app.py    # restore the pre-apply file
""",
    )
    parser.add_argument("--root", default=DEFAULT_STORAGE_ROOT,
                        help=f"Directory holding patch records (default: {DEFAULT_STORAGE_ROOT})")
    parser.add_argument("--fuzz", type=int, default=DEFAULT_APPLY_OPTIONS["fuzz_factor"],
                        help="Context lines per hunk allowed to mismatch on apply (default: %(default)s)")
    parser.add_argument("--window", type=int, default=DEFAULT_APPLY_OPTIONS["fuzzy_window_size"],
                        help="Lines a hunk may drift from its recorded position (default: %(default)s)")
    parser.add_argument("--ignore-whitespace", action="store_true",
                        help="Ignore whitespace differences when matching hunks")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Verbose logging (-vv for debug)")
    parser.add_argument("--selftest", action="store_true", help="Run in-process self tests and exit")

    sub = parser.add_subparsers(dest="command", metavar="<command>")
    for name, help_text in (
        ("create", "Create a patch for the specified file"),
        ("commit", "Generate patch file from the modified copy"),
        ("apply", "Apply patch to the original file"),
        ("revert", "Revert patch from the file"),
        ("status", "Show the patch state of the file"),
    ):
        cmd = sub.add_parser(name, help=help_text, description=help_text)
        cmd.add_argument("file")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.selftest:
        return _run_selftests_cli()
    if not args.command:
        parser.print_help(sys.stderr)
        return 1

    manager = PatchLifecycleManager(
        storage_root=args.root,
        options={
            "fuzz_factor": args.fuzz,
            "fuzzy_window_size": args.window,
            "ignore_whitespace_differences": args.ignore_whitespace,
        },
    )
    file = args.file

    try:
        if args.command == "create":
            record = manager.create(file)
            print(f"Patch environment created for {file}")
            print(f"Edit {record.snapshot_path}, then run: file-patcher commit {file}")
        elif args.command == "commit":
            manager.commit_patch(file)
            print(f"Patch file generated for {file}")
        elif args.command == "apply":
            manager.apply_patch(file)
            print(f"Patch applied to {file}")
        elif args.command == "revert":
            if manager.revert_patch(file):
                print(f"Patch reverted from {file}")
            else:
                print(f"Nothing to revert for {file}")
        elif args.command == "status":
            print(f"{file}: {manager.status(file).value}")
    except ApplyConflictError as e:
        for diag in e.diagnostics:
            if "attempted_line_1b" in diag:
                logger.info("%s: attempted at line %d, expected %r, found %r", diag["hunk_header"],
                            diag["attempted_line_1b"], diag["expected_excerpt"], diag["actual_excerpt"])
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except PatchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
