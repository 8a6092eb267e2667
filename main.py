"""history-merge — merge two chat-history logs, or two directories of them."""

import logging
import os
import sys
from argparse import ArgumentParser

from history_merge.config import Config, load_config, load_yaml_config
from history_merge.errors import HistoryMergeError, LogIOError, StructureMismatchError
from history_merge.merger import STDOUT_PATH, merge_files
from history_merge.reconciler import build_plan, reconcile

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="history-merge",
        description=(
            "Merge two history files, or two directories of history files, "
            "into one ordered log without duplicate entries. If OUT is "
            "omitted the result replaces SRC1."
        ),
    )
    parser.add_argument("src1", metavar="SRC1", help="First history file or directory")
    parser.add_argument("src2", metavar="SRC2", help="Second history file or directory")
    parser.add_argument(
        "out",
        metavar="OUT",
        nargs="?",
        help="Output file or directory (default: SRC1). '-' writes a merged file to stdout",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would be merged or copied, then exit",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def _check_sources(src1: str, src2: str) -> bool:
    """Validate the two sources and return True for directory mode."""
    for path in (src1, src2):
        if not os.path.exists(path):
            raise LogIOError("No such file or directory", path=path)

    src1_is_dir = os.path.isdir(src1)
    if src1_is_dir != os.path.isdir(src2):
        raise StructureMismatchError(
            f"both sources must be directories or both files, got {src1} and {src2}"
        )
    return src1_is_dir


def run(args, config: Config) -> int:
    """Validate arguments and run the merge. Returns the exit status."""
    is_dir_mode = _check_sources(args.src1, args.src2)
    out = args.out or args.src1

    if is_dir_mode:
        if out == STDOUT_PATH or (os.path.exists(out) and not os.path.isdir(out)):
            raise StructureMismatchError("output has to be a directory", path=out)

        if args.dry_run:
            for entry in build_plan(args.src1, args.src2, config.skip_hidden):
                print(f"{entry.action.value:12s} {entry.name}")
            return 0

        result = reconcile(
            args.src1,
            args.src2,
            out,
            skip_hidden=config.skip_hidden,
            create_output_dir=config.create_output_dir,
        )
        if not result.ok:
            logger.error("%d file(s) failed: %s", len(result.failures),
                         ", ".join(sorted(result.failures)))
            return 1
        return 0

    if os.path.isdir(out):
        raise StructureMismatchError("output has to be a file", path=out)

    if args.dry_run:
        print(f"merge {args.src1} + {args.src2} -> {out}")
        return 0

    merge_files(args.src1, args.src2, out)
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(load_yaml_config(args.config))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format="%(asctime)s [history-merge] %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        return run(args, config)
    except HistoryMergeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cli():
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(1)
    except BrokenPipeError:
        sys.exit(0)


if __name__ == "__main__":
    cli()
