"""Subcommand dispatcher for clipmerge.

Usage:
    clipmerge merge   a.mp4 b.mp4 --output-dir merged/
    clipmerge merge   --manifest merge.yaml --output-dir merged/
    clipmerge probe   a.mp4 b.mp4 --thumbnails thumbs/
"""

import argparse
import sys


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="clipmerge",
        description="Merge video clips into one file, in order.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands. Each delegates to its own module's main().
    subparsers.add_parser("merge", help="Merge clips into one video")
    subparsers.add_parser("probe", help="Show clip durations and sizes")

    # Parse only the subcommand name, pass the rest to the subcommand's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command is None:
        parser.print_help()
        sys.exit(1)

    if parsed.command == "merge":
        from .merge_cli import main as merge_main
        merge_main(remaining)
    elif parsed.command == "probe":
        from .probe_cli import main as probe_main
        probe_main(remaining)


if __name__ == "__main__":
    main()
