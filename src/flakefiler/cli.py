#!/usr/bin/env python3
"""Unified CLI for flakefiler -- flaky builder issue and PR filer."""

import argparse
import logging
import sys
from pathlib import Path

from flakefiler import __version__

STATUS_OK = 0
STATUS_ERROR = 1


def _read_text(path: str) -> str:
    return Path(path).read_text()


def cmd_file(args):
    from flakefiler.flakes import run
    from flakefiler.stats import parse_threshold

    logger = logging.getLogger(__name__)
    try:
        threshold = parse_threshold(args.threshold)
    except ValueError as e:
        logger.error("%s", e)
        return STATUS_ERROR
    return run(
        args.repo, args.stats, threshold,
        ci_yaml_path=args.ci_yaml, test_owners_path=args.test_owners,
    )


def cmd_owner(args):
    """Print the type and owner of a builder from local files."""
    from flakefiler.ciyaml import find_target, get_tags, load_targets
    from flakefiler.classify import classify_tags
    from flakefiler.owners import resolve_owner

    targets = load_targets(_read_text(args.ci_yaml))
    builder_type = classify_tags(get_tags(find_target(targets, args.builder)))
    owner = resolve_owner(args.builder, builder_type, _read_text(args.test_owners))
    print(f"{args.builder}\t{builder_type.value}\t{owner or '-'}")
    return STATUS_OK if owner else STATUS_ERROR


def cmd_mark(args):
    """Mark a builder flaky in a local .ci.yaml."""
    from flakefiler.ciyaml import mark_builder_flaky

    logger = logging.getLogger(__name__)
    try:
        content = mark_builder_flaky(_read_text(args.ci_yaml), args.builder, args.url)
    except ValueError as e:
        logger.error("%s", e)
        return STATUS_ERROR
    output = args.output or args.ci_yaml
    Path(output).write_text(content)
    logger.info("Wrote %s", output)
    return STATUS_OK


def main():
    parser = argparse.ArgumentParser(
        prog="flakefiler",
        description="Files issues and bringup PRs for flaky CI builders",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Enable debug logging (verbose output)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- file ---
    p_file = subparsers.add_parser(
        "file", help="File issues and PRs for builders above the flaky threshold",
    )
    p_file.add_argument(
        "--repo", required=True,
        help="Target repository (owner/name)",
    )
    p_file.add_argument(
        "--threshold", required=True,
        help="Flaky rate threshold between 0 and 1, e.g. 0.02",
    )
    p_file.add_argument(
        "--stats", default="builder_statistics.csv",
        help="Builder statistics CSV (default: builder_statistics.csv)",
    )
    p_file.add_argument(
        "--ci-yaml", default=".ci.yaml",
        help="Path of the CI config in the repository (default: .ci.yaml)",
    )
    p_file.add_argument(
        "--test-owners", default="TESTOWNERS",
        help="Path of the test owners file in the repository (default: TESTOWNERS)",
    )
    p_file.set_defaults(func=cmd_file)

    # --- owner ---
    p_owner = subparsers.add_parser(
        "owner", help="Resolve a builder's owner from local files",
    )
    p_owner.add_argument(
        "--builder", required=True,
        help="Builder name, e.g. 'Linux analyze'",
    )
    p_owner.add_argument(
        "--ci-yaml", default=".ci.yaml",
        help="Local CI config file (default: .ci.yaml)",
    )
    p_owner.add_argument(
        "--test-owners", default="TESTOWNERS",
        help="Local test owners file (default: TESTOWNERS)",
    )
    p_owner.set_defaults(func=cmd_owner)

    # --- mark ---
    p_mark = subparsers.add_parser(
        "mark", help="Mark a builder as flaky in a local CI config",
    )
    p_mark.add_argument(
        "--builder", required=True,
        help="Builder name, e.g. 'Linux analyze'",
    )
    p_mark.add_argument(
        "--url", required=True,
        help="Tracking issue URL to annotate the bringup line with",
    )
    p_mark.add_argument(
        "--ci-yaml", default=".ci.yaml",
        help="Local CI config file (default: .ci.yaml)",
    )
    p_mark.add_argument(
        "--output", default=None,
        help="Write the result here instead of editing --ci-yaml in place",
    )
    p_mark.set_defaults(func=cmd_mark)

    args = parser.parse_args()

    level = logging.DEBUG if args.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=(
            "%(message)s" if level == logging.INFO
            else "%(asctime)s %(name)s %(levelname)s %(message)s"
        ),
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
