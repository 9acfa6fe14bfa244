#!/usr/bin/env python3
"""Resolve test owners from a TESTOWNERS file.

TESTOWNERS is split into sections, one per builder type, each with its own
line format:

    ## Linux Android DeviceLab tests
    /dev/devicelab/bin/tasks/dart_plugin_registry_test.dart @stuartmorgan @flutter/plugin

    ## Host only framework tests
    # Linux analyze
    /dev/bots/analyze.dart @HansMuller @flutter/framework

    ## Shards tests
    # build_tests @zanderso @flutter/tool

Resolution is best-effort: a missing section or a line that does not fit the
expected shape yields no owner rather than an error.
"""

import logging
import re

from flakefiler.classify import BuilderType

logger = logging.getLogger(__name__)

OWNER_GROUP = "owners"

# DeviceLab tests are spread over several "## <platform> DeviceLab tests"
# headings, so the section runs until the first heading of another kind.
DEVICELAB_SECTION_RE = re.compile(
    rf"^## Linux Android DeviceLab tests\n(?P<{OWNER_GROUP}>.*?)(?=^## (?![^\n]*DeviceLab)|\Z)",
    re.MULTILINE | re.DOTALL,
)
FRAMEWORK_HOST_ONLY_SECTION_RE = re.compile(
    rf"^## Host only framework tests\n(?P<{OWNER_GROUP}>.*?)(?=^## |\Z)",
    re.MULTILINE | re.DOTALL,
)
SHARD_SECTION_RE = re.compile(
    rf"^## Shards tests\n(?P<{OWNER_GROUP}>.*?)(?=^## |\Z)",
    re.MULTILINE | re.DOTALL,
)


def get_test_name(builder_name: str) -> str:
    """Return the test part of a '<platform> <test name>' builder name."""
    words = builder_name.split()
    if not words:
        return ""
    return words[0] if len(words) < 2 else words[1]


def _section_lines(pattern: re.Pattern, content: str) -> list[str] | None:
    match = pattern.search(content)
    if not match or not match.group(OWNER_GROUP):
        return None
    return match.group(OWNER_GROUP).split("\n")


def _strip_handle(word: str) -> str:
    return word.removeprefix("@")


def _shard_owner(test_name: str, content: str) -> str | None:
    # e.g. '# build_tests @zanderso @flutter/tool'
    lines = _section_lines(SHARD_SECTION_RE, content)
    if lines is None:
        logger.debug("No shard section in TESTOWNERS")
        return None
    for line in lines:
        if "@" not in line:
            continue
        words = line.split()
        if len(words) < 3:
            continue
        # Shard rows name a prefix: 'build_tests' owns 'build_tests_1_4'.
        if words[1] in test_name:
            return _strip_handle(words[2])
    return None


def _devicelab_owner(test_name: str, content: str) -> str | None:
    # e.g. '/dev/devicelab/bin/tasks/foo_test.dart @stuartmorgan @flutter/plugin'
    lines = _section_lines(DEVICELAB_SECTION_RE, content)
    if lines is None:
        logger.debug("No devicelab section in TESTOWNERS")
        return None
    suffix = f"{test_name}.dart"
    for line in lines:
        words = line.split()
        if len(words) < 2:
            continue
        if words[0].endswith(suffix):
            return _strip_handle(words[1])
    return None


def _framework_host_only_owner(test_name: str, content: str) -> str | None:
    # A '# <platform> <test name>' header followed by the owned file line:
    #   # Linux analyze
    #   /dev/bots/analyze.dart @HansMuller @flutter/framework
    lines = _section_lines(FRAMEWORK_HOST_ONLY_SECTION_RE, content)
    if lines is None:
        logger.debug("No framework host only section in TESTOWNERS")
        return None
    lines = [line for line in lines if line.strip()]
    index = 0
    while index < len(lines):
        if lines[index].startswith("#") and index + 1 < len(lines):
            header_words = lines[index].split()
            index += 1
            if lines[index].startswith("#"):
                # Extra comment lines may precede the real header.
                continue
            owner_words = lines[index].split()
            if (len(header_words) >= 3 and header_words[2] in test_name
                    and len(owner_words) >= 2):
                return _strip_handle(owner_words[1])
        index += 1
    return None


_RESOLVERS = {
    BuilderType.SHARD: _shard_owner,
    BuilderType.DEVICELAB: _devicelab_owner,
    BuilderType.FRAMEWORK_HOST_ONLY: _framework_host_only_owner,
}


def resolve_owner(builder_name: str, builder_type: BuilderType,
                  test_owners_content: str) -> str | None:
    """Return the GitHub handle owning builder_name, or None if unknown."""
    resolver = _RESOLVERS.get(builder_type)
    if resolver is None:
        return None
    owner = resolver(get_test_name(builder_name), test_owners_content)
    if owner is None:
        logger.debug("No owner found for %s (%s)", builder_name, builder_type.value)
    return owner or None
