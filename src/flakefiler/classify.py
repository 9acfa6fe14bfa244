#!/usr/bin/env python3
"""Classify CI builders by their declared tags.

The builder type decides which TESTOWNERS section holds its owner and
whether a bringup PR may be opened for it.
"""

import enum

TAG_SHARD = "shard"
TAG_DEVICELAB = "devicelab"
TAG_FRAMEWORK = "framework"
TAG_HOSTONLY = "hostonly"


class BuilderType(enum.Enum):
    SHARD = "shard"
    DEVICELAB = "devicelab"
    FRAMEWORK_HOST_ONLY = "framework_host_only"
    UNKNOWN = "unknown"


def classify_tags(tags: list | None) -> BuilderType:
    """Map a target's tags to a BuilderType.

    'shard' and 'devicelab' short-circuit in the order they appear, so
    whichever comes first wins. Otherwise a builder is framework host-only
    when both 'framework' and 'hostonly' are present. A builder without
    tags (or not declared at all) is UNKNOWN.
    """
    if not tags:
        return BuilderType.UNKNOWN
    has_framework = False
    has_hostonly = False
    for tag in tags:
        if tag == TAG_SHARD:
            return BuilderType.SHARD
        elif tag == TAG_DEVICELAB:
            return BuilderType.DEVICELAB
        elif tag == TAG_FRAMEWORK:
            has_framework = True
        elif tag == TAG_HOSTONLY:
            has_hostonly = True
    if has_framework and has_hostonly:
        return BuilderType.FRAMEWORK_HOST_ONLY
    return BuilderType.UNKNOWN
