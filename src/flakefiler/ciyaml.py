#!/usr/bin/env python3
"""Read and patch .ci.yaml target declarations.

Reads go through PyYAML. Writes never do: marking a builder flaky is a
line-level patch of the one target block, so comments and formatting in
the rest of the file are kept byte for byte.
"""

import json
import logging
import re

import yaml

logger = logging.getLogger(__name__)

TARGETS_KEY = "targets"
BUILDER_KEY = "builder"
FLAKY_KEY = "bringup"
PROPERTIES_KEY = "properties"
TAGS_KEY = "tags"

# '    builder: Linux analyze' or '  - builder: "Linux analyze"  # comment'
BUILDER_LINE_RE = re.compile(
    rf"^(?P<indent>\s*(?:-\s+)?){BUILDER_KEY}:\s*(?P<name>.*?)\s*(?:#.*)?$"
)
FLAKY_LINE_RE = re.compile(rf"^\s*(?:-\s+)?{FLAKY_KEY}:")


# ---------------------------------------------------------------------------
# Target lookup (parsed)
# ---------------------------------------------------------------------------

def load_targets(content: str) -> list[dict]:
    """Return the list of target mappings declared in .ci.yaml content."""
    data = yaml.safe_load(content) or {}
    targets = data.get(TARGETS_KEY) if isinstance(data, dict) else None
    return [t for t in targets or [] if isinstance(t, dict)]


def find_target(targets: list[dict], builder_name: str) -> dict | None:
    """Return the first target whose builder is builder_name."""
    for target in targets:
        if target.get(BUILDER_KEY) == builder_name:
            return target
    return None


def get_tags(target: dict | None) -> list | None:
    """Return a target's tags, or None when the target is not declared.

    Tags are stored as a JSON array inside a string property, e.g.
    ``tags: >\\n  ["framework","hostonly"]``.
    """
    if target is None:
        return None
    properties = target.get(PROPERTIES_KEY) or {}
    raw = properties.get(TAGS_KEY) if isinstance(properties, dict) else None
    if raw is None:
        return []
    if isinstance(raw, list):
        return raw
    try:
        tags = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Could not parse tags for %s: %r",
                       target.get(BUILDER_KEY), raw)
        return []
    return tags if isinstance(tags, list) else []


def is_marked_flaky(target: dict | None) -> bool:
    """Check if a target already has bringup: true."""
    return target is not None and target.get(FLAKY_KEY) is True


# ---------------------------------------------------------------------------
# Text patch
# ---------------------------------------------------------------------------

def _builder_line_name(line: str) -> str | None:
    match = BUILDER_LINE_RE.match(line)
    if not match:
        return None
    return match.group("name").strip("'\"")


def find_target_block(lines: list[str], builder_name: str) -> tuple[int, int]:
    """Return (start, end) line indexes of the block declaring builder_name.

    start is the builder line itself; end is the next builder line or
    len(lines). Raises ValueError if the builder is not declared.
    """
    start = None
    for i, line in enumerate(lines):
        if _builder_line_name(line) == builder_name:
            start = i
            break
    if start is None:
        raise ValueError(f"Builder not declared in .ci.yaml: '{builder_name}'")
    end = start + 1
    while end < len(lines) and _builder_line_name(lines[end]) is None:
        end += 1
    return start, end


def has_builder_line(content: str, builder_name: str) -> bool:
    """True if mark_builder_flaky can locate builder_name in content."""
    return any(_builder_line_name(line) == builder_name for line in content.split("\n"))


def flaky_annotation(issue_url: str) -> str:
    return f"true # Flaky {issue_url}"


def mark_builder_flaky(content: str, builder_name: str, issue_url: str) -> str:
    """Return content with builder_name's target marked bringup: true.

    An existing bringup line in the block has its first 'false' flipped
    and annotated with issue_url; a line without 'false' is left alone.
    Without a bringup line, one is inserted right after the builder line
    at the indentation of its sibling keys.
    """
    lines = content.split("\n")
    start, end = find_target_block(lines, builder_name)

    for i in range(start + 1, end):
        if FLAKY_LINE_RE.match(lines[i]):
            lines[i] = lines[i].replace("false", flaky_annotation(issue_url), 1)
            return "\n".join(lines)

    indent = " " * len(BUILDER_LINE_RE.match(lines[start]).group("indent"))
    lines.insert(start + 1, f"{indent}{FLAKY_KEY}: {flaky_annotation(issue_url)}")
    return "\n".join(lines)
