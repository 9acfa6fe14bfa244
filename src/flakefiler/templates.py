"""Issue and pull request text for flaky builders.

Every issue and PR body carries a meta-tag block naming the builder, which
is how later runs find what was already filed.
"""

import json
import re
from datetime import datetime

from flakefiler.stats import BuilderStatistic

TEAM_FLAKE_LABEL = "team: flakes"
SEVERE_FLAKE_LABEL = "severe: flake"
PRIORITY_LABEL = "P1"
ISSUE_LABELS = [TEAM_FLAKE_LABEL, SEVERE_FLAKE_LABEL, PRIORITY_LABEL]

FLAKINESS_GUIDE_URL = (
    "https://github.com/flutter/flutter/wiki/Reducing-Test-Flakiness#fixing-flaky-tests"
)

META_TAG_HEADER = "<!-- meta-tags: To be used by the automation script only, DO NOT MODIFY."
META_TAG_RE = re.compile(
    re.escape(META_TAG_HEADER) + r"\s*(?P<tags>\{.*?\})\s*-->",
    re.DOTALL,
)


def format_rate(rate: float) -> str:
    """0.1234 -> '12.34'"""
    return f"{rate * 100:.2f}"


def format_meta_tags(builder_name: str) -> str:
    tags = json.dumps({"name": builder_name}, indent=2)
    return f"{META_TAG_HEADER}\n{tags}\n-->"


def parse_meta_tags(body: str | None) -> dict | None:
    """Return the meta-tag dict embedded in an issue/PR body, if any."""
    if not body:
        return None
    match = META_TAG_RE.search(body)
    if not match:
        return None
    try:
        tags = json.loads(match.group("tags"))
    except json.JSONDecodeError:
        return None
    return tags if isinstance(tags, dict) else None


def issue_title(statistic: BuilderStatistic) -> str:
    return f"{statistic.name} is {format_rate(statistic.flaky_rate)}% flaky"


def issue_body(statistic: BuilderStatistic, threshold: float, repo: str) -> str:
    lines = [
        format_meta_tags(statistic.name),
        "",
        f"The post-submit test builder `{statistic.name}` had a flaky ratio "
        f"{format_rate(statistic.flaky_rate)}% for the past (up to) 100 commits, "
        f"which is above our {format_rate(threshold)}% threshold.",
    ]
    if statistic.total_number:
        lines += [
            "",
            f"Flaky runs: {statistic.flaky_number} of {statistic.total_number}",
        ]
    if statistic.flaky_build_url:
        lines += ["", f"One recent flaky example: {statistic.flaky_build_url}"]
    if statistic.recent_commit:
        lines.append(
            f"Commit: https://github.com/{repo}/commit/{statistic.recent_commit}"
        )
    lines += [
        "",
        f"Please follow {FLAKINESS_GUIDE_URL} to fix the flakiness and enable "
        "the test back after validating the fix.",
    ]
    return "\n".join(lines) + "\n"


def pull_request_title(statistic: BuilderStatistic) -> str:
    return f"Marks {statistic.name} to be flaky"


def pull_request_body(statistic: BuilderStatistic, issue_url: str) -> str:
    return f"{format_meta_tags(statistic.name)}\nIssue link: {issue_url}\n"


def branch_name(builder_name: str, now: datetime) -> str:
    """Head branch for a bringup PR, e.g. 'flaky-linux-analyze-20250115100000'."""
    slug = re.sub(r"[^a-z0-9]+", "-", builder_name.lower()).strip("-")
    return f"flaky-{slug}-{now.strftime('%Y%m%d%H%M%S')}"
