#!/usr/bin/env python3
"""File issues and bringup pull requests for flaky builders.

For every builder whose flaky rate reaches the threshold:

  1. classify it from its .ci.yaml tags and resolve its owner from TESTOWNERS;
  2. reuse its tracking issue, or file a new one when there is none or the
     last one was closed more than GRACE_PERIOD_DAYS ago;
  3. unless excluded, open a PR marking the builder `bringup: true` and ask
     the owner to review it.

Existing issues and PRs are looked up once per run, keyed by the builder
name embedded in their meta-tags.
"""

import csv
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import requests
import yaml
from github import GithubException

from flakefiler.ciyaml import (
    find_target,
    get_tags,
    has_builder_line,
    is_marked_flaky,
    load_targets,
    mark_builder_flaky,
)
from flakefiler.classify import BuilderType, classify_tags
from flakefiler.github import (
    assign_reviewer,
    create_issue,
    create_pull_request,
    get_default_branch,
    get_file_content,
    list_flake_issues,
    list_open_pull_requests,
)
from flakefiler.owners import resolve_owner
from flakefiler.stats import BuilderStatistic, load_statistics
from flakefiler.templates import (
    ISSUE_LABELS,
    TEAM_FLAKE_LABEL,
    branch_name,
    format_rate,
    issue_body,
    issue_title,
    parse_meta_tags,
    pull_request_body,
    pull_request_title,
)

logger = logging.getLogger(__name__)

STATUS_OK = 0
STATUS_ERROR = 1

GRACE_PERIOD_DAYS = 15
CI_YAML_PATH = ".ci.yaml"
TEST_OWNERS_PATH = "TESTOWNERS"


@dataclass(frozen=True)
class BuilderDecision:
    statistic: BuilderStatistic
    existing_issue: dict | None
    existing_pull_request: dict | None
    is_marked_flaky: bool
    type: BuilderType
    owner: str | None
    declared: bool = True


# ---------------------------------------------------------------------------
# Decisions (no I/O)
# ---------------------------------------------------------------------------

def _parse_time(value: str) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def needs_new_issue(issue: dict | None, now: datetime) -> bool:
    """Check if a new issue must be filed instead of reusing issue.

    A recently closed issue is kept: the flaky rate takes a while to come
    down after a fix lands.
    """
    if issue is None:
        return True
    if issue.get("state") != "closed":
        return False
    closed_at = _parse_time(issue.get("closed_at", ""))
    if closed_at is None:
        return False
    return now - closed_at > timedelta(days=GRACE_PERIOD_DAYS)


def should_open_pull_request(decision: BuilderDecision, issue: dict | None) -> bool:
    """Check if a bringup PR should be opened for this builder."""
    if issue is None:
        return False
    if decision.type == BuilderType.SHARD:
        return False
    if decision.existing_pull_request is not None or decision.is_marked_flaky:
        return False
    return decision.declared


def index_by_builder(items: list[dict]) -> dict[str, dict]:
    """Map builder name -> issue/PR using the meta-tags in each body.

    Items are expected newest first; the first one per builder wins.
    """
    index: dict[str, dict] = {}
    for item in items:
        tags = parse_meta_tags(item.get("body"))
        name = tags.get("name") if tags else None
        if isinstance(name, str) and name not in index:
            index[name] = item
    return index


def build_decisions(
    statistics: list[BuilderStatistic],
    threshold: float,
    ci_content: str,
    test_owners_content: str,
    issues_by_name: dict[str, dict],
    pulls_by_name: dict[str, dict],
) -> list[BuilderDecision]:
    """Build a decision for every builder at or above threshold, in order."""
    targets = load_targets(ci_content)
    decisions = []
    for stat in statistics:
        if stat.flaky_rate < threshold:
            continue
        target = find_target(targets, stat.name)
        declared = target is not None and has_builder_line(ci_content, stat.name)
        if target is None:
            logger.warning(
                "Builder %s is not declared in the CI config; "
                "no bringup PR will be opened", stat.name,
            )
        elif not declared:
            logger.warning(
                "Builder %s has no builder line that can be patched; "
                "no bringup PR will be opened", stat.name,
            )
        builder_type = classify_tags(get_tags(target))
        decisions.append(BuilderDecision(
            statistic=stat,
            existing_issue=issues_by_name.get(stat.name),
            existing_pull_request=pulls_by_name.get(stat.name),
            is_marked_flaky=is_marked_flaky(target),
            type=builder_type,
            owner=resolve_owner(stat.name, builder_type, test_owners_content),
            declared=declared,
        ))
    return decisions


# ---------------------------------------------------------------------------
# Filing
# ---------------------------------------------------------------------------

def file_issue_and_pr(
    repo: str,
    decision: BuilderDecision,
    threshold: float,
    ci_yaml_path: str = CI_YAML_PATH,
    now: datetime | None = None,
) -> tuple[dict, dict | None]:
    """File or reuse the issue, then open the bringup PR if warranted.

    Returns (issue, pull_request); pull_request is None when no PR was
    opened.
    """
    now = now or datetime.now(UTC)
    stat = decision.statistic

    issue = decision.existing_issue
    if needs_new_issue(issue, now):
        issue = create_issue(
            repo,
            title=issue_title(stat),
            body=issue_body(stat, threshold, repo),
            labels=ISSUE_LABELS,
            assignee=decision.owner,
        )
    else:
        logger.info("Reusing issue #%s for %s", issue["number"], stat.name)

    if not should_open_pull_request(decision, issue):
        return issue, None

    base = get_default_branch(repo)
    content = get_file_content(repo, ci_yaml_path, base["name"])
    title = pull_request_title(stat)
    pull = create_pull_request(
        repo,
        title=title,
        body=pull_request_body(stat, issue["url"]),
        commit_message=title,
        base=base,
        head=branch_name(stat.name, now),
        path=ci_yaml_path,
        content=mark_builder_flaky(content, stat.name, issue["url"]),
    )
    if decision.owner:
        assign_reviewer(repo, pull["number"], decision.owner)
    return issue, pull


def run(
    repo: str,
    stats_path: str,
    threshold: float,
    ci_yaml_path: str = CI_YAML_PATH,
    test_owners_path: str = TEST_OWNERS_PATH,
) -> int:
    """File issues and PRs for flaky builders. Returns status code."""
    try:
        statistics = load_statistics(stats_path)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        logger.error("Failed to read statistics: %s", e)
        return STATUS_ERROR

    if not any(s.flaky_rate >= threshold for s in statistics):
        logger.info("No builders at or above %s%% flaky rate.", format_rate(threshold))
        return STATUS_OK

    try:
        base = get_default_branch(repo)
        ci_content = get_file_content(repo, ci_yaml_path, base["name"])
        test_owners_content = get_file_content(repo, test_owners_path, base["name"])
        issues_by_name = index_by_builder(list_flake_issues(repo, TEAM_FLAKE_LABEL))
        pulls_by_name = index_by_builder(list_open_pull_requests(repo))
        decisions = build_decisions(
            statistics, threshold, ci_content, test_owners_content,
            issues_by_name, pulls_by_name,
        )
    except (GithubException, requests.RequestException, RuntimeError,
            yaml.YAMLError) as e:
        logger.error("Failed to load repository state: %s", e)
        return STATUS_ERROR

    logger.info("Processing %d flaky builders", len(decisions))

    now = datetime.now(UTC)
    failed = []
    for i, decision in enumerate(decisions, 1):
        name = decision.statistic.name
        logger.info(
            "[%d/%d] %s: %s%% flaky, type=%s, owner=%s",
            i, len(decisions), name, format_rate(decision.statistic.flaky_rate),
            decision.type.value, decision.owner or "-",
        )
        try:
            file_issue_and_pr(repo, decision, threshold, ci_yaml_path, now)
        except (GithubException, requests.RequestException, ValueError) as e:
            logger.error("Failed to file issue/PR for %s: %s", name, e)
            failed.append(name)

    if failed:
        logger.error("%d of %d builders failed: %s",
                     len(failed), len(decisions), ", ".join(failed))
        return STATUS_ERROR
    return STATUS_OK
