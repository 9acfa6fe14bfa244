"""Shared fixtures and helpers for flakefiler tests."""

from flakefiler.templates import format_meta_tags


def make_stats_csv(rows):
    """Generate statistics CSV content from a list of row dicts.

    Each row dict should have name and flaky_rate, and optionally:
        flaky_number, total_number, recent_commit, flaky_build_url.
    """
    fieldnames = [
        "name", "flaky_rate", "flaky_number", "total_number",
        "recent_commit", "flaky_build_url",
    ]
    lines = [",".join(fieldnames)]
    for row in rows:
        values = [str(row.get(f, "")) for f in fieldnames]
        lines.append(",".join(values))
    return "\n".join(lines) + "\n"


def make_issue(number=1, name="Linux analyze", state="open", closed_at=""):
    """Generate an issue dict as returned by flakefiler.github."""
    return {
        "number": number,
        "url": f"https://github.com/org/repo/issues/{number}",
        "title": f"{name} is 12.00% flaky",
        "body": format_meta_tags(name) + "\nbody\n",
        "state": state,
        "closed_at": closed_at,
        "created_at": "2025-01-01T00:00:00Z",
    }


def make_pull(number=10, name="Linux analyze"):
    """Generate a pull request dict as returned by flakefiler.github."""
    return {
        "number": number,
        "url": f"https://github.com/org/repo/pull/{number}",
        "title": f"Marks {name} to be flaky",
        "body": format_meta_tags(name) + "\nIssue link: x\n",
    }


# Sample data constants

ISSUE_URL = "https://github.com/org/repo/issues/42"

SAMPLE_CI_YAML = """\
# Describes the targets run in continuous integration environment.
#
# Flutter infra uses this file to generate a checklist of tasks to be performed
# for every commit.
enabled_branches:
  - master

targets:
  - name: Linux analyze
    builder: Linux analyze
    properties:
      tags: >
        ["framework","hostonly"]
    scheduler: luci

  - name: Linux build_tests_1_4
    builder: Linux build_tests_1_4
    properties:
      tags: >
        ["shard"]
    scheduler: luci

  # Plugin registry runs on the Linux devicelab bots.
  - name: Linux dart_plugin_registry_test
    builder: Linux dart_plugin_registry_test
    bringup: false
    properties:
      tags: >
        ["devicelab","android","linux"]
    scheduler: luci

  - name: Mac flutter_gallery_ios__start_up
    builder: Mac flutter_gallery_ios__start_up
    bringup: true
    properties:
      tags: >
        ["devicelab","ios","mac"]
    scheduler: luci

  - name: Linux docs
    builder: Linux docs
    properties:
      tags: >
        ["framework","hostonly","linux"]
    scheduler: luci
"""

# Same target written as a flow mapping: PyYAML finds it, the line patch cannot.
FLOW_CI_YAML = (
    "targets:\n"
    "  - {builder: Linux analyze, properties: {tags: '[\"framework\",\"hostonly\"]'}}\n"
)

SAMPLE_TEST_OWNERS = """\
# Below is a list of Flutter team members' GitHub handles who are
# test owners of this repository.
#
# These owners are mainly team leaders and their sub-teams. Please feel free
# to claim ownership by adding your handle to corresponding tests.

## Linux Android DeviceLab tests
/dev/devicelab/bin/tasks/analyzer_benchmark.dart @zanderso @flutter/tool
/dev/devicelab/bin/tasks/dart_plugin_registry_test.dart @stuartmorgan @flutter/plugin

## Mac iOS DeviceLab tests
/dev/devicelab/bin/tasks/flutter_gallery_ios__start_up.dart @jmagman @flutter/engine

## Host only framework tests
# Linux analyze
/dev/bots/analyze.dart @HansMuller @flutter/framework
# Runs the API docs generator.
# Linux docs
/dev/bots/docs.sh @goderbauer @flutter/framework

## Firebase tests
/dev/integration_tests/abstract_method_smoke_test @blasten @flutter/android

## Shards tests
# TODO(keyonghan): add files/paths for below framework host only tests.
# https://github.com/flutter/flutter/issues/82068
#
# build_tests @zanderso @flutter/tool
# framework_coverage @godofredoc @flutter/infra
"""
