"""Tests for flakefiler.owners -- TESTOWNERS section parsing."""

from conftest import SAMPLE_TEST_OWNERS

from flakefiler.classify import BuilderType
from flakefiler.owners import get_test_name, resolve_owner

# ---------------------------------------------------------------------------
# get_test_name
# ---------------------------------------------------------------------------

class TestGetTestName:
    def test_platform_and_test(self):
        assert get_test_name("Linux analyze") == "analyze"

    def test_single_token(self):
        assert get_test_name("analyze") == "analyze"

    def test_extra_tokens_ignored(self):
        assert get_test_name("Mac_ios hot_mode_dev_cycle extra") == "hot_mode_dev_cycle"

    def test_empty(self):
        assert get_test_name("") == ""


# ---------------------------------------------------------------------------
# resolve_owner -- shard
# ---------------------------------------------------------------------------

class TestShardOwner:
    def test_minimal_section(self):
        content = "## Shards tests\n# build_test @zanderso @flutter/tool\n"
        assert resolve_owner("Linux build_test", BuilderType.SHARD, content) == "zanderso"

    def test_shard_suffix_matches(self):
        owner = resolve_owner("Linux build_tests_1_4", BuilderType.SHARD, SAMPLE_TEST_OWNERS)
        assert owner == "zanderso"

    def test_second_entry(self):
        owner = resolve_owner(
            "Linux framework_coverage", BuilderType.SHARD, SAMPLE_TEST_OWNERS,
        )
        assert owner == "godofredoc"

    def test_first_match_wins(self):
        content = (
            "## Shards tests\n"
            "# web_tests @yjbanov @flutter/web\n"
            "# web_tests @ferhatb @flutter/web\n"
        )
        assert resolve_owner("Linux web_tests_2", BuilderType.SHARD, content) == "yjbanov"

    def test_no_match(self):
        assert resolve_owner("Linux unknown_shard", BuilderType.SHARD, SAMPLE_TEST_OWNERS) is None

    def test_missing_section(self):
        content = "## Host only framework tests\n# Linux analyze\n/a.dart @x @y\n"
        assert resolve_owner("Linux build_test", BuilderType.SHARD, content) is None

    def test_short_line_skipped(self):
        content = "## Shards tests\n# @lonely\n# build_test @zanderso\n"
        assert resolve_owner("Linux build_test", BuilderType.SHARD, content) == "zanderso"

    def test_stops_at_next_section(self):
        content = (
            "## Shards tests\n"
            "# build_tests @zanderso @flutter/tool\n"
            "## Other tests\n"
            "# analyze_tests @someone @flutter/tool\n"
        )
        assert resolve_owner("Linux analyze_tests", BuilderType.SHARD, content) is None


# ---------------------------------------------------------------------------
# resolve_owner -- devicelab
# ---------------------------------------------------------------------------

class TestDevicelabOwner:
    def test_minimal_section(self):
        content = (
            "## Linux Android DeviceLab tests\n"
            "/dev/devicelab/bin/tasks/dart_plugin_registry_test.dart "
            "@stuartmorgan @flutter/plugin\n"
        )
        owner = resolve_owner(
            "Linux dart_plugin_registry_test", BuilderType.DEVICELAB, content,
        )
        assert owner == "stuartmorgan"

    def test_later_devicelab_heading_included(self):
        owner = resolve_owner(
            "Mac flutter_gallery_ios__start_up", BuilderType.DEVICELAB, SAMPLE_TEST_OWNERS,
        )
        assert owner == "jmagman"

    def test_unlisted_task(self):
        owner = resolve_owner(
            "Linux dart_plugin_registry_test_extra", BuilderType.DEVICELAB, SAMPLE_TEST_OWNERS,
        )
        assert owner is None

    def test_first_task_in_section(self):
        owner = resolve_owner(
            "Linux analyzer_benchmark", BuilderType.DEVICELAB, SAMPLE_TEST_OWNERS,
        )
        assert owner == "zanderso"

    def test_host_only_section_not_searched(self):
        owner = resolve_owner("Linux analyze", BuilderType.DEVICELAB, SAMPLE_TEST_OWNERS)
        assert owner is None

    def test_ends_at_first_other_heading(self):
        content = (
            "## Linux Android DeviceLab tests\n"
            "/dev/devicelab/bin/tasks/foo_test.dart @a @flutter/tool\n"
            "## Host only framework tests\n"
            "/dev/devicelab/bin/tasks/bar_test.dart @b @flutter/tool\n"
            "## Notes\n"
            "DeviceLab bots are slow.\n"
        )
        assert resolve_owner("Linux bar_test", BuilderType.DEVICELAB, content) is None
        assert resolve_owner("Linux foo_test", BuilderType.DEVICELAB, content) == "a"

    def test_missing_section(self):
        assert resolve_owner("Linux foo", BuilderType.DEVICELAB, "") is None


# ---------------------------------------------------------------------------
# resolve_owner -- framework host only
# ---------------------------------------------------------------------------

class TestFrameworkHostOnlyOwner:
    def test_minimal_section(self):
        content = (
            "## Host only framework tests\n"
            "# Linux analyze\n"
            "/dev/bots/analyze.dart @HansMuller @flutter/framework"
        )
        owner = resolve_owner("Linux analyze", BuilderType.FRAMEWORK_HOST_ONLY, content)
        assert owner == "HansMuller"

    def test_extra_comment_before_header(self):
        owner = resolve_owner(
            "Linux docs", BuilderType.FRAMEWORK_HOST_ONLY, SAMPLE_TEST_OWNERS,
        )
        assert owner == "goderbauer"

    def test_blank_lines_ignored(self):
        content = (
            "## Host only framework tests\n"
            "# Linux analyze\n"
            "\n"
            "/dev/bots/analyze.dart @HansMuller @flutter/framework\n"
        )
        owner = resolve_owner("Linux analyze", BuilderType.FRAMEWORK_HOST_ONLY, content)
        assert owner == "HansMuller"

    def test_no_match(self):
        owner = resolve_owner(
            "Linux customer_testing", BuilderType.FRAMEWORK_HOST_ONLY, SAMPLE_TEST_OWNERS,
        )
        assert owner is None

    def test_trailing_header_without_entry(self):
        content = "## Host only framework tests\n# Linux analyze\n"
        assert resolve_owner("Linux analyze", BuilderType.FRAMEWORK_HOST_ONLY, content) is None

    def test_short_header_skipped(self):
        content = (
            "## Host only framework tests\n"
            "# misc\n"
            "/dev/bots/misc.dart @someone @flutter/framework\n"
            "# Linux analyze\n"
            "/dev/bots/analyze.dart @HansMuller @flutter/framework\n"
        )
        owner = resolve_owner("Linux analyze", BuilderType.FRAMEWORK_HOST_ONLY, content)
        assert owner == "HansMuller"

    def test_firebase_section_excluded(self):
        owner = resolve_owner(
            "Linux abstract_method_smoke_test",
            BuilderType.FRAMEWORK_HOST_ONLY,
            SAMPLE_TEST_OWNERS,
        )
        assert owner is None


# ---------------------------------------------------------------------------
# resolve_owner -- unknown
# ---------------------------------------------------------------------------

class TestUnknownOwner:
    def test_never_resolved(self):
        assert resolve_owner("Linux analyze", BuilderType.UNKNOWN, SAMPLE_TEST_OWNERS) is None
