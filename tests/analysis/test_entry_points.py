"""Tests for entry point selection."""

from zombie_detector.analysis.entry_points import EntryPointPolicy, select_entry_points
from zombie_detector.analysis.symbols import FileId
from zombie_detector.config import DetectorConfig

ROOT = "/project"


def _policy(**overrides):
    return EntryPointPolicy(ROOT, DetectorConfig(**overrides))


def _nodes(*rel_paths):
    return {f"{ROOT}/{rel}": FileId(f"{ROOT}/{rel}") for rel in rel_paths}


class TestEntryPointPolicy:
    """Each predicate on its own."""

    def test_front_controller_anywhere_case_insensitive(self):
        policy = _policy()
        assert policy.reasons(f"{ROOT}/web/sub/INDEX.php") == ["front-controller"]

    def test_public_dir(self):
        assert "public" in _policy().reasons(f"{ROOT}/public/assets/router.php")

    def test_cli_dir(self):
        assert _policy().reasons(f"{ROOT}/bin/console.php") == ["cli"]

    def test_root_file(self):
        assert _policy().reasons(f"{ROOT}/bootstrap.php") == ["root"]

    def test_root_files_can_be_disabled(self):
        assert not _policy(include_root_files=False).is_entry_point(f"{ROOT}/bootstrap.php")

    def test_test_dir_prefix_and_segment(self):
        policy = _policy()
        assert policy.reasons(f"{ROOT}/tests/UserTest.php") == ["tests"]
        assert policy.reasons(f"{ROOT}/test/UserTest.php") == ["tests"]
        assert policy.reasons(f"{ROOT}/modules/billing/tests/InvoiceTest.php") == ["tests"]

    def test_tests_excluded_when_disabled(self):
        policy = _policy(include_tests=False)
        assert not policy.is_entry_point(f"{ROOT}/tests/UserTest.php")

    def test_directory_names_must_match_whole_segment(self):
        policy = _policy()
        assert not policy.is_entry_point(f"{ROOT}/src/publications/Feed.php")
        assert not policy.is_entry_point(f"{ROOT}/src/latest/Feed.php")
        assert not policy.is_entry_point(f"{ROOT}/binary/Tool.php")

    def test_ordinary_source_file_is_not_entry_point(self):
        assert _policy().reasons(f"{ROOT}/src/Models/User.php") == []

    def test_configured_globs(self):
        policy = _policy(entry_point_globs=["app/Http/Controllers/*.php"])
        assert policy.reasons(f"{ROOT}/app/Http/Controllers/HomeController.php") == ["glob"]
        assert not policy.is_entry_point(f"{ROOT}/app/Models/User.php")

    def test_custom_front_controller_names(self):
        policy = _policy(front_controller_names=["app.php"])
        assert policy.is_entry_point(f"{ROOT}/web/app.php")
        assert not policy.is_entry_point(f"{ROOT}/web/index.php")

    def test_file_outside_project_only_matches_by_name(self):
        policy = _policy()
        assert policy.relative("/elsewhere/lib.php") is None
        assert not policy.is_entry_point("/elsewhere/lib.php")
        assert policy.is_entry_point("/elsewhere/index.php")

    def test_multiple_reasons(self):
        assert _policy().reasons(f"{ROOT}/public/index.php") == ["front-controller", "public"]


class TestSelectEntryPoints:
    def test_selects_file_identities(self):
        nodes = _nodes("public/index.php", "src/User.php", "bin/run.php", "tests/UserTest.php")
        selected = select_entry_points(nodes, ROOT, DetectorConfig())
        assert selected == {
            FileId(f"{ROOT}/public/index.php"),
            FileId(f"{ROOT}/bin/run.php"),
            FileId(f"{ROOT}/tests/UserTest.php"),
        }

    def test_excluding_tests_is_monotone(self):
        nodes = _nodes("public/index.php", "tests/UserTest.php")
        with_tests = select_entry_points(nodes, ROOT, DetectorConfig(include_tests=True))
        without = select_entry_points(nodes, ROOT, DetectorConfig(include_tests=False))
        assert without < with_tests

    def test_custom_policy_replaces_default(self):
        class OnlyBin(EntryPointPolicy):
            def is_entry_point(self, path):
                return "/bin/" in path

        nodes = _nodes("public/index.php", "bin/run.php")
        policy = OnlyBin(ROOT, DetectorConfig())
        assert select_entry_points(nodes, ROOT, DetectorConfig(), policy) == {
            FileId(f"{ROOT}/bin/run.php")
        }
