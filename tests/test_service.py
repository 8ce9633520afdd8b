"""Tests for single-flight scheduling in AnalysisService."""

import shutil
import threading

import pytest

from zombie_detector.analysis.symbols import FunctionId
from zombie_detector.exceptions import AnalysisCancelled
from zombie_detector.service import AnalysisService, AnalysisStatus, compute_source_version


class FakeRunner:
    """Records calls and returns queued results (exceptions are raised)."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0
        self.tokens = []
        self.during_run = None

    def __call__(self, root, config, cancel=None):
        self.calls += 1
        self.tokens.append(cancel)
        if self.during_run is not None:
            hook, self.during_run = self.during_run, None
            hook()
        result = self.results.pop(0) if self.results else object()
        if isinstance(result, BaseException):
            raise result
        return result


def _service(tmp_path, runner):
    return AnalysisService(tmp_path, runner=runner, background=False)


class TestRequestAnalysis:
    """Version-based dropping and coalescing."""

    def test_first_request_runs_and_publishes(self, tmp_path):
        snapshot = object()
        runner = FakeRunner(snapshot)
        service = _service(tmp_path, runner)

        assert service.status is AnalysisStatus.NOT_COMPUTED
        assert service.request_analysis(1) is True
        assert runner.calls == 1
        assert service.get_snapshot() is snapshot
        assert service.current_snapshot is snapshot
        assert service.status is AnalysisStatus.READY
        assert service.last_seen_version == 1
        assert not service.in_flight

    def test_unchanged_version_is_dropped(self, tmp_path):
        runner = FakeRunner()
        service = _service(tmp_path, runner)
        service.request_analysis(1)
        assert service.request_analysis(1) is False
        assert runner.calls == 1

    def test_new_version_runs_again(self, tmp_path):
        runner = FakeRunner()
        service = _service(tmp_path, runner)
        service.request_analysis(1)
        assert service.request_analysis(2) is True
        assert runner.calls == 2

    def test_request_during_run_is_coalesced(self, tmp_path):
        runner = FakeRunner()
        service = _service(tmp_path, runner)
        accepted = []

        def burst():
            accepted.extend(service.request_analysis(v) for v in (2, 3, 4))

        runner.during_run = burst
        service.request_analysis(1)

        assert accepted == [True, True, True]
        # One run for version 1, one follow-up for the latest version
        assert runner.calls == 2
        assert service.last_seen_version == 4

    def test_same_version_during_run_drops_follow_up(self, tmp_path):
        runner = FakeRunner()
        service = _service(tmp_path, runner)
        accepted = []

        def requests():
            accepted.append(service.request_analysis(2))
            accepted.append(service.request_analysis(1))

        runner.during_run = requests
        service.request_analysis(1)
        assert accepted == [True, False]
        assert runner.calls == 1

    def test_empty_project_publishes_none(self, tmp_path):
        seen = []
        service = _service(tmp_path, FakeRunner(None))
        service.add_listener(seen.append)
        service.request_analysis(1)
        assert seen == [None]
        assert service.status is AnalysisStatus.EMPTY
        assert service.get_snapshot() is None

    def test_snapshot_and_status_are_published_together(self, tmp_path):
        first, second = object(), None
        service = _service(tmp_path, FakeRunner(first, second))
        assert service.published() == (None, AnalysisStatus.NOT_COMPUTED)

        service.request_analysis(1)
        assert service.published() == (first, AnalysisStatus.READY)
        service.request_analysis(2)
        assert service.published() == (None, AnalysisStatus.EMPTY)


class TestFailureAndCancellation:
    def test_cancelled_run_keeps_previous_snapshot(self, tmp_path):
        first = object()
        runner = FakeRunner(first, AnalysisCancelled("parsing"))
        service = _service(tmp_path, runner)
        seen = []
        service.request_analysis(1)
        service.add_listener(seen.append)

        service.request_analysis(2)
        assert service.get_snapshot() is first
        assert seen == []
        assert service.last_seen_version is None

    def test_failed_run_can_be_retried(self, tmp_path):
        snapshot = object()
        runner = FakeRunner(RuntimeError("boom"), snapshot)
        service = _service(tmp_path, runner)

        service.request_analysis(1)
        assert service.status is AnalysisStatus.NOT_COMPUTED
        assert service.request_analysis(1) is True
        assert service.get_snapshot() is snapshot

    def test_cancel_signals_token_and_drops_follow_up(self, tmp_path):
        runner = FakeRunner()
        service = _service(tmp_path, runner)

        def cancel_mid_run():
            service.request_analysis(2)
            service.cancel()

        runner.during_run = cancel_mid_run
        service.request_analysis(1)
        assert runner.tokens[0].is_cancelled
        assert runner.calls == 1

    def test_listener_errors_are_contained(self, tmp_path):
        service = _service(tmp_path, FakeRunner())
        seen = []

        def broken(snapshot):
            raise ValueError("listener bug")

        service.add_listener(broken)
        service.add_listener(seen.append)
        service.request_analysis(1)
        assert len(seen) == 1


class TestDispose:
    def test_requests_after_dispose_are_no_ops(self, tmp_path):
        runner = FakeRunner()
        service = _service(tmp_path, runner)
        service.dispose()
        assert service.disposed
        assert service.request_analysis(1) is False
        assert runner.calls == 0

    def test_dispose_during_run_discards_result(self, tmp_path):
        runner = FakeRunner()
        service = _service(tmp_path, runner)
        seen = []
        service.add_listener(seen.append)
        runner.during_run = service.dispose

        service.request_analysis(1)
        assert service.get_snapshot() is None
        assert seen == []
        assert runner.tokens[0].is_cancelled


class TestBackground:
    def test_worker_thread_run(self, tmp_path):
        started = threading.Event()
        release = threading.Event()

        def runner(root, config, cancel=None):
            started.set()
            release.wait(5)
            return "snapshot"

        service = AnalysisService(tmp_path, runner=runner)
        assert service.request_analysis(1) is True
        assert started.wait(5)
        assert service.in_flight
        assert service.get_snapshot() is None

        release.set()
        assert service.wait(5)
        assert service.get_snapshot() == "snapshot"


class TestRealRuns:
    def test_refresh_and_resolve(self, php_project):
        root = php_project({"index.php": "<?php\n", "src/lib.php": "<?php\nfunction gone() {}\n"})
        service = AnalysisService(root, background=False)

        assert service.refresh() is True
        assert service.refresh() is False
        assert FunctionId("\\gone") in service.get_snapshot().dead_functions

        location = service.resolve(FunctionId("\\gone"))
        assert location.line == 2
        assert service.resolve(FunctionId("\\never")) is None

    def test_source_version_tracks_content(self, php_project):
        root = php_project({"a.php": "<?php\n"})
        before = compute_source_version([root / "a.php"])
        assert compute_source_version([root / "a.php"]) == before

        (root / "a.php").write_text("<?php\necho 'changed';\n")
        assert compute_source_version([root / "a.php"]) != before
        assert compute_source_version([root / "missing.php"]) == compute_source_version([])

    @pytest.mark.parametrize("files", [{}, {"README.md": "no php\n"}])
    def test_refresh_of_empty_project(self, php_project, files):
        root = php_project(files)
        service = AnalysisService(root, background=False)
        service.refresh()
        assert service.status is AnalysisStatus.EMPTY

    def test_refresh_after_root_removed(self, php_project):
        root = php_project({"index.php": "<?php\nfunction kept() {}\n"})
        service = AnalysisService(root, background=False)
        assert service.refresh() is True
        snapshot = service.get_snapshot()

        shutil.rmtree(root)
        assert service.refresh() is False
        assert service.get_snapshot() is snapshot
        assert service.status is AnalysisStatus.READY
