"""Tests for the analysis pipeline and snapshots."""

import pytest

from zombie_detector.analysis.cancellation import CancellationToken
from zombie_detector.analysis.pipeline import phase_percent, run_analysis
from zombie_detector.analysis.snapshot import SymbolHandle
from zombie_detector.analysis.symbols import ClassId, FileId, FunctionId, SymbolKind
from zombie_detector.config import DetectorConfig
from zombie_detector.exceptions import AnalysisCancelled, InvalidPathError


class TestRunAnalysis:
    """Full runs over temporary projects."""

    def test_empty_project_returns_none(self, tmp_path):
        assert run_analysis(tmp_path, DetectorConfig()) is None

    def test_project_without_php_files_returns_none(self, php_project):
        root = php_project({"README.md": "# nothing here\n", "app.js": "console.log(1)\n"})
        assert run_analysis(root, DetectorConfig()) is None

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(InvalidPathError):
            run_analysis(tmp_path / "missing", DetectorConfig())

    def test_vendored_code_is_excluded(self, analyze_project):
        snapshot = analyze_project(
            {
                "index.php": "<?php\necho 1;\n",
                "vendor/acme/lib/Thing.php": "<?php\nclass Thing {}\n",
                "Vendor/Other.php": "<?php\nclass Other {}\n",
            }
        )
        assert ClassId("\\Thing") not in snapshot.pointers
        assert ClassId("\\Other") not in snapshot.pointers
        assert snapshot.dead == frozenset()

    def test_pointers_cover_symbols_and_files(self, analyze_project, tmp_path):
        snapshot = analyze_project(
            {
                "index.php": "<?php\nhelper();\n",
                "src/lib.php": "<?php\nfunction helper() {}\nclass Lonely {}\n",
            }
        )
        lib = (tmp_path / "src" / "lib.php").resolve().as_posix()
        index = (tmp_path / "index.php").resolve().as_posix()

        assert snapshot.pointers[FileId(lib)].kind is SymbolKind.FILE
        assert snapshot.pointers[FunctionId("\\helper")].line == 2
        assert snapshot.pointers[ClassId("\\Lonely")].path == lib
        assert snapshot.entry_points == frozenset({FileId(index)})
        assert snapshot.inbound_counts[FunctionId("\\helper")] == 1
        assert snapshot.timestamp > 0

    def test_snapshot_is_read_only(self, analyze_project):
        snapshot = analyze_project({"index.php": "<?php\nclass A {}\n"})
        with pytest.raises(TypeError):
            snapshot.pointers[ClassId("\\B")] = None
        with pytest.raises(AttributeError):
            snapshot.dead_classes.add(ClassId("\\B"))

    def test_explicit_file_list(self, php_project):
        root = php_project(
            {
                "index.php": "<?php\necho 1;\n",
                "src/a.php": "<?php\nfunction a() {}\n",
                "src/b.php": "<?php\nfunction b() {}\n",
            }
        )
        snapshot = run_analysis(root, DetectorConfig(), files=[root / "src" / "a.php"])
        assert snapshot.dead_functions == {FunctionId("\\a")}

    def test_unparseable_bytes_do_not_abort(self, analyze_project):
        snapshot = analyze_project(
            {
                "index.php": "<?php\nok();\n",
                "src/broken.php": "<?php\nfunction ok() {}\nclass {{{ nope\n",
            }
        )
        assert snapshot is not None
        assert FunctionId("\\ok") not in snapshot.dead

    def test_progress_messages_in_phase_order(self, php_project):
        root = php_project({"index.php": "<?php\necho 1;\n"})
        messages = []
        run_analysis(root, DetectorConfig(), on_progress=messages.append)
        prefixes = [
            "Collecting PHP files",
            "Parsing",
            "Indexing",
            "Building call graph",
            "Computing entry points",
            "Analyzing reachability",
            "Building snapshot",
        ]
        assert len(messages) == len(prefixes)
        for message, prefix in zip(messages, prefixes):
            assert message.startswith(prefix)

    def test_cancelled_run_raises(self, php_project):
        root = php_project({"index.php": "<?php\necho 1;\n"})
        token = CancellationToken()
        token.cancel()
        with pytest.raises(AnalysisCancelled):
            run_analysis(root, DetectorConfig(), cancel=token)

    def test_cancellation_during_run(self, php_project):
        root = php_project({"index.php": "<?php\necho 1;\n"})
        token = CancellationToken()

        def cancel_on_indexing(message):
            if message.startswith("Indexing"):
                token.cancel()

        with pytest.raises(AnalysisCancelled) as excinfo:
            run_analysis(root, DetectorConfig(), cancel=token, on_progress=cancel_on_indexing)
        assert excinfo.value.phase == "indexing"

    def test_phase_percent(self):
        assert phase_percent("Parsing 3 files...") == 0.10
        assert phase_percent("Something else") is None


class TestCancellationToken:
    def test_fresh_token_is_not_cancelled(self):
        token = CancellationToken()
        assert not token.is_cancelled
        token.check()

    def test_cancel_sets_flag_and_check_raises(self):
        token = CancellationToken()
        token.cancel()
        assert token.is_cancelled
        with pytest.raises(AnalysisCancelled):
            token.check("parsing")


class TestSymbolHandle:
    """Navigation handles re-verify the file on disk."""

    def test_locate_existing_declaration(self, analyze_project):
        snapshot = analyze_project({"src/lib.php": "<?php\n\nfunction target() {}\n"})
        location = snapshot.pointers[FunctionId("\\target")].locate()
        assert location is not None
        assert location.line == 3
        assert location.column == 10

    @pytest.mark.parametrize("separator", ["\x0c", "\x1c", "\u2028"])
    def test_locate_counts_only_newlines(self, analyze_project, separator):
        code = f"<?php\n// page{separator}break\nfunction target() {{}}\n"
        snapshot = analyze_project({"src/lib.php": code})
        location = snapshot.pointers[FunctionId("\\target")].locate()
        assert location is not None
        assert location.line == 3
        assert location.column == 10

    def test_locate_after_file_deleted(self, analyze_project, tmp_path):
        snapshot = analyze_project({"src/lib.php": "<?php\nfunction target() {}\n"})
        (tmp_path / "src" / "lib.php").unlink()
        assert snapshot.pointers[FunctionId("\\target")].locate() is None

    def test_locate_after_declaration_moved(self, analyze_project, tmp_path):
        snapshot = analyze_project({"src/lib.php": "<?php\nfunction target() {}\n"})
        (tmp_path / "src" / "lib.php").write_text("<?php\n// moved\n\nfunction target() {}\n")
        assert snapshot.pointers[FunctionId("\\target")].locate() is None

    def test_file_handle(self, tmp_path):
        path = tmp_path / "index.php"
        path.write_text("<?php\n")
        handle = SymbolHandle.for_file(FileId(path.as_posix()))
        assert handle.name == "index.php"
        assert handle.locate().line == 1
