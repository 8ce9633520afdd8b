"""Shared test fixtures for zombie-detector."""

from pathlib import Path

import pytest

from zombie_detector.analysis.pipeline import run_analysis
from zombie_detector.config import DetectorConfig
from zombie_detector.frontend.parser import PhpParser
from zombie_detector.frontend.source import parse_php_file


@pytest.fixture
def php_project(tmp_path):
    """Write a PHP project under tmp_path: {relative path: source} -> root."""

    def _write(files: dict[str, str]) -> Path:
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def analyze_project(php_project):
    """Write files and run a full analysis with explicit config overrides."""

    def _run(files: dict[str, str], **overrides):
        root = php_project(files)
        return run_analysis(root, DetectorConfig(**overrides))

    return _run


@pytest.fixture
def parse_php(tmp_path):
    """Parse PHP source into a PhpFile stored under tmp_path."""
    parser = PhpParser()

    def _parse(code: str, name: str = "file.php"):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(code, encoding="utf-8")
        return parse_php_file(path, tmp_path, parser)

    return _parse
