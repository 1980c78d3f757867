"""
pytest configuration and fixtures for photoreorg tests.
"""

import io
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import pytest


@dataclass
class CliResult:
    """Result from running CLI command."""
    exit_code: int
    output: str
    error: str


@pytest.fixture
def test_config_path(tmp_path):
    """Per-test config path so saved paths never leak between tests."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir / "config.yml"


@pytest.fixture
def source_dir(tmp_path):
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def dest_dir(tmp_path):
    path = tmp_path / "dest"
    path.mkdir()
    return path


@pytest.fixture
def cli_runner():
    """Create a CLI runner that captures output and uses test config."""

    def run_cli(*args, config_path=None):
        """Run photoreorg CLI with given arguments.

        Args:
            *args: Command line arguments (-s, -d, -r, --flags, etc)
            config_path: Optional config path for test isolation

        Returns:
            CliResult with exit_code, output, and error
        """
        from photoreorg.cli import main

        old_stdout = sys.stdout
        old_stderr = sys.stderr
        old_argv = sys.argv
        stdout = io.StringIO()
        stderr = io.StringIO()

        try:
            sys.stdout = stdout
            sys.stderr = stderr
            sys.argv = ['photoreorg'] + [str(a) for a in args]

            exit_code = main(config_path=config_path)

            return CliResult(
                exit_code=exit_code,
                output=stdout.getvalue(),
                error=stderr.getvalue()
            )
        except SystemExit as e:
            # argparse usage errors and --help
            return CliResult(
                exit_code=e.code if e.code is not None else 0,
                output=stdout.getvalue(),
                error=stderr.getvalue()
            )
        finally:
            sys.stdout = old_stdout
            sys.stderr = old_stderr
            sys.argv = old_argv

    return run_cli


@pytest.fixture
def fake_exif(monkeypatch):
    """Replace exiftool with a lookup keyed by file name.

    Files missing from the returned dict behave as if exiftool failed, so
    their dates come from filesystem timestamps. Birth time is disabled to
    keep those dates deterministic across platforms.
    """
    tags_by_name: Dict[str, Optional[Dict[str, str]]] = {}

    def fake_run_exiftool(file_path):
        return tags_by_name.get(Path(file_path).name)

    monkeypatch.setattr("photoreorg.metadata.run_exiftool", fake_run_exiftool)
    monkeypatch.setattr("photoreorg.metadata.birth_time", lambda st: None)
    return tags_by_name


@pytest.fixture
def create_test_files(source_dir):
    """Helper to create test files with specific properties."""

    def create_files(file_specs: List[dict]) -> Path:
        """Create test files based on specifications.

        Args:
            file_specs: List of dicts with keys:
                - name: filename (may include subdirectories)
                - content: file content (optional)
                - mtime: modification time as datetime (optional)

        Returns:
            Path to directory containing created files
        """
        for spec in file_specs:
            file_path = source_dir / spec['name']
            file_path.parent.mkdir(parents=True, exist_ok=True)

            content = spec.get('content', b'test file content')
            if isinstance(content, str):
                file_path.write_text(content)
            else:
                file_path.write_bytes(content)

            if 'mtime' in spec:
                mtime = spec['mtime'].timestamp()
                os.utime(file_path, (mtime, mtime))

        return source_dir

    return create_files


@pytest.fixture
def assert_file_structure():
    """Helper to assert expected file structure."""

    def check_structure(base_path: Path, expected_structure: dict):
        """Assert that directory has expected structure.

        Args:
            base_path: Root directory to check
            expected_structure: Dict describing expected structure
                e.g., {
                    "2021": {
                        "07": {"04": ["vacation.jpg"]}
                    }
                }
        """
        def check_level(path: Path, structure: dict):
            for name, value in structure.items():
                item_path = path / name
                assert item_path.exists(), f"Expected {item_path} to exist"
                assert item_path.is_dir(), f"Expected {item_path} to be a directory"

                if isinstance(value, dict):
                    check_level(item_path, value)
                else:
                    actual_files = sorted(f.name for f in item_path.iterdir() if f.is_file())
                    assert actual_files == sorted(value), \
                        f"Expected files {sorted(value)} in {item_path}, got {actual_files}"

        check_level(base_path, expected_structure)

    return check_structure
