"""
Test cooperative cancellation and the run driver's per-file loop.
"""

import os
import signal

import pytest

from photoreorg.cancellation import CancellationToken, install_signal_handlers
from photoreorg.core import PhotoReorganizer


@pytest.fixture
def sorter(fake_exif, create_test_files, source_dir, dest_dir, tmp_path):
    create_test_files([{'name': f'img_{i}.jpg', 'content': bytes([i])} for i in range(3)])
    for i in range(3):
        fake_exif[f'img_{i}.jpg'] = {'CreateDate': '2021:07:04'}
    reorganizer = PhotoReorganizer(source=source_dir, dest=dest_dir, pattern=r"\.jpg$",
                                   root_dir=tmp_path / "root")
    yield reorganizer
    reorganizer.close()


class TestCancellationToken:
    """Test token state and cleanup."""

    def test_first_reason_wins(self):
        token = CancellationToken()
        assert not token.cancelled
        token.cancel("received SIGTERM", signal.SIGTERM)
        token.cancel("second request")
        assert token.cancelled
        assert token.reason == "received SIGTERM"
        assert token.signal_number == signal.SIGTERM

    def test_cleanup_returns_to_workdir(self, tmp_path, monkeypatch):
        start = tmp_path / "start"
        elsewhere = tmp_path / "elsewhere"
        start.mkdir()
        elsewhere.mkdir()
        monkeypatch.chdir(start)

        token = CancellationToken()
        token.cancel("test")
        os.chdir(elsewhere)
        token.cleanup()
        assert os.getcwd() == str(start)

        os.chdir(elsewhere)
        token.cleanup()
        assert os.getcwd() == str(elsewhere), "Cleanup runs only once"

    @pytest.mark.skipif(not hasattr(signal, "SIGTERM"), reason="no SIGTERM")
    def test_signal_marks_token(self):
        token = CancellationToken()
        previous = signal.getsignal(signal.SIGTERM)

        with install_signal_handlers(token):
            signal.raise_signal(signal.SIGTERM)

        assert token.cancelled
        assert "SIGTERM" in token.reason
        assert signal.getsignal(signal.SIGTERM) == previous


class TestRunDriver:
    """Test the sequential per-file loop."""

    def test_processes_all_files(self, sorter, dest_dir):
        files = sorter.find_source_files()
        sorter.process_files(files)

        assert len(files) == 3
        assert sorter.stats_manager.get_copied_total() == 3
        assert sorted(p.name for p in (dest_dir / "2021" / "07" / "04").iterdir()) == \
            ["img_0.jpg", "img_1.jpg", "img_2.jpg"]
        assert sorter.summary_line() == f"3 files were copied to {dest_dir}."

    def test_cancel_stops_before_next_file(self, sorter, dest_dir, monkeypatch):
        token = CancellationToken()
        original = sorter.process_file

        def process_then_cancel(file_path):
            placement = original(file_path)
            token.cancel("received SIGTERM", signal.SIGTERM)
            return placement

        monkeypatch.setattr(sorter, "process_file", process_then_cancel)
        sorter.process_files(sorter.find_source_files(), token=token)

        assert sorter.stats_manager.get_copied_total() == 1
        assert [p.name for p in (dest_dir / "2021" / "07" / "04").iterdir()] == ["img_0.jpg"]

    def test_already_cancelled_processes_nothing(self, sorter, dest_dir):
        token = CancellationToken()
        token.cancel("received SIGHUP")
        sorter.process_files(sorter.find_source_files(), token=token)

        assert sorter.stats_manager.get_copied_total() == 0
        assert list(dest_dir.iterdir()) == []

    def test_stats_track_uncertain_and_unknown(self, fake_exif, create_test_files,
                                               source_dir, dest_dir, tmp_path):
        create_test_files([{'name': 'a.jpg'}, {'name': 'b.jpg', 'content': b'b'},
                           {'name': 'c.jpg', 'content': b'c'}])
        fake_exif['a.jpg'] = {'ModifyDate': '2019:03:02'}
        fake_exif['b.jpg'] = {}
        fake_exif['c.jpg'] = {'CreateDate': '2021:07:04'}

        reorganizer = PhotoReorganizer(source=source_dir, dest=dest_dir, pattern="jpg",
                                       root_dir=tmp_path / "root", dry_run=True)
        try:
            reorganizer.process_files(reorganizer.find_source_files())
        finally:
            reorganizer.close()

        stats = reorganizer.stats_manager.get_stats()
        assert stats['uncertain'] == 1
        assert stats['unknown'] == 1
        assert stats['planned'] == 3
        assert reorganizer.stats_manager.get_copied_total() == 0
        assert reorganizer.summary_line() == f"3 files would be copied to {dest_dir} (dry run)."


class TestCliCancellation:
    """Test a trapped signal arriving during a full command-line run."""

    @pytest.mark.skipif(not hasattr(signal, "SIGTERM"), reason="no SIGTERM")
    def test_sigterm_mid_run_is_recorded(self, cli_runner, fake_exif, create_test_files,
                                         source_dir, dest_dir, test_config_path, monkeypatch):
        create_test_files([{'name': f'img_{i}.jpg', 'content': bytes([i])} for i in range(3)])
        for i in range(3):
            fake_exif[f'img_{i}.jpg'] = {'CreateDate': '2021:07:04'}

        original = PhotoReorganizer.process_file

        def process_then_signal(self, file_path):
            placement = original(self, file_path)
            signal.raise_signal(signal.SIGTERM)
            return placement

        monkeypatch.setattr(PhotoReorganizer, "process_file", process_then_signal)
        previous = signal.getsignal(signal.SIGTERM)

        result = cli_runner("-s", source_dir, "-d", dest_dir, "-r", r"\.jpg$",
                            config_path=test_config_path)

        assert result.exit_code == 1
        assert "1 files were copied" in result.output
        assert [p.name for p in (dest_dir / "2021" / "07" / "04").iterdir()] == ["img_0.jpg"]
        runs_log = (test_config_path.parent / "runs.log").read_text()
        assert "CANCELLED" in runs_log
        assert "Copied: 1 (0 renamed)" in runs_log
        assert signal.getsignal(signal.SIGTERM) == previous
