from __future__ import annotations

from unittest.mock import patch

from employee_import.services.progress import RowProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch('sys.stdout.isatty', return_value=True):
        assert is_tty_enabled() is True
    with patch('sys.stdout.isatty', return_value=False):
        assert is_tty_enabled() is False


class TestRowProgressTracker:
    def test_init_with_tty_enabled(self):
        with patch('employee_import.services.progress.is_tty_enabled', return_value=True), \
             patch('employee_import.services.progress.tqdm') as mock_tqdm:
            tracker = RowProgressTracker(description="Importing staff")
            assert tracker.enabled is True
            mock_tqdm.assert_called_once_with(
                total=None,
                desc="Importing staff",
                unit="row",
                leave=True,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch('employee_import.services.progress.is_tty_enabled', return_value=False), \
             patch('employee_import.services.progress.tqdm') as mock_tqdm:
            tracker = RowProgressTracker()
            assert tracker.enabled is False
            assert tracker.pbar is None
            mock_tqdm.assert_not_called()

    def test_advance_updates_bar_and_postfix(self):
        with patch('employee_import.services.progress.is_tty_enabled', return_value=True), \
             patch('employee_import.services.progress.tqdm') as mock_tqdm:
            bar = mock_tqdm.return_value
            tracker = RowProgressTracker()
            tracker.advance(succeeded=1, failed=0)
            tracker.advance(succeeded=1, failed=1)
            assert tracker.processed == 2
            assert bar.update.call_count == 2
            bar.set_postfix.assert_called_with(success=1, failed=1)

    def test_advance_without_tty_only_counts(self):
        with patch('employee_import.services.progress.is_tty_enabled', return_value=False):
            tracker = RowProgressTracker()
            tracker.advance(succeeded=0, failed=1)
            assert tracker.processed == 1

    def test_context_manager_closes_bar(self):
        with patch('employee_import.services.progress.is_tty_enabled', return_value=True), \
             patch('employee_import.services.progress.tqdm') as mock_tqdm:
            bar = mock_tqdm.return_value
            with RowProgressTracker() as tracker:
                tracker.advance(succeeded=1, failed=0)
            bar.close.assert_called_once()
            assert tracker.pbar is None
