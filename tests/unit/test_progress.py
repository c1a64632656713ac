from __future__ import annotations

from unittest.mock import patch

from xlsx_user_loader.services.progress import BatchProgress, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch('sys.stdout.isatty', return_value=True):
        assert is_tty_enabled() is True
    with patch('sys.stdout.isatty', return_value=False):
        assert is_tty_enabled() is False


def test_tty_creates_bar_and_ticks_per_batch():
    with patch('xlsx_user_loader.services.progress.is_tty_enabled', return_value=True), \
         patch('xlsx_user_loader.services.progress.tqdm') as mock_tqdm:
        with BatchProgress(3) as progress:
            progress.advance(25)
            progress.advance(50)
        mock_tqdm.assert_called_once_with(
            total=3,
            desc="Writing batches",
            unit="batch",
            disable=False,
            leave=True,
            position=0,
            ncols=80,
            ascii=True,
        )
        bar = mock_tqdm.return_value
        assert bar.update.call_count == 2
        bar.set_postfix.assert_called_with(written=50)
        bar.close.assert_called_once()
    assert progress.completed == 2
    assert progress.pbar is None


def test_non_tty_has_no_bar():
    with patch('xlsx_user_loader.services.progress.is_tty_enabled', return_value=False), \
         patch('xlsx_user_loader.services.progress.tqdm') as mock_tqdm:
        progress = BatchProgress(2)
        progress.advance(10)
        progress.close()
        mock_tqdm.assert_not_called()
    assert progress.enabled is False
    assert progress.completed == 1
