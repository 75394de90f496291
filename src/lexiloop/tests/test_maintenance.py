"""Tests for background maintenance tasks."""
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

from lexiloop.services.maintenance import MaintenanceTask, RefillTask


def test_run_reports_success() -> None:
    func = Mock()
    assert MaintenanceTask("noop", func).run()
    func.assert_called_once_with()


def test_run_swallows_failures(caplog) -> None:
    task = MaintenanceTask("broken", Mock(side_effect=RuntimeError("boom")))
    assert task.run() is False
    assert "broken failed: boom" in caplog.text


def test_submit_runs_inline_without_executor() -> None:
    func = Mock()
    assert MaintenanceTask("inline", func).submit() is None
    func.assert_called_once()


def test_submit_uses_executor() -> None:
    func = Mock()
    with ThreadPoolExecutor(max_workers=1) as executor:
        future = MaintenanceTask("threaded", func, executor).submit()
        assert future.result(timeout=5) is True
    func.assert_called_once()


def test_submit_after_shutdown_does_not_raise() -> None:
    executor = ThreadPoolExecutor(max_workers=1)
    executor.shutdown()
    func = Mock()
    assert MaintenanceTask("late", func, executor).submit() is None
    func.assert_not_called()


def test_refill_task_calls_ensure_minimum() -> None:
    replenish = Mock()
    task = RefillTask(replenish, 3, "beginner", "food", 20)
    assert task.name == "refill:3"
    task.submit()
    replenish.ensure_minimum.assert_called_once_with(3, "beginner", "food", 20)
