import threading

from yield_adapter.core.scheduler import ReportScheduler


def test_run_report_once_records_result(deployed_stack):
    scheduler = ReportScheduler(vault=deployed_stack.vault, report_interval_seconds=60)
    result = scheduler.run_report_once()
    assert result["total_assets"] == 600_000
    assert scheduler.reports_run == 1
    assert scheduler.last_report == result


def test_loop_survives_failed_reports():
    class FailingVault:
        def __init__(self) -> None:
            self.calls = 0
            self.called = threading.Event()

        def report(self):
            self.calls += 1
            self.called.set()
            raise RuntimeError("venue unreachable")

    vault = FailingVault()
    scheduler = ReportScheduler(vault=vault, report_interval_seconds=0.01)
    worker = threading.Thread(target=scheduler.start, daemon=True)
    worker.start()
    assert vault.called.wait(timeout=5)
    scheduler.stop()
    worker.join(timeout=5)
    assert not worker.is_alive()
    assert vault.calls >= 1
    assert scheduler.reports_run == 0
