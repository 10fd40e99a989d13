import csv
import io
import queue
import time
import zipfile

import pytest

from auditor.core.archiver import ArchiveError, Archiver
from auditor.core.collector import (FINALIZE_START, PIPELINE, STEP_KEYS, InventoryAggregator,
                                    ScanAlreadyRunningError, ScanRequest, ScanState, plan_progress)
from auditor.core.models import ItemCategory


def drain(events):
    collected = []
    while True:
        try:
            collected.append(events.get_nowait())
        except queue.Empty:
            return collected


class FailingArchiver(Archiver):
    def archive(self, staging_dir, archive_path):
        raise ArchiveError("disk full")


@pytest.fixture
def preview_environment(config, inquiry):
    (config.get_path('applications_dir') / "Preview.app").mkdir()
    inquiry.usb = [{"_name": "Apple Internal Keyboard"}]
    return inquiry


def test_end_to_end_scenario(aggregator, preview_environment):
    request = ScanRequest("Jane Doe", steps=["applications_folder", "network_volumes", "peripherals", "printers"])
    result = aggregator.scan(request)

    assert result.state == ScanState.COMPLETE
    assert [(i.category, i.name, i.is_placeholder) for i in result.items] == [
        (ItemCategory.MAIN_APP, "Preview", False),
        (ItemCategory.NETWORK_DRIVE, "No External or Network Volumes", True),
        (ItemCategory.INTERNAL_DEVICE, "Apple Internal Keyboard", False),
        (ItemCategory.PRINTER, "No Printers", True),
    ]

    with zipfile.ZipFile(result.archive_path) as zf:
        rows = list(csv.reader(io.StringIO(zf.read("Audit_Report_Jane_Doe.csv").decode("utf-8"))))
    assert len(rows) == 5


def test_full_scan_preserves_collector_order(aggregator, preview_environment):
    result = aggregator.scan(ScanRequest("Jane"))
    events = drain(aggregator.events)

    deltas = [item for event in events for item in event.delta]
    assert deltas == list(result.items)

    steps_with_items = []
    for event in events:
        if event.delta and (not steps_with_items or steps_with_items[-1] != event.step):
            steps_with_items.append(event.step)
    assert steps_with_items == list(STEP_KEYS)


def test_progress_is_monotonic_and_ends_at_one(aggregator):
    aggregator.scan(ScanRequest("Jane"))
    events = drain(aggregator.events)
    fractions = [event.fraction for event in events]

    assert fractions == sorted(fractions)
    assert all(0.0 <= f <= 1.0 for f in fractions)
    assert events[-1].step == "complete"
    assert events[-1].fraction == 1.0
    assert events[-1].item_count == len(aggregator.items)


def test_archive_contents(aggregator, config, home):
    fonts = home / "Library" / "Fonts"
    fonts.mkdir(parents=True)
    (fonts / "Brand.otf").write_bytes(b"OTTO")
    (config.get_path('printer_driver_dir') / "Laser.ppd").write_text("*PPD-Adobe")

    result = aggregator.scan(ScanRequest("Jane Doe", include_fonts=True))

    assert result.archive_path.parent == config.output_dir
    assert result.archive_path.name.startswith("Migration_Data_Jane_Doe_")
    with zipfile.ZipFile(result.archive_path) as zf:
        names = set(zf.namelist())
        dashboard = zf.read("Dashboard_Jane_Doe.html").decode("utf-8")

    assert {"Audit_Report_Jane_Doe.csv", "Dashboard_Jane_Doe.html", "Printer_Drivers/",
            "Printer_Drivers/Laser.ppd", "Captured_Fonts/Brand.otf"} <= names
    assert "Migration Report - Jane Doe" in dashboard


def test_no_font_folder_without_capture(aggregator):
    result = aggregator.scan(ScanRequest("Jane", include_fonts=True))
    with zipfile.ZipFile(result.archive_path) as zf:
        names = zf.namelist()
    assert "Printer_Drivers/" in names
    assert not any(name.startswith("Captured_Fonts") for name in names)


def test_archive_failure_keeps_inventory(config, logger_holder, inquiry):
    logger = logger_holder.get_logger()
    aggregator = InventoryAggregator(config, logger_holder, inquiry=inquiry, archiver=FailingArchiver(logger))

    result = aggregator.scan(ScanRequest("Jane"))

    assert result.state == ScanState.FAILED
    assert result.archive_path is None
    assert result.items
    assert aggregator.items == result.items

    status = aggregator.get_status()
    assert status['state'] == "failed"
    assert status['archive_path'] is None
    assert "disk full" in status['error']


def test_collector_crash_does_not_abort_scan(aggregator, inquiry):
    def boom():
        raise RuntimeError("no profiler")

    inquiry.printers = boom
    result = aggregator.scan(ScanRequest("Jane", steps=["printers"]))

    assert result.state == ScanState.COMPLETE
    assert [i.name for i in result.items] == ["No Printers"]


def test_only_one_scan_at_a_time(config, logger_holder, blocking_inquiry):
    inquiry = blocking_inquiry
    aggregator = InventoryAggregator(config, logger_holder, inquiry=inquiry)

    aggregator.start_background(ScanRequest("Jane", steps=["deep_scan"]))
    assert inquiry.entered.wait(timeout=5)
    assert aggregator.is_scanning

    with pytest.raises(ScanAlreadyRunningError):
        aggregator.scan(ScanRequest("Other"))

    inquiry.release()
    result = aggregator.wait(timeout=10)
    assert result.state == ScanState.COMPLETE
    assert not aggregator.is_scanning

    # Un nouveau scan est possible une fois le précédent terminé
    assert aggregator.scan(ScanRequest("Jane", steps=["printers"])).state == ScanState.COMPLETE


def test_synthetic_step_stays_within_its_range(config, logger_holder, blocking_inquiry):
    inquiry = blocking_inquiry
    aggregator = InventoryAggregator(config, logger_holder, inquiry=inquiry)
    config.set('scan', 'deep_scan_expected_seconds', '0.05')

    aggregator.start_background(ScanRequest("Jane", steps=["storage", "deep_scan", "printers"]))
    assert inquiry.entered.wait(timeout=5)
    # Laisser le ticker atteindre sa cible
    time.sleep(0.3)
    inquiry.release()
    aggregator.wait(timeout=10)

    deep = [e.fraction for e in drain(aggregator.events) if e.step == "deep_scan"]
    assert max(deep) == pytest.approx(0.75)
    assert min(deep) >= 0.5


def test_unknown_steps_are_ignored(aggregator):
    result = aggregator.scan(ScanRequest("Jane", steps=["printers", "teleport"]))
    assert [i.category for i in result.items] == [ItemCategory.PRINTER]


def test_plan_progress_bounds():
    plan = plan_progress(PIPELINE, 0.5, 0.75)
    bounds = [(start, end) for _, start, end in plan]

    assert [step for step, _, _ in plan] == list(PIPELINE)
    assert bounds[0][0] == 0.0
    assert bounds[-1][1] == pytest.approx(FINALIZE_START)
    assert all(start <= end for start, end in bounds)
    assert all(a[1] == pytest.approx(b[0]) for a, b in zip(bounds, bounds[1:]))

    deep = next((start, end) for step, start, end in plan if step.synthetic)
    assert deep == (0.5, 0.75)


def test_plan_progress_without_synthetic_step():
    steps = [step for step in PIPELINE if not step.synthetic][:3]
    plan = plan_progress(steps, 0.5, 0.75)
    assert plan[-1][2] == pytest.approx(FINALIZE_START)
