from probe.models import FieldProbeResult
from probe.report import Report


def test_summary_lists_sections_and_tallies():
    report = Report()
    report.record(FieldProbeResult.compare("First Name", "CloudQA", "CloudQA", method="native"))
    report.record(FieldProbeResult.failure("Email", "cloudqa.advanced@test.com", "detached"))
    report.record_failure("iframe #1", "cross-origin frame")
    report.note("iframe #2 hosts shadow DOM")
    report.section_done("basic")
    report.section_done("iframe", ok=False)

    summary = report.format_summary()

    assert "✅ Basic Form Fields Testing - COMPLETED" in summary
    assert "❌ iFrame Element Testing - FAILED" in summary
    assert "⏭️ Shadow DOM Testing - NOT RUN" in summary
    assert "Checks: 2 | Passed: 1 | Failed: 1" in summary
    assert "First Name: expected 'CloudQA', got 'CloudQA' via native" in summary
    assert "Email: expected 'cloudqa.advanced@test.com', got 'null'" in summary
    assert "iframe #1: cross-origin frame" in summary
    assert "iframe #2 hosts shadow DOM" in summary


def test_empty_report():
    summary = Report().format_summary()
    assert "Checks: 0 | Passed: 0 | Failed: 0" in summary
    assert "Step failures" not in summary
