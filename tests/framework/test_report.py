from __future__ import annotations

from npm_sentinel.framework.fanout import ItemResult
from npm_sentinel.framework.report import (
    SECTION_DELIMITER,
    Report,
    format_count,
    format_date,
    format_percent,
    render_report,
    report_output,
    rule,
)

RESULTS = [
    ItemResult.success("react", "18.2.0"),
    ItemResult.failure("nope", "npm registry returned HTTP 404 (Not Found)"),
    ItemResult.success("vue", "3.4.0"),
]


def _render(result: ItemResult[str]) -> str:
    return f"📦 {result.name}: {result.value}\n"


def test_sections_follow_input_order_with_fixed_delimiter() -> None:
    text = render_report(RESULTS, _render, title="Title", footer="Footer")
    assert text == (
        "Title\n\n"
        "📦 react: 18.2.0"
        + SECTION_DELIMITER
        + "❌ nope: npm registry returned HTTP 404 (Not Found)"
        + SECTION_DELIMITER
        + "📦 vue: 3.4.0"
        + "\n\nFooter\n"
    )


def test_rendering_is_deterministic() -> None:
    assert render_report(RESULTS, _render) == render_report(list(RESULTS), _render)


def test_report_without_title_or_footer() -> None:
    report = Report()
    report.add("only")
    assert report.render() == "only\n"


def test_report_output_counts() -> None:
    assert report_output(RESULTS, "t") == {"text": "t", "succeeded": 2, "failed": 1}


def test_formatters() -> None:
    assert format_count(1234567) == "1,234,567"
    assert format_count(12.6) == "13"
    assert format_count(None) == "0"
    assert format_percent(0.8765) == "87.7%"
    assert format_date("2024-03-05T10:11:12.000Z") == "2024-03-05"
    assert format_date(None) == "Unknown"
    assert format_date("garbage") == "garbage"
    assert rule("-", 3) == "---"
