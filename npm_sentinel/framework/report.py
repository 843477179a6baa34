from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence

from npm_sentinel.framework.fanout import ItemResult, failures, successes

SECTION_DELIMITER = "\n---\n\n"


@dataclass
class Report:
    title: Optional[str] = None
    sections: List[str] = field(default_factory=list)
    footer: Optional[str] = None

    def add(self, section: str) -> None:
        self.sections.append(section.rstrip("\n"))

    def render(self) -> str:
        parts: List[str] = []
        if self.title:
            parts.append(self.title.rstrip("\n") + "\n\n")
        parts.append(SECTION_DELIMITER.join(self.sections))
        if self.footer:
            parts.append("\n\n" + self.footer.rstrip("\n"))
        return "".join(parts) + "\n"


def render_failure(result: ItemResult[Any]) -> str:
    return f"❌ {result.name}: {result.reason}"


def render_report(
    results: Sequence[ItemResult[Any]],
    render_success: Callable[[ItemResult[Any]], str],
    render_failure: Callable[[ItemResult[Any]], str] = render_failure,
    title: Optional[str] = None,
    footer: Optional[str] = None,
) -> str:
    report = Report(title=title, footer=footer)
    for result in results:
        report.add(render_success(result) if result.ok else render_failure(result))
    return report.render()


def report_output(results: Sequence[ItemResult[Any]], text: str) -> dict[str, Any]:
    return {"text": text, "succeeded": len(successes(results)), "failed": len(failures(results))}


def format_count(value: Any) -> str:
    try:
        return f"{int(round(float(value))):,}"
    except (TypeError, ValueError):
        return "0"


def format_percent(value: float) -> str:
    return f"{value * 100:.1f}%"


def format_date(value: Optional[str]) -> str:
    if not value:
        return "Unknown"
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return value


def rule(char: str = "=", width: int = 80) -> str:
    return char * width
