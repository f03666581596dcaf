from __future__ import annotations

from rich.markup import escape

from .types import Report

NAME_WIDTH = 60


def format_elapsed(secs: float) -> str:
    whole = int(secs)
    if whole >= 60:
        return f"{whole // 60}:{whole % 60:02d}"
    return f"{whole}s"


def render_summary(report: Report, *, markup: bool = False) -> str:
    """Render the three outcome buckets and, if any, the timing table.

    Empty buckets keep their heading. With ``markup`` the headings carry rich
    color tags and task names are escaped so they print literally.
    """

    def tag(text: str, style: str) -> str:
        return f"[{style}]{text}[/{style}]" if markup else text

    def name(text: str) -> str:
        return escape(text) if markup else text

    sections = (
        ("Successful tasks", report.succeeded, "green"),
        ("Warnings", report.warned, "yellow"),
        ("Failed tasks", report.failed, "red"),
    )

    lines: list[str] = []
    for title, names, style in sections:
        if lines:
            lines.append("")
        lines.append(tag(f"{title} ({len(names)}):", style))
        lines.extend(f"  - {name(n)}" for n in names)

    if report.timings:
        lines.append("")
        lines.append(tag("Timing summary:", "bold"))
        for task, secs in report.timings:
            lines.append(_timing_row(name(task), secs))
        lines.append("")
        lines.append(_timing_row("TOTAL", report.total_elapsed))

    return "\n".join(lines)


def _timing_row(label: str, secs: float) -> str:
    return f"{label:<{NAME_WIDTH}} {format_elapsed(secs):>8}  ({int(secs)}s)"
