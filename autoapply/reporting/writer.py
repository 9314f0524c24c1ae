"""
Report generation: build a RunReport from the ledger, render it as text,
and optionally persist it as JSON and CSV.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Tuple

from .schemas import ItemAttemptOutcome, RunReport


def build_report(
    site: str, outcomes: Iterable[ItemAttemptOutcome], *, pages_visited: int = 0
) -> RunReport:
    items = list(outcomes)
    ok = sum(1 for i in items if i.succeeded)
    return RunReport(
        site=site,
        succeeded=ok,
        failed=len(items) - ok,
        pages_visited=pages_visited,
        items=items,
    )


def render_text(report: RunReport) -> str:
    """
    Human-readable summary: totals, success rate to one decimal place, then
    one numbered line per ledger entry with the failure reason underneath.
    """
    lines = [
        "APPLICATION REPORT",
        "=" * 50,
        f"Total Applications: {report.succeeded}",
        f"Failed Applications: {report.failed}",
        f"Success Rate: {report.success_rate:.1f}%",
        f"Pages Visited: {report.pages_visited}",
        "",
        "DETAILED RESULTS:",
    ]
    for n, item in enumerate(report.items, start=1):
        status = "OK  " if item.succeeded else "FAIL"
        lines.append(f"{n}. {status} {item.title} at {item.organization}")
        if not item.succeeded and item.error_reason:
            lines.append(f"   Error: {item.error_reason}")
    return "\n".join(lines)


def write_report(report: RunReport, out_dir: Path) -> Tuple[Path, Path]:
    """
    Write a RunReport into out_dir as JSON and CSV.
    Returns (json_path, csv_path).
    """
    out_dir.mkdir(parents=True, exist_ok=True)

    json_path = out_dir / "report.json"
    csv_path = out_dir / "report.csv"

    json_path.write_text(report.model_dump_json(indent=2), encoding="utf-8")

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(
            ["site", "page", "position", "title", "organization", "ok", "error", "timestamp"]
        )
        for item in report.items:
            writer.writerow(
                [
                    report.site,
                    item.page_index,
                    item.position,
                    item.title,
                    item.organization,
                    "OK" if item.succeeded else "FAIL",
                    item.error_reason or "",
                    item.timestamp.isoformat(),
                ]
            )

    return json_path, csv_path
