"""CLI adapter printing a financial summary for a period.

The period comes from ``SUMMARY_START_DATE`` and ``SUMMARY_END_DATE``
(ISO dates). ``SUMMARY_PREVIOUS_START_DATE`` and ``SUMMARY_PREVIOUS_END_DATE``
add a growth comparison.
"""

from datetime import date
import os

from giving_engine.domain.models import FinancialSummary
from giving_engine.infrastructure.container import build_engine
from giving_engine.infrastructure.logging.logger import get_app_logger


def _read_date(name: str, required: bool = True) -> date | None:
    raw = os.getenv(name)
    if not raw:
        if required:
            raise RuntimeError(f"Missing environment variable: {name}")
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        raise RuntimeError(f"Invalid ISO date in {name}: {raw}")


def format_summary(summary: FinancialSummary) -> list[str]:
    """Render a summary as printable lines."""
    lines = [
        f"Period: {summary.period_start} to {summary.period_end}",
        f"Total: {summary.total_donations} "
        f"({summary.donation_count} donations, "
        f"average {summary.average_donation})",
    ]
    lines.append("By category:")
    for entry in summary.by_category.values():
        goal = f", goal {entry.goal_progress}%" if entry.goal_progress is not None else ""
        lines.append(
            f"  {entry.category_name}: {entry.amount} "
            f"({entry.percentage}%, {entry.count}){goal}"
        )
    lines.append("By method:")
    for method, entry in summary.by_method.items():
        lines.append(f"  {method}: {entry.amount} ({entry.percentage}%)")
    lines.append("By Form 990 line item:")
    for line_item, entry in summary.by_line_item.items():
        lines.append(f"  {line_item}: {entry.amount} ({entry.percentage}%)")
    lines.append("Donor ranges:")
    for bucket in summary.top_donor_ranges:
        lines.append(f"  {bucket.label}: {bucket.count} donors, {bucket.total_amount}")
    if summary.growth is not None:
        growth = summary.growth
        lines.append(
            f"Growth: amount {growth.amount_growth}%, "
            f"count {growth.count_growth}%, average {growth.average_growth}%"
        )
    if summary.skipped_notice:
        lines.append(summary.skipped_notice)
    return lines


def main() -> None:
    """Compute and print the configured period summary."""
    logger = get_app_logger()
    start = _read_date("SUMMARY_START_DATE")
    end = _read_date("SUMMARY_END_DATE")
    previous_start = _read_date("SUMMARY_PREVIOUS_START_DATE", required=False)
    previous_end = _read_date("SUMMARY_PREVIOUS_END_DATE", required=False)

    engine = build_engine(logger=logger)
    summary = engine.summaries.execute(start, end, previous_start, previous_end)

    for line in format_summary(summary):
        print(line)


if __name__ == "__main__":  # pragma: no cover
    main()
