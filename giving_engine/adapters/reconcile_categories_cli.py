"""CLI adapter reconciling category statistics with the ledger.

Every category is recalculated from its verified donations and compared
with the stored running totals. Drift is reported; stored totals are only
overwritten when ``GIVING_RECONCILE_REPAIR=1``.
"""

import os

from giving_engine.infrastructure.container import build_engine
from giving_engine.infrastructure.logging.logger import get_app_logger


def _repair_requested() -> bool:
    return os.getenv("GIVING_RECONCILE_REPAIR", "0").strip().lower() in (
        "1",
        "true",
        "yes",
    )


def main() -> int:
    """Reconcile all categories and return the number of alerts."""
    logger = get_app_logger()
    engine = build_engine(logger=logger)
    repair = _repair_requested()

    alerts = engine.statistics.reconcile_all(repair=repair)

    for alert in alerts:
        fields = ", ".join(
            f"{name}: stored={stored} expected={expected}"
            for name, (stored, expected) in sorted(alert.differences.items())
        )
        status = "repaired" if alert.repaired else "not repaired"
        print(f"{alert.category_name} ({alert.category_id}) {status}: {fields}")
    print(f"Reconciliation finished with {len(alerts)} alerts.")
    return len(alerts)


if __name__ == "__main__":  # pragma: no cover
    main()
