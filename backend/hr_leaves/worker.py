"""Worker process for the monthly accrual job.

Wakes up once per ``accrual_interval_seconds`` and, on the first day of a month,
accrues ``monthly_accrual_days`` on every entitlement of the configured leave type.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from hr_leaves.config import get_settings
from hr_leaves.db import session_scope
from hr_leaves.schemas.entitlement import AccrualRunPayload
from hr_leaves.services.entitlement import run_accrual

logger = logging.getLogger(__name__)


def is_accrual_day(today: date) -> bool:
    """Accruals run on the first day of every month."""
    return today.day == 1


async def run_accrual_once(today: date) -> None:
    """Run the monthly accrual for ``today`` if it is an accrual day."""
    settings = get_settings()
    if not is_accrual_day(today):
        return
    if settings.accrual_leave_type_id is None:
        logger.warning("Skipping accrual for %s: accrual_leave_type_id is not configured", today)
        return

    async with session_scope() as session:
        result = await run_accrual(
            session,
            AccrualRunPayload(
                leave_type_id=settings.accrual_leave_type_id,
                days=settings.monthly_accrual_days,
                period=today.strftime("%Y-%m"),
            ),
        )
    logger.info(
        "Accrual run complete for %s: processed=%d skipped=%d accrued_days=%.2f",
        result.period,
        result.processed,
        result.skipped,
        result.accrued_days,
    )


async def run_accrual_loop() -> None:
    """Main worker loop."""
    settings = get_settings()
    logger.info("Accrual worker started")

    while True:
        today = date.today()
        try:
            await run_accrual_once(today)
        except Exception:
            logger.exception("Accrual run failed for %s", today)

        await asyncio.sleep(settings.accrual_interval_seconds)


def main() -> None:
    """Entry point for the worker process."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    asyncio.run(run_accrual_loop())


if __name__ == "__main__":
    main()
