"""Free filesystem space check based on ``dbStats``."""

import logging
from typing import Any, List, Optional

from mongomonitor.alerts import AlertKind, HealthAlert
from mongomonitor.config import MonitorConfig

logger = logging.getLogger(__name__)


def free_space_percentage(total: float, used: float) -> float:
    """Percentage of the data filesystem still free, rounded to 2 places."""
    return round((total - used) / total * 100, 2)


def check_disk_space(client: Any, host: str, config: MonitorConfig) -> List[HealthAlert]:
    stats = client[config.database].command("dbStats")
    total: Optional[float] = stats.get("fsTotalSize")
    used: Optional[float] = stats.get("fsUsedSize")

    if not total or used is None:
        logger.warning(
            "dbStats on %s reported no filesystem sizes; skipping disk space check",
            host,
        )
        return []

    free = free_space_percentage(total, used)
    logger.debug("Free storage on %s: %.2f%%", host, free)

    if free < config.alert_on_remaining_storage_per:
        return [
            HealthAlert(
                AlertKind.DISK_SPACE_LOW,
                host,
                observed=free,
                threshold=config.alert_on_remaining_storage_per,
            )
        ]
    return []
