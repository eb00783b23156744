"""Oplog window check.

The oplog window is the time span covered by ``local.oplog.rs``. A secondary
that falls further behind than the window cannot catch up without a full
resync, so a short window is worth alerting on before a member goes down.
"""

from datetime import datetime
import logging
from typing import Any, List, Optional

import pymongo

from mongomonitor.alerts import AlertKind, HealthAlert
from mongomonitor.config import MonitorConfig

from . import utc_now

logger = logging.getLogger(__name__)


def oplog_span_minutes(oldest_ts_seconds: int, now: datetime) -> int:
    """Whole minutes between the oldest oplog entry and ``now``."""
    return round((now.timestamp() - oldest_ts_seconds) / 60)


def check_oplog_length(
    client: Any,
    host: str,
    config: MonitorConfig,
    now: Optional[datetime] = None,
) -> List[HealthAlert]:
    local = client.local

    hello = local.command("hello")
    if hello.get("arbiterOnly"):
        logger.debug("%s is an arbiter; skipping oplog check", host)
        return []

    oldest = list(
        local["oplog.rs"].find({}).sort("$natural", pymongo.ASCENDING).limit(1)
    )
    if not oldest:
        return [HealthAlert(AlertKind.OPLOG_UNAVAILABLE, host)]

    # ``ts`` is a bson Timestamp; ``time`` holds the seconds since the epoch
    span = oplog_span_minutes(oldest[0]["ts"].time, utc_now(now))
    logger.debug("Oplog window on %s spans %d minutes", host, span)

    if span < config.min_oplog_length:
        return [
            HealthAlert(
                AlertKind.OPLOG_TOO_SHORT,
                host,
                observed=span,
                threshold=config.min_oplog_length,
            )
        ]
    return []
