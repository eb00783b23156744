"""Replica set status, vote parity, heartbeat and replication lag checks."""

from datetime import datetime, timedelta
import logging
from typing import Any, Dict, List, Optional

from pymongo.errors import PyMongoError

from mongomonitor.alerts import AlertKind, HealthAlert
from mongomonitor.config import MonitorConfig

from . import as_utc, utc_now

logger = logging.getLogger(__name__)

STATE_SECONDARY = 2


def count_votes(rs_config: Dict[str, Any]) -> int:
    """Total voting weight across the configured members."""
    members = rs_config.get("config", {}).get("members", [])
    # Servers omit ``votes`` for the default of 1 in some versions
    return sum(member.get("votes", 1) for member in members)


def check_member(
    member: Dict[str, Any],
    host: str,
    config: MonitorConfig,
    now: datetime,
) -> List[HealthAlert]:
    """Checks applied to one entry of ``replSetGetStatus().members``."""

    alerts: List[HealthAlert] = []
    name = member.get("name", "<unknown>")

    if not member.get("health"):
        alerts.append(
            HealthAlert(
                AlertKind.MEMBER_UNHEALTHY,
                host,
                member=name,
                detail=member.get("stateStr"),
            )
        )

    heartbeat_cutoff = now - timedelta(minutes=config.max_heartbeat_threshold)
    last_heartbeat = member.get("lastHeartbeat")
    if last_heartbeat is not None and as_utc(last_heartbeat) < heartbeat_cutoff:
        alerts.append(
            HealthAlert(
                AlertKind.HEARTBEAT_STALE,
                host,
                member=name,
                observed=last_heartbeat,
                threshold=config.max_heartbeat_threshold,
            )
        )

    state = member.get("state")
    optime_date = member.get("optimeDate")
    # Arbiters report state 7 and hold no data, so only secondaries lag
    if state == STATE_SECONDARY and optime_date is not None:
        lag_cutoff = now - timedelta(minutes=config.max_replication_delay)
        if as_utc(optime_date) < lag_cutoff:
            alerts.append(
                HealthAlert(
                    AlertKind.REPLICATION_LAG_HIGH,
                    host,
                    member=name,
                    observed=optime_date,
                    threshold=config.max_replication_delay,
                )
            )

    return alerts


def check_replica_set(
    client: Any,
    host: str,
    config: MonitorConfig,
    now: Optional[datetime] = None,
) -> List[HealthAlert]:
    """Run ``replSetGetStatus``/``replSetGetConfig`` and evaluate the result."""

    now = utc_now(now)
    admin = client.admin
    status = admin.command("replSetGetStatus", check=False)

    if not status.get("ok"):
        # A failed status document carries no member list to evaluate
        return [HealthAlert(AlertKind.STATUS_NOT_OK, host, detail=status.get("errmsg"))]

    members = status.get("members", [])
    alerts: List[HealthAlert] = []

    if len(members) < config.min_replica_set_members:
        alerts.append(
            HealthAlert(
                AlertKind.MEMBER_COUNT_LOW,
                host,
                observed=len(members),
                threshold=config.min_replica_set_members,
            )
        )

    try:
        rs_config = admin.command("replSetGetConfig")
    except PyMongoError as exc:
        # Member states from the status document are still worth evaluating
        alerts.append(
            HealthAlert(
                AlertKind.CHECK_FAILED, host, member="replica set config", detail=exc
            )
        )
    else:
        votes = count_votes(rs_config)
        if votes % 2 == 0:
            alerts.append(
                HealthAlert(
                    AlertKind.EVEN_VOTE_COUNT,
                    host,
                    observed=votes,
                    detail=len(members),
                )
            )

    for member in members:
        alerts.extend(check_member(member, host, config, now))

    logger.debug("Replica set check on %s raised %d alert(s)", host, len(alerts))
    return alerts
