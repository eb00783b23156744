"""Core monitoring logic: one health-check pass over the replica set."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Any, Callable, List, Optional
from urllib.parse import quote_plus

from pymongo import MongoClient

from health_checks.disk_space_check import check_disk_space
from health_checks.oplog_check import check_oplog_length
from health_checks.replica_set_check import check_replica_set

from .alerts import AlertKind, HealthAlert
from .config import MonitorConfig
from .notifier import Notifier

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, MonitorConfig], Any]


@dataclass
class MemberCheck:
    """A named check run against one member's connection."""

    name: str
    run: Callable[[Any, str, MonitorConfig], List[HealthAlert]]


MEMBER_CHECKS = [
    MemberCheck("replica set status", check_replica_set),
    MemberCheck("disk space", check_disk_space),
    MemberCheck("oplog length", check_oplog_length),
]


@dataclass
class PassResult:
    """Everything raised during one pass over the configured members."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    hosts: List[str] = field(default_factory=list)
    alerts: List[HealthAlert] = field(default_factory=list)

    @property
    def healthy(self) -> bool:
        return not self.alerts


def build_connection_uri(host: str, config: MonitorConfig) -> str:
    """Return a ``mongodb://`` URI for a single member."""

    credentials = ""
    query = ""
    auth = config.auth
    if auth is not None:
        if auth.username is not None or auth.password is not None:
            credentials = "{}:{}@".format(
                quote_plus(auth.username or ""), quote_plus(auth.password or "")
            )
        if auth.auth_source:
            query = f"?authSource={quote_plus(auth.auth_source)}"
    return f"mongodb://{credentials}{host}/{config.database}{query}"


def connect_member(host: str, config: MonitorConfig) -> MongoClient:
    """Open a direct (non-discovering) connection to ``host`` and prove it."""

    timeout_ms = int(config.connect_timeout * 1000)
    client = MongoClient(
        build_connection_uri(host, config),
        directConnection=True,
        serverSelectionTimeoutMS=timeout_ms,
        connectTimeoutMS=timeout_ms,
    )
    try:
        # MongoClient connects lazily; ping forces server selection
        client.admin.command("ping")
    except Exception:
        client.close()
        raise
    return client


def check_member(
    host: str,
    config: MonitorConfig,
    notifier: Notifier,
    client_factory: ClientFactory = connect_member,
) -> List[HealthAlert]:
    """Run every member check against ``host`` and notify each alert."""

    alerts: List[HealthAlert] = []

    def raise_alert(alert: HealthAlert) -> None:
        alerts.append(alert)
        notifier.notify(alert)

    try:
        client = client_factory(host, config)
    except Exception as exc:
        # Bad host strings raise ValueError from the URI parser, not PyMongoError
        logger.debug("Connection to %s failed", host, exc_info=True)
        raise_alert(HealthAlert(AlertKind.CONNECTION_FAILED, host, detail=exc))
        return alerts

    try:
        logger.info("Running health checks on %s", host)
        for check in MEMBER_CHECKS:
            try:
                found = check.run(client, host, config)
            except Exception as exc:
                # If the check raises, treat it as a failed check and move on
                logger.debug("%s check on %s raised", check.name, host, exc_info=True)
                found = [
                    HealthAlert(
                        AlertKind.CHECK_FAILED, host, member=check.name, detail=exc
                    )
                ]
            for alert in found:
                raise_alert(alert)
    finally:
        client.close()

    return alerts


def check_members(
    config: MonitorConfig,
    notifier: Notifier,
    client_factory: ClientFactory = connect_member,
) -> PassResult:
    """Check each configured member in turn.

    A member that cannot be reached, or whose checks fail, never stops the
    remaining members from being checked.
    """

    result = PassResult(started_at=datetime.now(timezone.utc))
    for host in config.members:
        result.hosts.append(host)
        result.alerts.extend(check_member(host, config, notifier, client_factory))
    result.finished_at = datetime.now(timezone.utc)

    logger.info(
        "Health check pass finished: %d member(s), %d alert(s)",
        len(result.hosts),
        len(result.alerts),
    )
    return result
