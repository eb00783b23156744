"""Alert kinds raised by the replica set health checks."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

DEFAULT_SUBJECT = "Health Check Failed"


class AlertKind(Enum):
    """Every condition a health check can report."""

    CONNECTION_FAILED = "connection_failed"
    STATUS_NOT_OK = "status_not_ok"
    MEMBER_COUNT_LOW = "member_count_low"
    EVEN_VOTE_COUNT = "even_vote_count"
    MEMBER_UNHEALTHY = "member_unhealthy"
    HEARTBEAT_STALE = "heartbeat_stale"
    REPLICATION_LAG_HIGH = "replication_lag_high"
    DISK_SPACE_LOW = "disk_space_low"
    OPLOG_TOO_SHORT = "oplog_too_short"
    OPLOG_UNAVAILABLE = "oplog_unavailable"
    CHECK_FAILED = "check_failed"


_TEMPLATES = {
    AlertKind.CONNECTION_FAILED: "Failed to connect to replica set member: {host}. ({detail})",
    AlertKind.STATUS_NOT_OK: "Replica set status on host {host} is not OK.",
    AlertKind.MEMBER_COUNT_LOW: (
        "Replica set configuration on host {host} contains only {observed} "
        "members (minimum: {threshold})."
    ),
    AlertKind.EVEN_VOTE_COUNT: (
        "Replica set configuration on host {host} contains an even number of "
        "votes ({observed}) across {detail} members which will cause primary "
        "elections to fail."
    ),
    AlertKind.MEMBER_UNHEALTHY: (
        "{member} reported an unhealthy status as seen from host {host} "
        "(state: {detail})."
    ),
    AlertKind.HEARTBEAT_STALE: (
        "{member} appears to be disconnected from host {host} "
        "(last heartbeat: {observed}, threshold: {threshold} minutes)."
    ),
    AlertKind.REPLICATION_LAG_HIGH: (
        "{member} (secondary) appears to be falling behind on replication as "
        "seen from host {host} (optime date: {observed}, threshold: "
        "{threshold} minutes)."
    ),
    AlertKind.DISK_SPACE_LOW: (
        "Database has only remaining {observed:.2f}% storage size on host "
        "{host} (minimum: {threshold}%)."
    ),
    AlertKind.OPLOG_TOO_SHORT: (
        "Database oplog length for {host} is only {observed:,} minutes long "
        "(minimum: {threshold} minutes)."
    ),
    AlertKind.OPLOG_UNAVAILABLE: "Failed to retrieve oldest oplog timestamp for host {host}.",
    AlertKind.CHECK_FAILED: "The {member} check failed on host {host}: {detail}",
}


@dataclass(frozen=True)
class HealthAlert:
    """A single violated condition observed on one replica set member.

    ``host`` is the configured member the check ran against. ``member`` names
    the replica set member the condition is about when that differs, or the
    check name for ``CHECK_FAILED``.
    """

    kind: AlertKind
    host: str
    member: Optional[str] = None
    observed: Any = None
    threshold: Any = None
    detail: Any = None
    subject: str = DEFAULT_SUBJECT

    @property
    def message(self) -> str:
        return _TEMPLATES[self.kind].format(
            host=self.host,
            member=self.member,
            observed=self.observed,
            threshold=self.threshold,
            detail=self.detail,
        )

    def __str__(self) -> str:
        return self.message
