"""Loading and validation of the monitor configuration file."""

from dataclasses import dataclass
import json
import logging
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.json"
DEFAULT_CONNECT_TIMEOUT = 5.0


class ConfigError(ValueError):
    """Raised when the configuration file is missing or malformed."""


@dataclass(frozen=True)
class AuthSettings:
    username: Optional[str] = None
    password: Optional[str] = None
    auth_source: Optional[str] = None


@dataclass(frozen=True)
class SlackSettings:
    channel_url: str
    notify_members: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MonitorConfig:
    """Static settings for a monitor process. Never changes after loading."""

    members: Tuple[str, ...]
    database: str
    min_replica_set_members: int
    max_heartbeat_threshold: float
    max_replication_delay: float
    min_oplog_length: float
    alert_on_remaining_storage_per: float
    interval: float
    auth: Optional[AuthSettings] = None
    slack: Optional[SlackSettings] = None
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT


def _require(data: Dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ConfigError(f"Missing required config key: {key}")
    return data[key]


def _number(data: Dict[str, Any], key: str, minimum: float = 0) -> float:
    value = _require(data, key)
    # bool is a subclass of int and never a sensible threshold
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"Config key {key} must be a number, got {value!r}")
    if value < minimum:
        raise ConfigError(f"Config key {key} must be >= {minimum}, got {value!r}")
    return value


def _parse_auth(raw: Any) -> Optional[AuthSettings]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigError("Config key auth must be an object")
    if raw.get("username") is None and raw.get("password") is None:
        return None
    return AuthSettings(
        username=raw.get("username"),
        password=raw.get("password"),
        auth_source=raw.get("authSource"),
    )


def _parse_slack(raw: Any) -> Optional[SlackSettings]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigError("Config key slack must be an object")
    channel_url = raw.get("channelUrl")
    if not channel_url:
        raise ConfigError("Config key slack.channelUrl is required when slack is set")
    notify = raw.get("notifyMembers") or []
    if not isinstance(notify, list):
        raise ConfigError("Config key slack.notifyMembers must be a list")
    return SlackSettings(channel_url=channel_url, notify_members=tuple(notify))


def parse_config(data: Any) -> MonitorConfig:
    """Build a :class:`MonitorConfig` from the decoded JSON document."""

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a JSON object")

    members = _require(data, "members")
    if not isinstance(members, list) or not all(isinstance(m, str) for m in members):
        raise ConfigError("Config key members must be a list of host:port strings")

    database = _require(data, "database")
    if not isinstance(database, str) or not database:
        raise ConfigError("Config key database must be a non-empty string")

    return MonitorConfig(
        members=tuple(members),
        database=database,
        min_replica_set_members=int(_number(data, "minReplicaSetMembers")),
        max_heartbeat_threshold=_number(data, "maxHeartbeatThreshold"),
        max_replication_delay=_number(data, "maxReplicationDelay"),
        min_oplog_length=_number(data, "minOplogLength"),
        alert_on_remaining_storage_per=_number(data, "alertOnRemainingStoragePer"),
        interval=_number(data, "interval", minimum=1),
        auth=_parse_auth(data.get("auth")),
        slack=_parse_slack(data.get("slack")),
        connect_timeout=(
            _number(data, "connectTimeout", minimum=1)
            if "connectTimeout" in data
            else DEFAULT_CONNECT_TIMEOUT
        ),
    )


def load_config(path: str) -> MonitorConfig:
    """Read and validate the JSON config file at ``path``."""

    logger.info("Loading configuration from %s", path)
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except OSError as exc:
        raise ConfigError(f"Unable to read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {path} is not valid JSON: {exc}") from exc
    return parse_config(data)
