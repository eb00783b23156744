"""MongoDB replica set monitoring package."""

__version__ = "1.0.0"

from .alerts import AlertKind, HealthAlert
from .config import ConfigError, MonitorConfig, load_config
from .notifier import Notifier

__all__ = [
    "AlertKind",
    "HealthAlert",
    "ConfigError",
    "MonitorConfig",
    "load_config",
    "Notifier",
]
