"""Config – 12-factor settings and loaders."""

from workforce_audit.config.settings import (
    AuditSettings,
    EnvSettingsLoader,
    MongoSettings,
    RabbitMQSettings,
    RedisSettings,
    Settings,
    SettingsFactory,
    SettingsLoader,
)
from workforce_audit.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "AuditSettings",
    "ConfigError",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "MongoSettings",
    "RabbitMQSettings",
    "RedisSettings",
    "Settings",
    "SettingsFactory",
    "SettingsLoader",
]
