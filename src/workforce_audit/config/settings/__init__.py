"""Config settings – 12-factor env-based configuration."""
from workforce_audit.config.settings.base import Settings
from workforce_audit.config.settings.factory import SettingsFactory
from workforce_audit.config.settings.loaders import EnvSettingsLoader, SettingsLoader
from workforce_audit.config.settings.pipeline import (
    AuditSettings,
    MongoSettings,
    RabbitMQSettings,
    RedisSettings,
)

__all__ = [
    "AuditSettings",
    "EnvSettingsLoader",
    "MongoSettings",
    "RabbitMQSettings",
    "RedisSettings",
    "Settings",
    "SettingsFactory",
    "SettingsLoader",
]
