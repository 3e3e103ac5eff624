"""Config settings – SettingsFactory."""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, Sequence, TypeVar

from workforce_audit.config.settings.base import Settings
from workforce_audit.config.settings.loaders import EnvSettingsLoader, SettingsLoader
from workforce_audit.config.validation.errors import (
    ConfigError,
    MissingRequiredSettingError,
)

T = TypeVar("T", bound=Settings)


def _field_values(instance: Settings, settings_cls: type[Settings]) -> dict[str, Any]:
    return {f.name: getattr(instance, f.name) for f in dataclasses.fields(settings_cls)}  # type: ignore[arg-type]


def _is_required(field: dataclasses.Field[Any]) -> bool:
    return field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING


class SettingsFactory:
    """Build one settings group from an ordered list of loaders.

    Later loaders win on overlapping fields and *overrides* win over all
    loaders.  Loader errors are not swallowed: a malformed ``AUDIT_*``
    variable stops the worker instead of falling back to a default.
    """

    @staticmethod
    def create(
        settings_cls: type[T],
        loaders: Sequence[SettingsLoader] | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> T:
        """
        Raises
        ------
        MissingRequiredSettingError
            A field without default is still absent after merging.
        InvalidSettingValueError
            A value cannot be coerced or fails ``_validate``.
        ConfigError
            Any other construction failure.
        """
        merged: dict[str, Any] = {}
        for loader in loaders or ():
            merged.update(_field_values(loader.load(settings_cls), settings_cls))
        merged.update(overrides or {})

        missing = [f.name for f in dataclasses.fields(settings_cls) if _is_required(f) and f.name not in merged]  # type: ignore[arg-type]
        if missing:
            raise MissingRequiredSettingError(missing[0])

        try:
            return settings_cls(**merged)
        except ConfigError:
            raise
        except Exception as exc:
            raise ConfigError(f"Failed to construct {settings_cls.__name__}: {exc}") from exc

    @staticmethod
    def from_env(settings_cls: type[T], environ: Mapping[str, str] | None = None) -> T:
        """Shorthand for a single :class:`EnvSettingsLoader` over *environ*."""
        return SettingsFactory.create(settings_cls, [EnvSettingsLoader(environ)])


__all__ = ["SettingsFactory"]
