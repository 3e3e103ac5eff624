"""Application-layer errors – cross-cutting concerns at use-case level."""

from __future__ import annotations

from workforce_audit.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


__all__ = ["ApplicationError"]
