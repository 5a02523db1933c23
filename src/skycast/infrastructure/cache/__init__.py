"""Cache implementations."""

from skycast.infrastructure.cache.error_log import ErrorLog

__all__ = ["ErrorLog"]
