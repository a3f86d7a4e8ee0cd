"""
Error taxonomy for the catalog client and local state layer.
Every error raised by this package derives from CatalogError so callers can catch one type.
"""

from typing import Optional


class CatalogError(Exception):
	"""Base class for every failure surfaced by the catalog core."""


class ConfigError(CatalogError):
	"""The access credential is missing or still the placeholder value."""


class NetworkError(CatalogError):
	"""Transport-level failure: DNS, connect, read timeout, connection reset."""


class HttpStatusError(CatalogError):
	"""The remote service answered with a non-success status."""

	def __init__(self, status: int, reason: str = ''):
		self.status = status  # numeric HTTP status
		self.reason = reason  # reason phrase from the response line
		super().__init__(f"HTTP {status}: {reason}" if reason else f"HTTP {status}")


class SchemaError(CatalogError):
	"""A payload failed required-field or type validation."""

	def __init__(self, field: str, message: Optional[str] = None):
		self.field = field  # offending payload key
		super().__init__(message or f"Invalid or missing field '{field}'")


class PersistenceError(CatalogError):
	"""Reading or writing the persisted favorites blob failed."""


class StoreNotReadyError(CatalogError):
	"""A mutation was attempted before the favorites store finished loading."""
