"""Key-value storage service package."""

from .store import KeyValueStore, coerce_value  # noqa: F401
