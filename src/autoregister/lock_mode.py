from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for registry mutations and shared-instance creation.

    Pass one of these values as ``Registry(lock_mode=...)``. The registry keeps
    async single-flight through in-flight futures in every mode; the mode only
    decides whether thread locks guard the entry map and sync creation.
    """

    THREAD = "thread"
    """Guard registration and creation with ``threading.Lock``."""

    NONE = "none"
    """Disable thread locks; only safe when a single thread uses the registry."""
