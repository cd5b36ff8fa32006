from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for container stores and cached resolution.

    Pass one of these values as ``lock_mode`` when creating a container.
    ``THREAD`` is the default and makes caching resolution linearizable per key:
    concurrent resolvers of one key invoke its builder at most once and all
    observe the same instance.

    Use ``NONE`` only for containers confined to a single thread, where the
    lock overhead buys nothing.
    """

    THREAD = "thread"
    """Guard stores and cached builds with ``threading.RLock``."""

    NONE = "none"
    """Disable locking around store reads/writes and cached builds."""
