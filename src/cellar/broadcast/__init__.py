"""Broadcaster registry.

``get_broadcaster()`` returns the active adapter, a ``FakeBroadcaster``
unless a socket-backed one was installed with ``set_broadcaster()``.
"""

from cellar.broadcast.fake_adapter import FakeBroadcaster
from cellar.broadcast.port import Broadcaster

__all__ = ["Broadcaster", "FakeBroadcaster", "get_broadcaster", "reset_broadcaster", "set_broadcaster"]

_current_broadcaster: Broadcaster | None = None


def get_broadcaster() -> Broadcaster:
    global _current_broadcaster
    if _current_broadcaster is None:
        _current_broadcaster = FakeBroadcaster()
    return _current_broadcaster


def set_broadcaster(broadcaster: Broadcaster) -> None:
    global _current_broadcaster
    _current_broadcaster = broadcaster


def reset_broadcaster() -> None:
    global _current_broadcaster
    _current_broadcaster = None
