# =============================================================================
# File: tests/fakes/fake_publisher.py
# Description: Recording QueuePublisher for unit testing
# =============================================================================

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple


class RecordingPublisher:
    """
    Fake QueuePublisher that keeps every enqueue in memory.

    Usage:
        publisher = RecordingPublisher()
        notifier = Notifier(publisher)
        ...
        assert len(publisher.calls_to("message")) == 1
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.fail_with: Optional[Exception] = None
        self.connected = False

    async def connect(self) -> None:
        self.connected = True

    async def enqueue(self, queue: str, payload: Dict[str, Any]) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.calls.append((queue, payload))

    async def close(self) -> None:
        self.connected = False

    def calls_to(self, queue: str) -> List[Dict[str, Any]]:
        return [payload for name, payload in self.calls if name == queue]

    def clear(self) -> None:
        self.calls.clear()
