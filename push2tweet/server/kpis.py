"""Per-server request counters reported by the heartbeat."""

from __future__ import annotations


class ServerKPIs:
    """Requests attended since the last heartbeat tick.

    Only mutated from the event loop thread, so no locking.
    """

    def __init__(self) -> None:
        self._attended_requests = 0

    @property
    def attended_requests(self) -> int:
        return self._attended_requests

    def increment(self) -> None:
        self._attended_requests += 1

    def reset(self) -> int:
        """Zero the counter and return the value it held."""
        attended = self._attended_requests
        self._attended_requests = 0
        return attended

    def snapshot(self) -> dict[str, int]:
        return {"attendedRequests": self._attended_requests}
