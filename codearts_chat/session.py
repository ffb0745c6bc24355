"""Session state for chat WebSocket connections."""
import asyncio
import time
import uuid
from typing import Optional, Set


class Session:
    """Per-connection state: identity, activity, in-flight pipeline tasks."""

    def __init__(self, remote_address: Optional[str] = None):
        self.session_id = str(uuid.uuid4())[:8]
        self.remote_address = remote_address or "unknown"
        self.messages_received = 0

        # Pipelines started for this connection and not yet finished
        self.pending: Set[asyncio.Task] = set()
        # Held while a pipeline runs when per-connection ordering is enabled
        self.lock = asyncio.Lock()

        now = time.monotonic()
        self.first_activity_time = now
        self.last_activity_time = now

    def touch(self):
        """Update last activity timestamp."""
        self.last_activity_time = time.monotonic()

    def idle_seconds(self) -> float:
        """Seconds since last activity."""
        return time.monotonic() - self.last_activity_time

    def track(self, task: asyncio.Task):
        """Keep a strong reference to ``task`` until it completes."""
        self.pending.add(task)
        task.add_done_callback(self.pending.discard)
