# uhf_gen2/core/config.py

"""Delays and timeouts used by the command engine and the streaming poller."""

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class ReaderConfig:
    """
    All delays and timeouts are in seconds.

    Attributes:
        settle_delay: Pause between writing a command and reading its reply.
        response_timeout: Read timeout for a command reply.
        read_size: Maximum bytes requested per transport read.
        poll_settle: Pause after issuing a bounded multi-round poll.
        poll_read_timeout: Read timeout for each read while polling.
        max_poll_wait: Bounded polls stop at the first empty read after this long.
        idle_sleep: Sleep after an empty or failed read in a bounded poll.
        drain_settle: Pause between the stop command and draining stale bytes.
        retry_sleep: Sleep after an empty or failed read in a timed poll.
    """
    settle_delay: float = 0.2
    response_timeout: float = 0.5
    read_size: int = 256
    poll_settle: float = 0.1
    poll_read_timeout: float = 0.05
    max_poll_wait: float = 3.0
    idle_sleep: float = 0.05
    drain_settle: float = 0.1
    retry_sleep: float = 0.01

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 0:
                raise ValueError(f"{f.name} must not be negative, got {value}")
        if self.read_size < 1:
            raise ValueError(f"read_size must be at least 1, got {self.read_size}")


DEFAULT_CONFIG = ReaderConfig()
