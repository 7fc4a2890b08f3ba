# uhf_gen2/core/status.py

from enum import Enum, auto

class PollState(Enum):
    """Phase of a streaming poll session."""
    IDLE = auto()
    POLLING = auto() # Poll command issued, tag frames being collected
    DRAINING = auto() # Stop sent, discarding bytes still in flight

    def __str__(self):
        return self.name
