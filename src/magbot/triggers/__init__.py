"""
Triggers that run the sync pipeline.

Supported triggers:
- Feed watcher: fetches each configured magazine feed, compares its
  items against the files already on disk and downloads what is
  missing. Runs once, or repeatedly in daemon mode every
  ``check-interval`` seconds.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class TriggerState:
    """
    Represents the current state of a trigger.

    Tracks when a trigger last ran, how many times it has fired, and
    the most recent error.

    Attributes:
        name: Trigger identifier (e.g., "feed_watch")
        last_run: Timestamp of most recent execution
        run_count: Total number of times this trigger has fired
        error_count: Number of runs that ended with errors
        last_error: Most recent error message, if any
        metadata: Arbitrary key-value pairs for trigger-specific state
    """

    name: str
    last_run: Optional[datetime] = None
    run_count: int = 0
    error_count: int = 0
    last_error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def record_run(self, error: Optional[str] = None) -> None:
        """
        Record a trigger execution.

        Args:
            error: Error message if the run failed, None for success
        """
        self.last_run = datetime.now()
        self.run_count += 1
        self.last_error = error
        if error:
            self.error_count += 1


__all__ = [
    "TriggerState",
]
