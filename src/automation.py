"""
Automation run bookkeeping.

Every pipeline run opens one automation_logs row as 'running' and closes it
as success, partial or failed with its counters and errors.
"""

import time

from src.database import Database

LOG_DISCOVERY = 'discovery'
LOG_METRICS = 'metrics-update'
LOG_REFRESH = 'tool-refresh'


class AutomationRun:
    """One automation_logs row for the lifetime of a pipeline run."""

    def __init__(self, db: Database, log_type: str):
        self.db = db
        self.log_type = log_type
        self.started = time.monotonic()
        self.log_id = db.create_automation_log(log_type, 'running')

    def duration_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)

    def finish(self, metadata: dict, failures: int = 0) -> str:
        """Close the run as success, or partial when some items failed."""
        status = 'partial' if failures else 'success'
        self.db.finish_automation_log(
            self.log_id, status, {**metadata, 'duration': self.duration_ms()}
        )
        return status

    def fail(self, error: Exception):
        """Close the run as failed."""
        self.db.finish_automation_log(
            self.log_id, 'failed', {'duration': self.duration_ms(), 'errors': [str(error)]}
        )
