from typing import Optional


class TrackerError(Exception):
    pass


class ValidationError(TrackerError):
    """Input rejected before any store call was made."""

    def __init__(self, error: dict):
        super().__init__(error.get("message", "invalid input"))
        self.error = error

    @property
    def field(self) -> Optional[str]:
        return self.error.get("field")


class StoreUnavailable(TrackerError):
    pass


class NotFound(TrackerError):
    def __init__(self, record_id: str):
        super().__init__(f"Record {record_id} does not exist")
        self.record_id = record_id


class Unauthorized(TrackerError):
    pass


class PendingApproval(TrackerError):
    pass
