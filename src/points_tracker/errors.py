"""Failure taxonomy for the tracker workflows."""

from uuid import UUID


class TrackerError(Exception):
    """Base class for failures surfaced to the user."""

    def __init__(self, user_message: str) -> None:
        super().__init__(user_message)
        self.user_message = user_message


class ValidationFailure(TrackerError):
    """The requested action is not allowed in the current state."""


class CollaboratorFailure(TrackerError):
    """A remote collaborator failed or returned an unusable reply."""


class PartialBulkFailure(TrackerError):
    """Some deletions of a bulk operation failed."""

    def __init__(self, user_message: str, failed_ids: list[UUID]) -> None:
        super().__init__(user_message)
        self.failed_ids = failed_ids
