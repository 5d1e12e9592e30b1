"""Application exceptions.

Services raise these; routers turn them into flash messages or error pages.
"""


class ShowcaseError(Exception):
    """Base exception for all AchieveHub errors."""

    pass


class NotFoundError(ShowcaseError):
    """Raised when a requested row does not exist or is not visible."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")


class PermissionDeniedError(ShowcaseError):
    """Raised when the acting user's role does not allow the action."""

    pass


class InvalidTransitionError(ShowcaseError):
    """Raised when a moderation or engagement action does not apply to the current state."""

    pass


class SubmissionError(ShowcaseError):
    """Raised when submitted data fails validation."""

    pass


class PhotoUploadError(SubmissionError):
    """Raised when a photo cannot be stored in the bucket."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Failed to upload photo: {filename}")
