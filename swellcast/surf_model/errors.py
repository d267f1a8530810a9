"""
Exceptions raised by the surf model and the rating store.
"""


class SwellcastError(Exception):
    """Base class for all swellcast errors."""


class InsufficientTrainingData(SwellcastError):
    """Raised when a user has no rated hours to learn from."""

    def __init__(self, user_id=None):
        self.user_id = user_id
        if user_id is None:
            message = 'Not enough training data to make a prediction'
        else:
            message = f'Not enough training data to make a prediction for user {user_id}'
        super().__init__(message)


class UnknownLabel(SwellcastError):
    """Raised when a stored label is not part of its enumeration."""

    def __init__(self, label, enumeration):
        self.label = label
        self.enumeration = tuple(enumeration)
        super().__init__(
            f"Unknown label {label!r}, expected one of {', '.join(self.enumeration)}"
        )


class RatingValidationError(SwellcastError):
    """Raised when a rating payload is missing fields or has bad values."""


class DuplicateRating(SwellcastError):
    """Raised when a rating already exists for (userId, time)."""


class RatingNotFound(SwellcastError):
    """Raised when no rating exists for (userId, time)."""
