"""
Domain errors raised by the rotation services.

Every error here is an expected, recoverable outcome. Routes translate them to
HTTP responses via ``status_code``; anything else escaping a service is a bug.
"""


class RotationError(Exception):
    """Base exception for court rotation errors"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RotationError):
    """A team, court or queue entry does not exist"""

    status_code = 404


class InvariantViolation(RotationError):
    """The request would break a rotation rule (occupancy, uniqueness, tie score)"""

    pass


class InsufficientTeamsError(RotationError):
    """Not enough teams waiting to fill a court"""

    pass
