class TutorAvailabilityException(Exception):
    """Base exception for the tutor availability application"""

    status_code = 500
    message = "Internal Server Error"

    def __init__(self, message: str = None, details: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details


class ValidationError(TutorAvailabilityException):
    """Exception raised when a request is missing or has invalid parameters"""
    status_code = 400
    message = "Invalid request"


class NotFoundError(TutorAvailabilityException):
    """Exception raised when a tutor profile cannot be found"""
    status_code = 404
    message = "Tutor not found"


class StorageError(TutorAvailabilityException):
    """Exception raised when availability data cannot be read or written"""
    status_code = 500
    message = "Internal Server Error"


class AvailabilityError(TutorAvailabilityException):
    """Exception raised for availability resolution errors"""
    status_code = 500
    message = "Internal Server Error"


class MalformedRecordError(TutorAvailabilityException):
    """Raised for a single rule or exception row with unusable fields.

    Always caught during resolution; the offending record is skipped.
    """
    status_code = 500
    message = "Malformed availability record"
