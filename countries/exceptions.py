# countries/exceptions.py


class CountryServiceError(Exception):
    """Base class for every error raised by the countries service layer."""


# Raised when either upstream feed fails. The caller is never told which one.
class ExternalServiceError(CountryServiceError):
    def __init__(self, message="Could not fetch data from one or more external APIs"):
        super().__init__(message)


class StorageError(CountryServiceError):
    pass


class NotFoundError(CountryServiceError):
    default_message = "Not found"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class CountryNotFound(NotFoundError):
    default_message = "Country not found"


class SnapshotNotFound(NotFoundError):
    default_message = "Summary image not found"
