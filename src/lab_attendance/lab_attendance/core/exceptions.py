class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTimeError(ValidationError):
    """Sign-out time is missing, unparseable or not after sign-in."""


class CrossDayError(ValidationError):
    """Sign-out falls on a different local calendar day than sign-in."""


class NotFoundError(DomainError):
    """No record matches the given token or id."""


class AlreadyResolvedError(DomainError):
    """The pending record is no longer pending."""


class DeadlineExpiredError(DomainError):
    """Student self-service attempted after the record's deadline."""


class DuplicateError(DomainError):
    """A record with the same identity already exists."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class StoreError(Exception):
    """Persistence read/write failure. Always retryable from the caller's view."""
