"""Domain error codes for the events module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    PASS_NOT_FOUND = "PASS_NOT_FOUND"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    SCHEDULED_EMAIL_NOT_FOUND = "SCHEDULED_EMAIL_NOT_FOUND"
    UPDATE_NOT_FOUND = "UPDATE_NOT_FOUND"
    INVALID_ID = "INVALID_ID"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    EVENT_AT_CAPACITY = "EVENT_AT_CAPACITY"
    INVALID_STATUS = "INVALID_STATUS"
    NO_PARTICIPANT_LIMIT = "NO_PARTICIPANT_LIMIT"
    PASS_ALREADY_EXISTS = "PASS_ALREADY_EXISTS"
    PASS_CODE_EXHAUSTED = "PASS_CODE_EXHAUSTED"
    PASS_NOT_ACTIVE = "PASS_NOT_ACTIVE"
    NO_RECIPIENTS = "NO_RECIPIENTS"
    INVALID_UPLOAD_TOKEN = "INVALID_UPLOAD_TOKEN"
    INVALID_WEBHOOK_SIGNATURE = "INVALID_WEBHOOK_SIGNATURE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """Raised when a record does not exist."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(code=code, message=message)


class EventNotFoundError(NotFoundError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(ErrorCode.EVENT_NOT_FOUND, "Event not found")
        self.event_id = event_id


class RegistrationNotFoundError(NotFoundError):
    """Raised when a registration is not found."""

    def __init__(self, registration_id: str) -> None:
        super().__init__(ErrorCode.REGISTRATION_NOT_FOUND, "Registration not found")
        self.registration_id = registration_id


class PassNotFoundError(NotFoundError):
    def __init__(self, pass_id: str) -> None:
        super().__init__(ErrorCode.PASS_NOT_FOUND, "Pass not found")
        self.pass_id = pass_id


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: str) -> None:
        super().__init__(ErrorCode.PRODUCT_NOT_FOUND, "Product not found")
        self.product_id = product_id


class PaymentNotFoundError(NotFoundError):
    def __init__(self, payment_id: str) -> None:
        super().__init__(ErrorCode.PAYMENT_NOT_FOUND, "Payment record not found")
        self.payment_id = payment_id


class UserNotFoundError(NotFoundError):
    def __init__(self, clerk_id: str) -> None:
        super().__init__(ErrorCode.USER_NOT_FOUND, "User not found")
        self.clerk_id = clerk_id


class FileNotFoundInStorageError(NotFoundError):
    def __init__(self, file_id: str) -> None:
        super().__init__(ErrorCode.FILE_NOT_FOUND, "File not found")
        self.file_id = file_id


class ScheduledEmailNotFoundError(NotFoundError):
    def __init__(self, email_id: str) -> None:
        super().__init__(ErrorCode.SCHEDULED_EMAIL_NOT_FOUND, "Scheduled email not found")
        self.email_id = email_id


class UpdateNotFoundError(NotFoundError):
    def __init__(self, update_id: str) -> None:
        super().__init__(ErrorCode.UPDATE_NOT_FOUND, "Update not found")
        self.update_id = update_id


class InvalidIdError(DomainError):
    """Raised when an identifier is malformed."""

    def __init__(self, kind: str = "record") -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
        )


class ValidationFailedError(DomainError):
    """Raised when input violates a domain rule."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.VALIDATION_FAILED, message=message)


class NotAuthorizedError(DomainError):
    def __init__(self, action: str = "update") -> None:
        super().__init__(
            code=ErrorCode.NOT_AUTHORIZED,
            message=f"Not authorized to {action} this event",
        )


class AlreadyRegisteredError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REGISTERED,
            message="Already registered for this event",
        )


class RegistrationClosedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.REGISTRATION_CLOSED,
            message="Registration is closed for this event",
        )


class EventAtCapacityError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EVENT_AT_CAPACITY,
            message="Event is at capacity. Cannot promote from waitlist",
        )


class InvalidStatusError(DomainError):
    """Raised when a transition is requested from the wrong status."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_STATUS, message=message)


class NoParticipantLimitError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NO_PARTICIPANT_LIMIT,
            message="Event has no participant limit",
        )


class PassAlreadyExistsError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.PASS_ALREADY_EXISTS,
            message="A pass already exists for this registration",
        )


class PassCodeExhaustedError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.PASS_CODE_EXHAUSTED,
            message="Unable to generate unique pass code",
        )


class PassNotActiveError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.PASS_NOT_ACTIVE, message="Pass is not active")


class NoRecipientsError(DomainError):
    def __init__(self, message: str = "No registrations found for this event") -> None:
        super().__init__(code=ErrorCode.NO_RECIPIENTS, message=message)


class InvalidUploadTokenError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_UPLOAD_TOKEN,
            message="Upload URL is invalid or has expired",
        )


class InvalidWebhookSignatureError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_WEBHOOK_SIGNATURE,
            message="Invalid webhook signature",
        )
