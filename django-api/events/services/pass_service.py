"""Entry pass issuance, validation and attendance."""

import secrets
from collections.abc import Callable
from dataclasses import dataclass, field, replace

import structlog
from django.utils import timezone

from events.domain import (
    EventId,
    Pass,
    PassCode,
    PassId,
    PassStatus,
    Registration,
    RegistrationId,
    RegistrationStatus,
)
from events.domain.errors import (
    DomainError,
    InvalidStatusError,
    PassAlreadyExistsError,
    PassCodeExhaustedError,
    PassNotActiveError,
    PassNotFoundError,
    RegistrationNotFoundError,
)
from events.domain.value_objects import PASS_CODE_ALPHABET, PASS_CODE_LENGTH
from events.integrations.email import EmailClient
from events.services import emails
from events.services.common import load_event, parse_id
from events.services.delivery import BulkSendResult, SendResult, deliver, deliver_all
from events.stores.interfaces import EventStore, PassStore, RegistrationStore

logger = structlog.get_logger(__name__)


def random_pass_code() -> str:
    return "".join(secrets.choice(PASS_CODE_ALPHABET) for _ in range(PASS_CODE_LENGTH))


@dataclass(frozen=True)
class PassOutcome:
    """Result of bulk issuance for one registration."""

    registration_id: str
    attendee_name: str
    attendee_email: str
    status: str
    pass_code: str | None = None
    pass_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class BulkPassResult:
    total_registrations: int
    results: list[PassOutcome] = field(default_factory=list)
    errors: list[PassOutcome] = field(default_factory=list)
    truncated: bool = False

    @property
    def generated(self) -> int:
        return sum(1 for r in self.results if r.status == "generated")

    @property
    def already_exists(self) -> int:
        return sum(1 for r in self.results if r.status == "already_exists")

    @property
    def error_count(self) -> int:
        return len(self.errors)


@dataclass(frozen=True)
class PassValidation:
    valid: bool
    error: str | None = None
    entry_pass: Pass | None = None


@dataclass(frozen=True)
class AttendanceResult:
    success: bool
    message: str
    attendee_name: str
    attendee_email: str
    already_marked: bool = False
    email_sent: bool = False


@dataclass(frozen=True)
class PassStats:
    total: int
    active: int
    used: int
    expired: int


class PassService:
    """Service for one-time entry passes."""

    def __init__(
        self,
        events: EventStore,
        registrations: RegistrationStore,
        passes: PassStore,
        email_client: EmailClient,
        max_attempts: int = 10,
        bulk_limit: int = 500,
        code_factory: Callable[[], str] = random_pass_code,
    ) -> None:
        self._events = events
        self._registrations = registrations
        self._passes = passes
        self._email_client = email_client
        self._max_attempts = max_attempts
        self._bulk_limit = bulk_limit
        self._code_factory = code_factory

    def generate_pass(self, registration_id: str, generated_by: str) -> Pass:
        """Issue a pass for a registration.

        Raises:
            RegistrationNotFoundError: If the registration does not exist.
            PassAlreadyExistsError: If the registration already holds a pass.
            PassCodeExhaustedError: If no unused code was found.
        """
        registration = self._get_registration(registration_id)
        if registration.status == RegistrationStatus.CANCELLED:
            raise InvalidStatusError("Cannot issue a pass for a cancelled registration")
        entry_pass = self._issue(registration, generated_by)
        logger.info("pass_generated", registration_id=registration_id, pass_id=str(entry_pass.id))
        return entry_pass

    def generate_passes_for_event(self, event_id: str, generated_by: str) -> BulkPassResult:
        """Issue passes to every registered participant that lacks one.

        One registration failing never stops the batch.
        """
        eid = parse_id(EventId, event_id, "event")
        load_event(self._events, eid)
        registered = self._registrations.list_by_status(eid, RegistrationStatus.REGISTERED)
        results: list[PassOutcome] = []
        errors: list[PassOutcome] = []
        for registration in registered[: self._bulk_limit]:
            outcome = PassOutcome(
                registration_id=str(registration.id),
                attendee_name=registration.name,
                attendee_email=registration.email,
                status="generated",
            )
            existing = self._passes.get_for_registration(registration.id)
            if existing is not None:
                results.append(replace(outcome, status="already_exists", pass_code=existing.code.value))
                continue
            try:
                entry_pass = self._issue(registration, generated_by)
            except DomainError as e:
                errors.append(replace(outcome, status="error", error=e.message))
                continue
            results.append(replace(outcome, pass_code=entry_pass.code.value, pass_id=str(entry_pass.id)))

        result = BulkPassResult(
            total_registrations=len(registered),
            results=results,
            errors=errors,
            truncated=len(registered) > self._bulk_limit,
        )
        logger.info(
            "passes_generated_for_event",
            event_id=event_id,
            generated=result.generated,
            already_exists=result.already_exists,
            errors=result.error_count,
        )
        return result

    def get_pass(self, pass_id: str) -> Pass:
        entry_pass = self._passes.get(parse_id(PassId, pass_id, "pass"))
        if entry_pass is None:
            raise PassNotFoundError(pass_id)
        return entry_pass

    def list_passes(self, event_id: str) -> list[Pass]:
        return self._passes.list_for_event(parse_id(EventId, event_id, "event"))

    def get_pass_for_registration(self, registration_id: str) -> Pass | None:
        return self._passes.get_for_registration(parse_id(RegistrationId, registration_id, "registration"))

    def mark_pass_used(self, pass_id: str) -> Pass:
        entry_pass = self.get_pass(pass_id)
        if entry_pass.status != PassStatus.ACTIVE:
            raise PassNotActiveError()
        used = replace(entry_pass, status=PassStatus.USED, used_at=timezone.now())
        self._passes.save(used)
        logger.info("pass_used", pass_id=pass_id, event_id=str(used.event_id))
        return used

    def validate_pass_code(self, code: str, event_id: str) -> PassValidation:
        """Check a code presented at the door without consuming it."""
        eid = parse_id(EventId, event_id, "event")
        try:
            pass_code = PassCode(code.strip().upper())
        except ValueError:
            return PassValidation(valid=False, error="Pass not found")
        entry_pass = self._passes.get_by_code(pass_code)
        if entry_pass is None:
            return PassValidation(valid=False, error="Pass not found")
        if entry_pass.event_id != eid:
            return PassValidation(valid=False, error="Pass is not valid for this event")
        if entry_pass.status == PassStatus.USED:
            return PassValidation(valid=False, error="Pass has already been used")
        if entry_pass.status != PassStatus.ACTIVE:
            return PassValidation(valid=False, error="Pass has expired")
        return PassValidation(valid=True, entry_pass=entry_pass)

    def delete_pass(self, pass_id: str) -> None:
        entry_pass = self.get_pass(pass_id)
        self._passes.delete(entry_pass.id)
        logger.info("pass_deleted", pass_id=pass_id)

    def send_pass_email(self, pass_id: str) -> SendResult:
        entry_pass = self.get_pass(pass_id)
        event = load_event(self._events, entry_pass.event_id)
        return deliver(self._email_client, emails.entry_pass(event, entry_pass))

    def send_passes_to_event(self, event_id: str) -> BulkSendResult:
        eid = parse_id(EventId, event_id, "event")
        event = load_event(self._events, eid)
        messages = [(str(p.id), emails.entry_pass(event, p)) for p in self._passes.list_for_event(eid)]
        result = deliver_all(self._email_client, messages, self._bulk_limit)
        logger.info("passes_emailed", event_id=event_id, sent=result.sent, errors=result.error_count)
        return result

    def mark_attendance(self, registration_id: str, marked_by: str) -> AttendanceResult:
        """Record attendance once and send the welcome email."""
        registration = self._get_registration(registration_id)
        if registration.attended_at is not None:
            return AttendanceResult(
                success=False,
                message="Attendance already marked for this registration",
                attendee_name=registration.name,
                attendee_email=registration.email,
                already_marked=True,
            )

        attended = replace(registration, attended_at=timezone.now(), attended_by=marked_by)
        self._registrations.save(attended)
        event = load_event(self._events, registration.event_id)
        sent = deliver(self._email_client, emails.attendance_welcome(event, attended))
        logger.info("attendance_marked", registration_id=registration_id, email_sent=sent.success)
        return AttendanceResult(
            success=True,
            message=(
                "Attendance marked and welcome email sent successfully"
                if sent.success
                else "Attendance marked but the welcome email could not be sent"
            ),
            attendee_name=attended.name,
            attendee_email=attended.email,
            email_sent=sent.success,
        )

    def send_welcome_email(self, registration_id: str) -> SendResult:
        registration = self._get_registration(registration_id)
        event = load_event(self._events, registration.event_id)
        return deliver(self._email_client, emails.attendance_welcome(event, registration))

    def pass_stats(self, event_id: str) -> PassStats:
        passes = self.list_passes(event_id)
        return PassStats(
            total=len(passes),
            active=sum(1 for p in passes if p.status == PassStatus.ACTIVE),
            used=sum(1 for p in passes if p.status == PassStatus.USED),
            expired=sum(1 for p in passes if p.status == PassStatus.EXPIRED),
        )

    def _issue(self, registration: Registration, generated_by: str) -> Pass:
        if self._passes.get_for_registration(registration.id) is not None:
            raise PassAlreadyExistsError()
        entry_pass = Pass(
            id=PassId.new(),
            event_id=registration.event_id,
            registration_id=registration.id,
            code=self._unique_code(),
            attendee_name=registration.name,
            attendee_email=registration.email,
            status=PassStatus.ACTIVE,
            generated_at=timezone.now(),
            generated_by=generated_by,
        )
        return self._passes.save(entry_pass)

    def _unique_code(self) -> PassCode:
        for _ in range(self._max_attempts):
            code = PassCode(self._code_factory())
            if self._passes.get_by_code(code) is None:
                return code
        logger.error("pass_code_exhausted", attempts=self._max_attempts)
        raise PassCodeExhaustedError()

    def _get_registration(self, registration_id: str) -> Registration:
        registration = self._registrations.get(parse_id(RegistrationId, registration_id, "registration"))
        if registration is None:
            raise RegistrationNotFoundError(registration_id)
        return registration
