"""Handlers for entry passes and door check-in."""

from django.db import transaction
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response

from events import deps
from events.domain.errors import PassNotFoundError
from events.handlers.serializers import (
    AttendanceResultSerializer,
    BulkPassResultSerializer,
    BulkSendResultSerializer,
    PassCodeSerializer,
    PassSerializer,
    PassStatsSerializer,
    PassValidationSerializer,
    SendResultSerializer,
)
from events.handlers.views import OrganizerView


class EventPassesView(OrganizerView):
    """Handler for GET/POST /api/events/{event_id}/passes"""

    def get(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        return Response(PassSerializer(deps.pass_service().list_passes(event_id), many=True).data)

    def post(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        with transaction.atomic():
            result = deps.pass_service().generate_passes_for_event(event_id, request.user.email)
        return Response(BulkPassResultSerializer(result).data)


class EventPassesSendView(OrganizerView):
    """Handler for POST /api/events/{event_id}/passes/send"""

    def post(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        result = deps.pass_service().send_passes_to_event(event_id)
        return Response(BulkSendResultSerializer(result).data)


class PassStatsView(OrganizerView):
    """Handler for GET /api/events/{event_id}/passes/stats"""

    def get(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        return Response(PassStatsSerializer(deps.pass_service().pass_stats(event_id)).data)


class PassValidateView(OrganizerView):
    """Handler for POST /api/events/{event_id}/passes/validate"""

    def post(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        serializer = PassCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        validation = deps.pass_service().validate_pass_code(serializer.validated_data["code"], event_id)
        return Response(PassValidationSerializer(validation).data)


class RegistrationPassView(OrganizerView):
    """Handler for GET/POST /api/registrations/{registration_id}/pass"""

    def get(self, request: Request, registration_id: str) -> Response:
        self.owned_registration(request, registration_id)
        entry_pass = deps.pass_service().get_pass_for_registration(registration_id)
        if entry_pass is None:
            raise PassNotFoundError(registration_id)
        return Response(PassSerializer(entry_pass).data)

    def post(self, request: Request, registration_id: str) -> Response:
        self.owned_registration(request, registration_id)
        with transaction.atomic():
            entry_pass = deps.pass_service().generate_pass(registration_id, request.user.email)
        return Response(PassSerializer(entry_pass).data, status=status.HTTP_201_CREATED)


class AttendanceView(OrganizerView):
    """Handler for POST /api/registrations/{registration_id}/attendance"""

    def post(self, request: Request, registration_id: str) -> Response:
        self.owned_registration(request, registration_id)
        with transaction.atomic():
            result = deps.pass_service().mark_attendance(registration_id, request.user.email)
        return Response(AttendanceResultSerializer(result).data)


class WelcomeEmailView(OrganizerView):
    """Handler for POST /api/registrations/{registration_id}/welcome-email"""

    def post(self, request: Request, registration_id: str) -> Response:
        self.owned_registration(request, registration_id)
        return Response(SendResultSerializer(deps.pass_service().send_welcome_email(registration_id)).data)


class PassDetailView(OrganizerView):
    """Handler for DELETE /api/passes/{pass_id}"""

    def delete(self, request: Request, pass_id: str) -> Response:
        entry_pass = deps.pass_service().get_pass(pass_id)
        self.owned_event(request, str(entry_pass.event_id))
        with transaction.atomic():
            deps.pass_service().delete_pass(pass_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PassUseView(OrganizerView):
    """Handler for POST /api/passes/{pass_id}/use"""

    def post(self, request: Request, pass_id: str) -> Response:
        entry_pass = deps.pass_service().get_pass(pass_id)
        self.owned_event(request, str(entry_pass.event_id))
        with transaction.atomic():
            used = deps.pass_service().mark_pass_used(pass_id)
        return Response(PassSerializer(used).data)


class PassSendView(OrganizerView):
    """Handler for POST /api/passes/{pass_id}/send"""

    def post(self, request: Request, pass_id: str) -> Response:
        entry_pass = deps.pass_service().get_pass(pass_id)
        self.owned_event(request, str(entry_pass.event_id))
        return Response(SendResultSerializer(deps.pass_service().send_pass_email(pass_id)).data)
