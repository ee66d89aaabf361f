"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses (see handlers.errors)
- Never contain business logic
- Never expose internal error details

Mutations run inside a transaction so row locks taken by the services hold
until the response is ready and queued emails go out only on commit.
"""

from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.http import HttpResponse
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from events import deps
from events.domain import Event, Registration
from events.handlers.serializers import (
    CancellationResultSerializer,
    EventInputSerializer,
    EventReplaceSerializer,
    EventSerializer,
    EventUpdateResultSerializer,
    ExportStatsSerializer,
    PromotionResultSerializer,
    RegisterSerializer,
    RegistrationCountsSerializer,
    RegistrationSerializer,
)
from events.services.event_service import EventDraft

EVENT_LIST_CACHE_KEY = "events:list"


def event_cache_key(event_id: str) -> str:
    return f"events:{event_id}"


class OrganizerView(APIView):
    """Base for views that act on behalf of an event owner."""

    permission_classes = [IsAuthenticated]

    def owned_event(self, request: Request, event_id: str, action: str = "manage") -> Event:
        return deps.event_service().require_owner(event_id, request.user.email, action)

    def owned_registration(self, request: Request, registration_id: str) -> Registration:
        registration = deps.registration_service().get_registration(registration_id)
        self.owned_event(request, str(registration.event_id))
        return registration


def _draft(data: dict) -> EventDraft:
    return EventDraft(
        title=data["title"],
        date=data["date"],
        description=data.get("description") or None,
        location=data.get("location") or None,
        header_image=data.get("header_image") or None,
        participant_limit=data.get("participant_limit"),
    )


class EventListView(APIView):
    """Handler for GET/POST /api/events"""

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated()]
        return super().get_permissions()

    def get(self, request: Request) -> Response:
        payload = cache.get(EVENT_LIST_CACHE_KEY)
        if payload is None:
            payload = EventSerializer(deps.event_service().list_events(), many=True).data
            cache.set(EVENT_LIST_CACHE_KEY, payload, settings.EVENT_CACHE_TTL)
        return Response(payload)

    def post(self, request: Request) -> Response:
        serializer = EventInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            event = deps.event_service().create_event(_draft(serializer.validated_data), request.user.email)
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class MyEventListView(OrganizerView):
    """Handler for GET /api/events/mine"""

    def get(self, request: Request) -> Response:
        events = deps.event_service().list_events_for_owner(request.user.email)
        return Response(EventSerializer(events, many=True).data)


class EventDetailView(APIView):
    """Handler for GET/PUT/DELETE /api/events/{event_id}"""

    def get_permissions(self):
        if self.request.method in ("PUT", "DELETE"):
            return [IsAuthenticated()]
        return super().get_permissions()

    def get(self, request: Request, event_id: str) -> Response:
        key = event_cache_key(event_id)
        payload = cache.get(key)
        if payload is None:
            payload = EventSerializer(deps.event_service().get_event(event_id)).data
            cache.set(key, payload, settings.EVENT_CACHE_TTL)
        return Response(payload)

    def put(self, request: Request, event_id: str) -> Response:
        serializer = EventReplaceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        with transaction.atomic():
            result = deps.event_service().update_event(
                event_id,
                _draft(data),
                request.user.email,
                confirmed_limit_decrease=data["confirm_limit_decrease"],
            )
        return Response(EventUpdateResultSerializer(result).data)

    def delete(self, request: Request, event_id: str) -> Response:
        with transaction.atomic():
            deps.event_service().delete_event(event_id, request.user.email)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ToggleRegistrationView(OrganizerView):
    """Handler for POST /api/events/{event_id}/toggle-registration"""

    def post(self, request: Request, event_id: str) -> Response:
        with transaction.atomic():
            closed = deps.event_service().toggle_registration(event_id, request.user.email)
        return Response({"registration_closed": closed})


class EventRegistrationsView(APIView):
    """Handler for GET/POST /api/events/{event_id}/registrations

    Anyone may register; only the owner may list.
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [IsAuthenticated()]
        return super().get_permissions()

    def get(self, request: Request, event_id: str) -> Response:
        deps.event_service().require_owner(event_id, request.user.email)
        registrations = deps.registration_service().list_registrations(event_id)
        return Response(RegistrationSerializer(registrations, many=True).data)

    def post(self, request: Request, event_id: str) -> Response:
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            registration = deps.registration_service().register(
                event_id,
                serializer.validated_data["name"],
                serializer.validated_data["email"],
            )
        return Response(RegistrationSerializer(registration).data, status=status.HTTP_201_CREATED)


class RegistrationCheckView(APIView):
    """Handler for GET /api/events/{event_id}/registrations/check?email="""

    def get(self, request: Request, event_id: str) -> Response:
        email = request.query_params.get("email", "")
        return Response({"registered": deps.registration_service().is_registered(event_id, email)})


class RegistrationCountsView(APIView):
    """Handler for GET /api/events/{event_id}/registrations/counts"""

    def get(self, request: Request, event_id: str) -> Response:
        counts = deps.registration_service().count_registrations(event_id)
        return Response(RegistrationCountsSerializer(counts).data)


class WaitlistView(OrganizerView):
    """Handler for GET /api/events/{event_id}/waitlist"""

    def get(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        waitlist = deps.registration_service().get_waitlist(event_id)
        return Response(RegistrationSerializer(waitlist, many=True).data)


class PromoteAllView(OrganizerView):
    """Handler for POST /api/events/{event_id}/waitlist/promote"""

    def post(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        with transaction.atomic():
            result = deps.registration_service().promote_till_limit(event_id)
        return Response(PromotionResultSerializer(result).data)


class MyRegistrationsView(OrganizerView):
    """Handler for GET /api/registrations: registrations across the caller's events."""

    def get(self, request: Request) -> Response:
        owned = {e.id for e in deps.event_service().list_events_for_owner(request.user.email)}
        registrations = [
            r for r in deps.registration_service().list_all_registrations() if r.event_id in owned
        ]
        return Response(RegistrationSerializer(registrations, many=True).data)


class RegistrationDetailView(OrganizerView):
    """Handler for GET/DELETE /api/registrations/{registration_id}"""

    def get(self, request: Request, registration_id: str) -> Response:
        registration = self.owned_registration(request, registration_id)
        return Response(RegistrationSerializer(registration).data)

    def delete(self, request: Request, registration_id: str) -> Response:
        self.owned_registration(request, registration_id)
        with transaction.atomic():
            deps.registration_service().delete_registration(registration_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CancelRegistrationView(OrganizerView):
    """Handler for POST /api/registrations/{registration_id}/cancel"""

    def post(self, request: Request, registration_id: str) -> Response:
        self.owned_registration(request, registration_id)
        with transaction.atomic():
            result = deps.registration_service().cancel(registration_id)
        return Response(CancellationResultSerializer(result).data)


class RestoreRegistrationView(OrganizerView):
    """Handler for POST /api/registrations/{registration_id}/restore"""

    def post(self, request: Request, registration_id: str) -> Response:
        self.owned_registration(request, registration_id)
        with transaction.atomic():
            registration = deps.registration_service().restore(registration_id)
        return Response(RegistrationSerializer(registration).data)


class PromoteRegistrationView(OrganizerView):
    """Handler for POST /api/registrations/{registration_id}/promote"""

    def post(self, request: Request, registration_id: str) -> Response:
        self.owned_registration(request, registration_id)
        with transaction.atomic():
            registration = deps.registration_service().promote(registration_id)
        return Response(RegistrationSerializer(registration).data)


class MoveToWaitlistView(OrganizerView):
    """Handler for POST /api/registrations/{registration_id}/move-to-waitlist"""

    def post(self, request: Request, registration_id: str) -> Response:
        self.owned_registration(request, registration_id)
        with transaction.atomic():
            registration = deps.registration_service().move_to_waitlist(registration_id)
        return Response(RegistrationSerializer(registration).data)


class EventExportView(OrganizerView):
    """Handler for GET /api/events/{event_id}/export

    ``?output=html`` returns the rendered report itself.
    """

    def get(self, request: Request, event_id: str) -> Response | HttpResponse:
        self.owned_event(request, event_id)
        export = deps.export_service().export_event(event_id, request.user.email)
        if request.query_params.get("output") == "html":
            return HttpResponse(export.html, content_type="text/html; charset=utf-8")
        return Response(
            {
                "event": EventSerializer(export.event).data,
                "stats": ExportStatsSerializer(export.stats).data,
                "html": export.html,
            }
        )


class EventExportEmailView(OrganizerView):
    """Handler for POST /api/events/{event_id}/export/email"""

    def post(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        with transaction.atomic():
            deps.export_service().email_export_report(event_id, request.user.email)
        return Response({"queued": True}, status=status.HTTP_202_ACCEPTED)
