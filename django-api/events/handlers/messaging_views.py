"""Handlers for organizer messages, scheduled emails and update announcements."""

from django.db import transaction
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response

from events import deps
from events.domain import Update, UpdateStatus
from events.handlers.serializers import (
    BulkSendResultSerializer,
    MessageSerializer,
    ProviderResultSerializer,
    ScheduledEmailSerializer,
    ScheduleEmailSerializer,
    UpdateChangesSerializer,
    UpdateInputSerializer,
    UpdateSerializer,
    UpdateStatsSerializer,
)
from events.handlers.views import OrganizerView


class EventEmailView(OrganizerView):
    """Handler for POST /api/events/{event_id}/emails

    Without ``registration_ids`` the message goes to every registrant.
    """

    def post(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        serializer = MessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        messaging = deps.messaging_service()
        if data.get("registration_ids") is None:
            result = messaging.send_bulk_email(event_id, data["subject"], data["content"])
        else:
            result = messaging.send_to_selected(event_id, data["registration_ids"], data["subject"], data["content"])
        return Response(BulkSendResultSerializer(result).data)


class ScheduledEmailListView(OrganizerView):
    """Handler for GET/POST /api/events/{event_id}/scheduled-emails"""

    def get(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        scheduled = deps.messaging_service().list_scheduled(event_id)
        return Response(ScheduledEmailSerializer(scheduled, many=True).data)

    def post(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        serializer = ScheduleEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        with transaction.atomic():
            scheduled = deps.messaging_service().schedule_email(
                event_id,
                data["subject"],
                data["content"],
                data["scheduled_for"],
                registration_ids=data.get("registration_ids"),
            )
        return Response(ScheduledEmailSerializer(scheduled).data, status=status.HTTP_201_CREATED)


class CancelScheduledEmailView(OrganizerView):
    """Handler for POST /api/scheduled-emails/{scheduled_email_id}/cancel"""

    def post(self, request: Request, scheduled_email_id: str) -> Response:
        messaging = deps.messaging_service()
        scheduled = messaging.get_scheduled(scheduled_email_id)
        self.owned_event(request, str(scheduled.event_id))
        with transaction.atomic():
            cancelled = messaging.cancel_scheduled(scheduled_email_id)
        return Response(ScheduledEmailSerializer(cancelled).data)


class EmailStatusView(OrganizerView):
    """Handler for GET /api/emails/{email_id}: provider-side delivery status"""

    def get(self, request: Request, email_id: str) -> Response:
        return Response(ProviderResultSerializer(deps.messaging_service().email_status(email_id)).data)


class CancelEmailView(OrganizerView):
    """Handler for POST /api/emails/{email_id}/cancel"""

    def post(self, request: Request, email_id: str) -> Response:
        return Response(ProviderResultSerializer(deps.messaging_service().cancel_email(email_id)).data)


class UpdateOwnerMixin:
    def owned_update(self, request: Request, update_id: str) -> Update:
        update = deps.update_service().get_update(update_id)
        self.owned_event(request, str(update.event_id))
        return update


class EventUpdatesView(OrganizerView):
    """Handler for GET/POST /api/events/{event_id}/updates"""

    def get(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        return Response(UpdateSerializer(deps.update_service().list_updates(event_id), many=True).data)

    def post(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        serializer = UpdateInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            update = deps.update_service().create_update(
                event_id,
                serializer.validated_data["title"],
                serializer.validated_data["content"],
                request.user.email,
            )
        return Response(UpdateSerializer(update).data, status=status.HTTP_201_CREATED)


class UpdateStatsView(OrganizerView):
    """Handler for GET /api/events/{event_id}/updates/stats"""

    def get(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        return Response(UpdateStatsSerializer(deps.update_service().update_stats(event_id)).data)


class MyUpdatesView(OrganizerView):
    """Handler for GET /api/updates/mine"""

    def get(self, request: Request) -> Response:
        updates = deps.update_service().list_updates_by_author(request.user.email)
        return Response(UpdateSerializer(updates, many=True).data)


class UpdateDetailView(UpdateOwnerMixin, OrganizerView):
    """Handler for GET/PATCH/DELETE /api/updates/{update_id}"""

    def get(self, request: Request, update_id: str) -> Response:
        return Response(UpdateSerializer(self.owned_update(request, update_id)).data)

    def patch(self, request: Request, update_id: str) -> Response:
        self.owned_update(request, update_id)
        serializer = UpdateChangesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        with transaction.atomic():
            update = deps.update_service().edit_update(
                update_id,
                title=data.get("title"),
                content=data.get("content"),
                status=UpdateStatus(data["status"]) if "status" in data else None,
            )
        return Response(UpdateSerializer(update).data)

    def delete(self, request: Request, update_id: str) -> Response:
        self.owned_update(request, update_id)
        with transaction.atomic():
            deps.update_service().delete_update(update_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class SendUpdateView(UpdateOwnerMixin, OrganizerView):
    """Handler for POST /api/updates/{update_id}/send"""

    def post(self, request: Request, update_id: str) -> Response:
        self.owned_update(request, update_id)
        with transaction.atomic():
            update = deps.update_service().send_update(update_id)
        return Response(UpdateSerializer(update).data)


class PublishUpdateView(UpdateOwnerMixin, OrganizerView):
    """Handler for POST /api/updates/{update_id}/publish: publish and send at once"""

    def post(self, request: Request, update_id: str) -> Response:
        self.owned_update(request, update_id)
        with transaction.atomic():
            update = deps.update_service().publish_and_send(update_id)
        return Response(UpdateSerializer(update).data)
