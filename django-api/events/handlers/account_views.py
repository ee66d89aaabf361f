"""Handlers for organizer profiles and file uploads."""

from django.db import transaction
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from events import deps
from events.handlers.serializers import (
    FileMetadataSerializer,
    RazorpayCredentialsSerializer,
    StoredFileSerializer,
    UserInputSerializer,
    UserSerializer,
)


class MeView(APIView):
    """Handler for GET/PUT /api/users/me

    The caller's email doubles as the identity provider id.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        return Response(UserSerializer(deps.user_service().get_user(request.user.email)).data)

    def put(self, request: Request) -> Response:
        serializer = UserInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = request.user.email
        with transaction.atomic():
            user = deps.user_service().upsert_user(email, serializer.validated_data["name"], email)
        return Response(UserSerializer(user).data)


class RazorpayCredentialsView(APIView):
    """Handler for GET/PUT /api/users/me/razorpay"""

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        credentials = deps.user_service().get_razorpay_credentials(request.user.email)
        return Response(
            {
                "configured": credentials is not None,
                "key_id": credentials.key_id if credentials else None,
            }
        )

    def put(self, request: Request) -> Response:
        serializer = RazorpayCredentialsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            user = deps.user_service().update_razorpay_credentials(
                request.user.email,
                serializer.validated_data["key_id"],
                serializer.validated_data["key_secret"],
            )
        return Response(UserSerializer(user).data)


class UploadUrlView(APIView):
    """Handler for POST /api/files/upload-url"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request) -> Response:
        ticket = deps.file_service().issue_upload_url()
        upload_url = request.build_absolute_uri(reverse("file-upload", kwargs={"token": ticket.token}))
        return Response(
            {"upload_url": upload_url, "token": ticket.token, "expires_in": ticket.expires_in},
            status=status.HTTP_201_CREATED,
        )


class UploadView(APIView):
    """Handler for POST /api/files/upload/{token}

    The signed token is the credential, so no identity is required.
    """

    parser_classes = [MultiPartParser, FormParser]

    def post(self, request: Request, token: str) -> Response:
        content = request.FILES.get("file")
        if content is None:
            raise ValidationError({"file": ["No file was submitted."]})
        storage_id = deps.file_service().upload(token, content)
        return Response({"storage_id": storage_id}, status=status.HTTP_201_CREATED)


class FileListView(APIView):
    """Handler for POST /api/files: record metadata for an uploaded file"""

    permission_classes = [IsAuthenticated]

    def post(self, request: Request) -> Response:
        serializer = FileMetadataSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        with transaction.atomic():
            stored = deps.file_service().save_metadata(
                name=data["name"],
                storage_id=data["storage_id"],
                content_type=data["content_type"],
                size=data["size"],
                uploaded_by=request.user.email,
            )
        return Response(StoredFileSerializer(stored).data, status=status.HTTP_201_CREATED)


class FileDetailView(APIView):
    """Handler for GET /api/files/{file_id}"""

    def get(self, request: Request, file_id: str) -> Response:
        files = deps.file_service()
        stored = files.get_file(file_id)
        payload = StoredFileSerializer(stored).data
        payload["url"] = files.file_url(stored.storage_id)
        return Response(payload)


class StoredFileView(APIView):
    """Handler for DELETE /api/files/storage/{storage_id}"""

    permission_classes = [IsAuthenticated]

    def delete(self, request: Request, storage_id: str) -> Response:
        files = deps.file_service()
        stored = files.get_file_by_storage_id(storage_id)
        if stored.uploaded_by and stored.uploaded_by != request.user.email:
            raise PermissionDenied("Not authorized to delete this file")
        with transaction.atomic():
            files.delete_file(storage_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
