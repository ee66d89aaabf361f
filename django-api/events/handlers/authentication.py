"""Caller identity from a trusted header set by the identity provider's proxy."""

from dataclasses import dataclass

from django.conf import settings
from rest_framework.authentication import BaseAuthentication
from rest_framework.request import Request


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, known only by email."""

    email: str

    @property
    def is_authenticated(self) -> bool:
        return True


class IdentityHeaderAuthentication(BaseAuthentication):
    def authenticate(self, request: Request) -> tuple[Identity, None] | None:
        email = request.headers.get(settings.IDENTITY_HEADER, "").strip()
        if not email:
            return None
        return Identity(email=email), None

    def authenticate_header(self, request: Request) -> str:
        return settings.IDENTITY_HEADER
