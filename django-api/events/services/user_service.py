"""Organizer profiles and their payment gateway credentials."""

from dataclasses import replace

import structlog
from django.utils import timezone

from events.domain import User, UserId
from events.domain.errors import UserNotFoundError
from events.integrations.payments import GatewayCredentials
from events.services.common import require_text
from events.stores.interfaces import UserStore

logger = structlog.get_logger(__name__)


class UserService:
    def __init__(self, store: UserStore) -> None:
        self._store = store

    def get_user(self, clerk_id: str) -> User:
        user = self._store.get_by_clerk_id(clerk_id)
        if user is None:
            raise UserNotFoundError(clerk_id)
        return user

    def get_user_by_email(self, email: str) -> User:
        user = self._store.get_by_email(email)
        if user is None:
            raise UserNotFoundError(email)
        return user

    def upsert_user(self, clerk_id: str, name: str, email: str) -> User:
        """Create the profile on first sign-in, refresh name and email afterwards."""
        name = require_text(name, "Name")
        email = require_text(email, "Email")
        existing = self._store.get_by_clerk_id(clerk_id)
        if existing is not None:
            user = replace(existing, name=name, email=email)
        else:
            user = User(id=UserId.new(), clerk_id=clerk_id, name=name, email=email, created_at=timezone.now())
            logger.info("user_created", clerk_id=clerk_id)
        return self._store.save(user)

    def update_razorpay_credentials(self, clerk_id: str, key_id: str, key_secret: str) -> User:
        user = self.get_user(clerk_id)
        updated = replace(
            user,
            razorpay_key_id=require_text(key_id, "Razorpay key ID"),
            razorpay_key_secret=require_text(key_secret, "Razorpay key secret"),
        )
        self._store.save(updated)
        logger.info("razorpay_credentials_updated", clerk_id=clerk_id)
        return updated

    def get_razorpay_credentials(self, clerk_id: str) -> GatewayCredentials | None:
        """Return the organizer's gateway keys, or None when not configured."""
        user = self._store.get_by_clerk_id(clerk_id)
        if user is None or not user.has_payment_credentials:
            return None
        return GatewayCredentials(key_id=user.razorpay_key_id, key_secret=user.razorpay_key_secret)
