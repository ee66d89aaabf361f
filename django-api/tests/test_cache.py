"""Tests for cache behavior.

Run with: pytest tests/test_cache.py -v
"""

import pytest
from django.core.cache import cache
from django.urls import reverse
from django.utils import timezone

from events import models
from events.handlers.views import EVENT_LIST_CACHE_KEY, event_cache_key
from tests.fakes import ORGANIZER


def _event(**fields) -> models.Event:
    now = timezone.now()
    defaults = {"title": "Meetup", "date": "2030-01-15", "created_by": ORGANIZER, "created_at": now, "updated_at": now}
    return models.Event.objects.create(**{**defaults, **fields})


@pytest.mark.django_db
class TestEventCache:
    """Tests for cached event reads."""

    def test_list_is_cached(self, api_client):
        """The first list read fills the cache and later reads come from it."""
        event = _event()
        first = api_client.get(reverse("event-list")).json()

        assert cache.get(EVENT_LIST_CACHE_KEY) == first
        models.Event.objects.filter(pk=event.pk).update(title="Changed")
        assert api_client.get(reverse("event-list")).json()[0]["title"] == "Meetup"

    def test_detail_is_cached(self, api_client):
        """Detail reads are cached per event."""
        event = _event()
        api_client.get(reverse("event-detail", args=[str(event.pk)]))
        assert cache.get(event_cache_key(str(event.pk)))["title"] == "Meetup"


@pytest.mark.django_db
class TestCacheInvalidation:
    """Tests for cache invalidation on model changes."""

    def test_event_save_invalidates_list_cache(self):
        """Saving an event invalidates the events:list cache key."""
        event = _event()
        cache.set(EVENT_LIST_CACHE_KEY, ["stale"])
        event.title = "Renamed"
        event.save()
        assert cache.get(EVENT_LIST_CACHE_KEY) is None

    def test_event_save_invalidates_detail_cache(self):
        """Saving an event invalidates the events:{id} cache key."""
        event = _event()
        key = event_cache_key(str(event.pk))
        cache.set(key, {"title": "stale"})
        event.save()
        assert cache.get(key) is None

    def test_event_delete_invalidates_both(self, api_client):
        """Deleting an event drops the list and detail entries."""
        event = _event()
        key = event_cache_key(str(event.pk))
        api_client.get(reverse("event-list"))
        api_client.get(reverse("event-detail", args=[str(event.pk)]))

        event.delete()

        assert cache.get(EVENT_LIST_CACHE_KEY) is None
        assert cache.get(key) is None
        assert api_client.get(reverse("event-list")).json() == []
