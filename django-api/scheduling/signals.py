"""Django signals for cache invalidation."""

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from scheduling.cache_keys import SESSION_TYPES_LIST
from scheduling.models import SessionType


@receiver([post_save, post_delete], sender=SessionType)
def invalidate_session_type_cache(sender, instance, **kwargs):
    """Invalidate the session type list when a session type is saved or deleted."""
    cache.delete(SESSION_TYPES_LIST)
