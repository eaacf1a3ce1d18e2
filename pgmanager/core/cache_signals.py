"""
Cache invalidation signals
Automatically invalidate cached dashboard aggregates when occupancy data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import bump_owner_cache_version

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

TRACKED_MODELS = ('Property', 'Floor', 'Room', 'Bed', 'Tenant', 'Payment')


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations to prevent excessive cache clearing.
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def get_owner_id(instance):
    """Walk up the Property hierarchy to find the owning user id"""
    model_name = type(instance).__name__
    if model_name == 'Property':
        return instance.owner_id
    if model_name == 'Floor':
        return instance.property.owner_id
    if model_name == 'Room':
        return instance.floor.property.owner_id
    if model_name == 'Bed':
        return instance.room.floor.property.owner_id
    if model_name in ('Tenant', 'Payment'):
        return instance.property.owner_id
    return None


# --- Signal Handlers ---

@receiver([post_save, post_delete])
def invalidate_owner_dashboard_cache(sender, instance, **kwargs):
    """Invalidate an owner's dashboard cache when property data changes"""
    if is_suspended():
        return

    if sender.__name__ not in TRACKED_MODELS or sender._meta.app_label not in ('properties', 'tenants', 'payments'):
        return

    try:
        owner_id = get_owner_id(instance)
        bump_owner_cache_version(owner_id)
    except Exception as e:
        # Parent rows may already be gone during cascading deletes
        logger.warning(f"Error in invalidate_owner_dashboard_cache signal for {sender.__name__}: {e}")
