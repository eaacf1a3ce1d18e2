"""Utility functions for audit logging and business event logging"""
import logging
from .models import AuditLog

logger = logging.getLogger('pgmanager.core')
business_logger = logging.getLogger('pgmanager.business')


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, property_id=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (tenant_create, payment_paid, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object (e.g., tenant name)
        property_id: Property the object belongs to
    """
    try:
        audit_user = None
        if user:
            audit_user = user
        elif request and hasattr(request, 'user'):
            audit_user = request.user

        ip_address = get_client_ip(request) if request else None

        if not action or not model_name or not object_id:
            logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
            return None

        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            property_id=str(property_id) if property_id is not None else None,
            changes=changes or {},
            ip_address=ip_address
        )
    except Exception as e:
        # Audit failures must not fail the main operation
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def log_business_event(event, **details):
    """Log a domain event (tenant_created, payment_marked_paid, ...) at INFO"""
    detail_text = ', '.join(f"{key}={value}" for key, value in details.items())
    business_logger.info(f"{event}: {detail_text}")
