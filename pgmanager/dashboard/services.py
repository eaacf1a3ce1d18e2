"""
Dashboard aggregates

Every function takes the owner id first so results can be cached per owner
with cached_query; saving or deleting occupancy data moves the owner to a
new cache generation.
"""
import calendar
import logging
from datetime import date
from decimal import Decimal
from django.db.models import Count, Q, Sum
from django.utils import timezone
from pgmanager.core.cache_utils import cached_query, DASHBOARD_STATS_CACHE_TTL, DASHBOARD_TRENDS_CACHE_TTL
from pgmanager.payments.models import Payment
from pgmanager.properties.models import Property, Room, Bed
from pgmanager.realtime.server import broadcast_dashboard_update
from pgmanager.tenants.models import Tenant

logger = logging.getLogger('pgmanager.dashboard')


def _scope(owner_id, property_id):
    properties = Property.objects.filter(owner_id=owner_id)
    if property_id:
        properties = properties.filter(pk=property_id)
    return properties


def month_starts(count, today=None):
    """First day of each of the last `count` months, oldest first, current month included"""
    today = today or timezone.localdate()
    year, month = today.year, today.month
    starts = []
    for _ in range(count):
        starts.append(date(year, month, 1))
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(starts))


def month_end(start):
    return start.replace(day=calendar.monthrange(start.year, start.month)[1])


@cached_query(cache_ttl=DASHBOARD_STATS_CACHE_TTL, key_prefix='dashboard_stats')
def get_dashboard_stats(owner_id, property_id=None):
    """Room, bed, tenant and revenue counts across the owner's properties (or one of them)"""
    properties = _scope(owner_id, property_id)
    today = timezone.localdate()
    current_month = today.strftime('%Y-%m')

    rooms = Room.objects.filter(floor__property__in=properties).aggregate(
        total=Count('id'),
        occupied=Count('id', filter=Q(status='OCCUPIED')),
        available=Count('id', filter=Q(status='AVAILABLE')),
        maintenance=Count('id', filter=Q(status='MAINTENANCE')),
    )
    beds = Bed.objects.filter(room__floor__property__in=properties).aggregate(
        total=Count('id'),
        occupied=Count('id', filter=Q(status='OCCUPIED')),
        available=Count('id', filter=Q(status='AVAILABLE')),
    )
    beds['occupancy_rate'] = round((beds['occupied'] / beds['total']) * 100, 1) if beds['total'] else 0
    tenants = Tenant.objects.filter(property__in=properties).aggregate(
        total=Count('id'),
        active=Count('id', filter=Q(status='ACTIVE')),
    )

    payments = Payment.objects.filter(property__in=properties)
    paid_this_month = payments.filter(status='PAID', month=current_month)
    pending = payments.filter(status='PENDING')
    revenue = {
        'monthly_revenue': paid_this_month.aggregate(total=Sum('amount'))['total'] or Decimal('0'),
        'paid_payments': paid_this_month.count(),
        'pending_amount': pending.aggregate(total=Sum('amount'))['total'] or Decimal('0'),
        'pending_payments': pending.count(),
        'overdue_payments': pending.filter(due_date__lt=today).count(),
    }

    return {
        'rooms': rooms,
        'beds': beds,
        'tenants': tenants,
        'properties': {'total': properties.count()},
        'revenue': revenue,
    }


def get_recent_activities(owner_id, property_id=None, limit=20):
    """Tenant joins and received payments, newest first"""
    properties = _scope(owner_id, property_id)
    activities = []

    tenants = Tenant.objects.filter(property__in=properties).select_related('property', 'bed').order_by('-created_at')
    for tenant in tenants[:limit]:
        activities.append({
            'id': f'tenant-{tenant.id}',
            'type': 'tenant_joined',
            'title': 'New tenant joined',
            'description': f"{tenant.full_name} joined {tenant.property.name}",
            'property_id': tenant.property_id,
            'tenant_id': tenant.tenant_id,
            'bed_number': tenant.bed.bed_number if tenant.bed_id else None,
            'timestamp': tenant.created_at,
        })

    payments = Payment.objects.filter(
        property__in=properties, status='PAID', paid_date__isnull=False
    ).select_related('tenant').order_by('-paid_date')
    for payment in payments[:limit]:
        activities.append({
            'id': f'payment-{payment.id}',
            'type': 'payment_received',
            'title': 'Payment received',
            'description': f"{payment.tenant.full_name} paid {payment.amount}",
            'property_id': payment.property_id,
            'payment_id': payment.payment_id,
            'amount': payment.amount,
            'timestamp': payment.paid_date,
        })

    activities.sort(key=lambda activity: activity['timestamp'], reverse=True)
    return activities[:limit]


@cached_query(cache_ttl=DASHBOARD_TRENDS_CACHE_TTL, key_prefix='occupancy_trends')
def get_occupancy_trends(owner_id, months=6, property_id=None):
    """Beds in use per month, counting tenants whose stay overlaps the month"""
    properties = _scope(owner_id, property_id)
    total_beds = Bed.objects.filter(room__floor__property__in=properties).count()
    tenants = Tenant.objects.filter(property__in=properties)

    trends = []
    for start in month_starts(months):
        end = month_end(start)
        occupied = tenants.filter(joining_date__lte=end).filter(
            Q(leaving_date__isnull=True) | Q(leaving_date__gte=start)
        ).exclude(status='PENDING').count()
        occupied = min(occupied, total_beds) if total_beds else occupied
        trends.append({
            'month': start.strftime('%b %Y'),
            'month_key': start.strftime('%Y-%m'),
            'total_beds': total_beds,
            'occupied_beds': occupied,
            'occupancy_rate': round((occupied / total_beds) * 100, 1) if total_beds else 0,
        })
    return trends


@cached_query(cache_ttl=DASHBOARD_TRENDS_CACHE_TTL, key_prefix='revenue_trends')
def get_revenue_trends(owner_id, months=6, property_id=None):
    """Collected and outstanding amounts per billing month"""
    properties = _scope(owner_id, property_id)
    payments = Payment.objects.filter(property__in=properties)

    trends = []
    for start in month_starts(months):
        key = start.strftime('%Y-%m')
        month_payments = payments.filter(month=key)
        totals = month_payments.aggregate(
            revenue=Sum('amount', filter=Q(status='PAID')),
            pending=Sum('amount', filter=Q(status='PENDING')),
            payments_count=Count('id'),
            paid_count=Count('id', filter=Q(status='PAID')),
        )
        trends.append({
            'month': start.strftime('%b %Y'),
            'month_key': key,
            'revenue': totals['revenue'] or Decimal('0'),
            'pending': totals['pending'] or Decimal('0'),
            'payments_count': totals['payments_count'],
            'paid_count': totals['paid_count'],
        })
    return trends


def push_dashboard_update(owner_id, property_id):
    """Send fresh stats for one property to its dashboard subscribers"""
    try:
        stats = get_dashboard_stats(owner_id, property_id)
    except Exception as e:
        logger.warning(f"Could not compute dashboard stats for property {property_id}: {e}")
        return False
    return broadcast_dashboard_update(property_id, stats)
