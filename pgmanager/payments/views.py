import logging
from decimal import Decimal
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone
from pgmanager.core.cache_utils import cached_query, PAYMENT_STATS_CACHE_TTL
from pgmanager.core.permissions import IsActiveAccount
from pgmanager.core.responses import success_response, error_response, validation_error_response, paginate
from pgmanager.core.utils import create_audit_log, log_business_event
from pgmanager.dashboard.services import push_dashboard_update
from pgmanager.properties.access import get_owned_property, get_owned_bed
from pgmanager.realtime.server import broadcast_payment_update, broadcast_activity
from pgmanager.tenants.models import Tenant
from .filters import PaymentFilter
from .models import Payment, generate_payment_id
from .serializers import PaymentSerializer, MarkPaidSerializer, BulkPaymentSerializer

logger = logging.getLogger('pgmanager.payments')

PAYMENT_REQUIRED_FIELDS = ['payment_id', 'tenant_id', 'property_id', 'amount', 'due_date']


def _owned_payments(user):
    return Payment.objects.filter(property__owner=user).select_related('tenant', 'bed', 'property')


def _get_owned_payment(user, pk):
    try:
        return _owned_payments(user).filter(pk=pk).first()
    except (TypeError, ValueError):
        return None


def _bed_in_property(user, bed_ref, property_id):
    """Owned bed that sits in the given property, or None"""
    bed = get_owned_bed(user, bed_ref)
    if bed is None or bed.room.floor.property_id != property_id:
        return None
    return bed


def _announce(payment, action, user):
    data = PaymentSerializer(payment).data
    broadcast_payment_update(payment.property_id, data, action)
    push_dashboard_update(user.id, payment.property_id)
    return data


@cached_query(cache_ttl=PAYMENT_STATS_CACHE_TTL, key_prefix='payment_stats')
def get_payment_stats(owner_id, year, property_id=None):
    payments = Payment.objects.filter(property__owner_id=owner_id, year=year)
    if property_id:
        payments = payments.filter(property_id=property_id)
    today = timezone.localdate()

    totals = payments.aggregate(
        total_payments=Count('id'),
        paid_payments=Count('id', filter=Q(status='PAID')),
        pending_payments=Count('id', filter=Q(status='PENDING')),
        overdue_payments=Count('id', filter=Q(status='PENDING', due_date__lt=today)),
        total_revenue=Sum('amount'),
        paid_revenue=Sum('amount', filter=Q(status='PAID')),
        pending_revenue=Sum('amount', filter=Q(status='PENDING')),
    )
    for key in ('total_revenue', 'paid_revenue', 'pending_revenue'):
        totals[key] = totals[key] or Decimal('0')

    by_type = payments.values('payment_type').annotate(
        count=Count('id'), amount=Sum('amount')
    ).order_by('payment_type')
    totals['year'] = year
    totals['by_type'] = list(by_type)
    return totals


@api_view(['GET', 'POST'])
@permission_classes([IsActiveAccount])
def payment_list_create(request):
    """List payments (property_id, tenant_id, status, payment_type, month, year) or create one"""
    if request.method == 'GET':
        queryset = PaymentFilter(request.query_params, queryset=_owned_payments(request.user)).qs
        items, pagination = paginate(queryset, request, default_limit=20)
        return success_response({
            'payments': PaymentSerializer(items, many=True).data,
            'pagination': pagination,
        })

    missing = [field for field in PAYMENT_REQUIRED_FIELDS if not request.data.get(field)]
    if missing:
        return error_response(f"Missing required fields: {', '.join(missing)}", missing_fields=missing)

    if Payment.objects.filter(payment_id=request.data.get('payment_id')).exists():
        return error_response('Payment with this ID already exists')

    prop = get_owned_property(request.user, request.data.get('property_id'))
    if prop is None:
        return error_response('Property not found or access denied', status.HTTP_404_NOT_FOUND)

    try:
        tenant = Tenant.objects.filter(pk=request.data.get('tenant_id'), property=prop).first()
    except (TypeError, ValueError):
        tenant = None
    if tenant is None:
        return error_response('Tenant not found in this property', status.HTTP_404_NOT_FOUND)

    data = request.data.copy()
    data['property'] = prop.id
    data['tenant'] = tenant.id
    bed_ref = data.get('bed_id') or data.get('bed')
    data.pop('bed_id', None)
    if bed_ref:
        bed = _bed_in_property(request.user, bed_ref, prop.id)
        if bed is None:
            return error_response('Bed not found in this property', status.HTTP_404_NOT_FOUND)
        data['bed'] = bed.id
    elif tenant.bed_id:
        data['bed'] = tenant.bed_id
    serializer = PaymentSerializer(data=data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    payment = serializer.save(created_by=request.user)
    data = _announce(payment, 'create', request.user)
    log_business_event('payment_created', payment_id=payment.payment_id, tenant_id=tenant.tenant_id,
                       amount=payment.amount)
    create_audit_log(request, 'payment_create', 'Payment', payment.id, object_name=payment.payment_id,
                     property_id=prop.id, changes={'amount': str(payment.amount), 'tenant_id': tenant.tenant_id})
    return success_response(data, message='Payment created successfully', status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsActiveAccount])
def payment_detail(request, pk):
    """Retrieve, update or delete a payment; paid payments cannot be deleted"""
    payment = _get_owned_payment(request.user, pk)
    if payment is None:
        return error_response('Payment not found or access denied', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(PaymentSerializer(payment).data)

    if request.method in ('PUT', 'PATCH'):
        data = request.data.copy()
        for key in ('tenant', 'tenant_id', 'property', 'property_id'):
            data.pop(key, None)
        if 'bed_id' in data:
            data['bed'] = data.get('bed_id')
            data.pop('bed_id')
        if data.get('bed'):
            bed = _bed_in_property(request.user, data['bed'], payment.property_id)
            if bed is None:
                return error_response('Bed not found in this property', status.HTTP_404_NOT_FOUND)
            data['bed'] = bed.id
        new_payment_id = data.get('payment_id')
        if new_payment_id and Payment.objects.filter(payment_id=new_payment_id).exclude(pk=payment.pk).exists():
            return error_response('Payment with this ID already exists')

        serializer = PaymentSerializer(payment, data=data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        payment = serializer.save()
        data = _announce(payment, 'update', request.user)
        create_audit_log(request, 'payment_update', 'Payment', payment.id, object_name=payment.payment_id,
                         property_id=payment.property_id,
                         changes={key: str(value) for key, value in serializer.validated_data.items()})
        return success_response(data, message='Payment updated successfully')

    if payment.status == 'PAID':
        return error_response('Cannot delete a paid payment')

    payment_pk, property_id, payment_code = payment.id, payment.property_id, payment.payment_id
    payment.delete()
    broadcast_payment_update(property_id, {'id': payment_pk, 'payment_id': payment_code}, 'delete')
    push_dashboard_update(request.user.id, property_id)
    logger.info(f"Payment {payment_code} deleted by {request.user.email}")
    create_audit_log(request, 'payment_delete', 'Payment', payment_pk, object_name=payment_code,
                     property_id=property_id)
    return success_response(message='Payment deleted successfully')


@api_view(['POST'])
@permission_classes([IsActiveAccount])
def payment_bulk_create(request):
    """Generate pending payments for the due date's month; tenants already charged for it are skipped"""
    serializer = BulkPaymentSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    params = serializer.validated_data

    prop = get_owned_property(request.user, params['property_id'])
    if prop is None:
        return error_response('Property not found or access denied', status.HTTP_404_NOT_FOUND)

    tenants = Tenant.objects.filter(property=prop, status='ACTIVE').select_related('bed')
    if params.get('tenant_ids'):
        tenants = tenants.filter(pk__in=params['tenant_ids'])
    tenants = list(tenants)
    if not tenants:
        return error_response('No active tenants found')

    due_date = params['due_date']
    month = due_date.strftime('%Y-%m')
    payment_type = params['payment_type']
    already_charged = set(Payment.objects.filter(
        tenant__in=tenants, payment_type=payment_type, month=month
    ).values_list('tenant_id', flat=True))
    description = params.get('description') or f"{payment_type.lower()} payment for {month}"

    created = []
    with transaction.atomic():
        for tenant in tenants:
            amount = params.get('amount') or (tenant.bed.rent if tenant.bed else None)
            if tenant.id in already_charged or not amount:
                continue
            created.append(Payment.objects.create(
                payment_id=generate_payment_id(),
                tenant=tenant,
                bed=tenant.bed,
                property=prop,
                amount=amount,
                payment_type=payment_type,
                due_date=due_date,
                month=month,
                year=due_date.year,
                description=description,
                created_by=request.user,
            ))

    skipped = len(tenants) - len(created)
    if created:
        broadcast_payment_update(prop.id, {'created': len(created), 'month': month, 'payment_type': payment_type},
                                 'bulk-create')
        push_dashboard_update(request.user.id, prop.id)
    log_business_event('payments_generated', property_id=prop.id, month=month, created=len(created), skipped=skipped)
    create_audit_log(request, 'payment_bulk_create', 'Property', prop.id, object_name=prop.name, property_id=prop.id,
                     changes={'month': month, 'payment_type': payment_type, 'created': len(created),
                              'skipped': skipped})
    return success_response({
        'created': len(created),
        'skipped': skipped,
        'payments': PaymentSerializer(created, many=True).data,
    }, message=f"{len(created)} payment records created successfully", status_code=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsActiveAccount])
def payment_mark_paid(request, pk):
    """Mark a pending payment as paid; paid_date defaults to now"""
    payment = _get_owned_payment(request.user, pk)
    if payment is None:
        return error_response('Payment not found or access denied', status.HTTP_404_NOT_FOUND)
    if payment.status == 'PAID':
        return error_response('Payment is already marked as paid')

    serializer = MarkPaidSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    payment.status = 'PAID'
    payment.paid_date = serializer.validated_data.get('paid_date') or timezone.now()
    if serializer.validated_data.get('payment_method'):
        payment.payment_method = serializer.validated_data['payment_method']
    if serializer.validated_data.get('transaction_id'):
        payment.transaction_id = serializer.validated_data['transaction_id']
    payment.save()

    data = _announce(payment, 'paid', request.user)
    broadcast_activity(payment.property_id, {
        'type': 'payment_received',
        'message': f"{payment.tenant.full_name} paid {payment.amount}",
        'payment_id': payment.payment_id,
    })
    log_business_event('payment_marked_paid', payment_id=payment.payment_id, amount=payment.amount,
                       method=payment.payment_method)
    create_audit_log(request, 'payment_paid', 'Payment', payment.id, object_name=payment.payment_id,
                     property_id=payment.property_id,
                     changes={'paid_date': payment.paid_date.isoformat(), 'payment_method': payment.payment_method})
    return success_response(data, message='Payment marked as paid')


@api_view(['GET'])
@permission_classes([IsActiveAccount])
def payment_stats(request):
    """Counts and sums of the year's payments, optionally for one property"""
    try:
        year = int(request.query_params.get('year') or timezone.localdate().year)
    except ValueError:
        return error_response('year must be a number')

    property_id = request.query_params.get('property_id')
    if property_id:
        prop = get_owned_property(request.user, property_id)
        if prop is None:
            return error_response('Property not found or access denied', status.HTTP_404_NOT_FOUND)
        property_id = prop.id

    return success_response(get_payment_stats(request.user.id, year, property_id))
