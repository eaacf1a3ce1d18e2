from django.urls import path
from .views import payment_list_create, payment_detail, payment_bulk_create, payment_mark_paid, payment_stats

urlpatterns = [
    path('payments/', payment_list_create, name='payment-list-create'),
    path('payments/bulk/', payment_bulk_create, name='payment-bulk-create'),
    path('payments/stats/', payment_stats, name='payment-stats'),
    path('payments/<int:pk>/', payment_detail, name='payment-detail'),
    path('payments/<int:pk>/mark-paid/', payment_mark_paid, name='payment-mark-paid'),
]
