from django.urls import path
from .views import (
    document_list_create, document_detail, document_download,
    notice_list_create, notice_detail, notice_mark_read
)

urlpatterns = [
    # Document endpoints
    path('documents/', document_list_create, name='document-list-create'),
    path('documents/<int:pk>/', document_detail, name='document-detail'),
    path('documents/<int:pk>/download/', document_download, name='document-download'),

    # Notice endpoints
    path('notices/', notice_list_create, name='notice-list-create'),
    path('notices/<int:pk>/', notice_detail, name='notice-detail'),
    path('notices/<int:pk>/read/', notice_mark_read, name='notice-mark-read'),
]
