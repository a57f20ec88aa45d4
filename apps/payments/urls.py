"""
Payment URL configuration.
"""

from django.urls import path

from apps.payments.views import (
    CollectEMIView,
    CollectionsReportView,
    DueListView,
    ExportCollectionsReportView,
    ReceiptDetailView,
    ReceiptListView,
)

urlpatterns = [
    path('loans/<int:loan_id>/collect', CollectEMIView.as_view(), name='loan-collect'),
    path('collections/due-list', DueListView.as_view(), name='due-list'),
    path('receipts', ReceiptListView.as_view(), name='receipt-list'),
    path('receipts/<str:receipt_id>', ReceiptDetailView.as_view(), name='receipt-detail'),
    path('reports/collections', CollectionsReportView.as_view(), name='collections-report'),
    path(
        'reports/collections/export',
        ExportCollectionsReportView.as_view(),
        name='collections-report-export',
    ),
]
