"""
Payment views for the Loan Management System.

Views are thin; business logic lives in the service layer.
"""

import logging

from rest_framework import serializers, status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.tasks import export_collections_report
from apps.payments.serializers import (
    CollectEMISerializer,
    DateRangeSerializer,
    DueInstallmentSerializer,
    DueListQuerySerializer,
    ReceiptSerializer,
)
from apps.payments.services import PaymentService

logger = logging.getLogger(__name__)


class ReceiptPagination(PageNumberPagination):
    """Pagination for the receipt list."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class CollectEMIView(APIView):
    """
    POST /api/loans/<loan_id>/collect

    Record payment of an EMI and return the receipt.
    """

    def post(self, request, loan_id):
        serializer = CollectEMISerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        receipt = PaymentService.collect(
            loan_id=loan_id,
            emi_number=serializer.validated_data['emi_number'],
            payment_method=serializer.validated_data['payment_method'],
            payment_date=serializer.validated_data.get('payment_date'),
            amount_paid=serializer.validated_data.get('amount_paid'),
        )

        return Response(
            ReceiptSerializer(receipt).data,
            status=status.HTTP_201_CREATED,
        )


class DueListView(APIView):
    """
    GET /api/collections/due-list?month=YYYY-MM
    """

    def get(self, request):
        serializer = DueListQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        due = PaymentService.due_list(serializer.validated_data.get('month'))

        return Response(
            {
                'count': len(due),
                'overdue': sum(1 for item in due if item['overdue']),
                'results': DueInstallmentSerializer(due, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class ReceiptListView(APIView):
    """
    GET /api/receipts   Receipts, newest first (optional ?loan_id=)
    """

    def get(self, request):
        loan_id = request.query_params.get('loan_id')
        if loan_id is not None and not loan_id.isdigit():
            raise serializers.ValidationError({'loan_id': ['A valid integer is required.']})

        receipts = PaymentService.list_receipts(
            int(loan_id) if loan_id is not None else None,
        )

        paginator = ReceiptPagination()
        page = paginator.paginate_queryset(receipts, request)
        serializer = ReceiptSerializer(page, many=True)

        return paginator.get_paginated_response(serializer.data)


class ReceiptDetailView(APIView):
    """
    GET /api/receipts/<receipt_id>
    """

    def get(self, request, receipt_id):
        receipt = PaymentService.get_receipt(receipt_id)
        return Response(ReceiptSerializer(receipt).data, status=status.HTTP_200_OK)


class CollectionsReportView(APIView):
    """
    GET /api/reports/collections?from=YYYY-MM-DD&to=YYYY-MM-DD
    """

    def get(self, request):
        serializer = DateRangeSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        report = PaymentService.collections_report(
            serializer.validated_data['date_from'],
            serializer.validated_data['date_to'],
        )
        report['receipts'] = ReceiptSerializer(report['receipts'], many=True).data

        return Response(report, status=status.HTTP_200_OK)


class ExportCollectionsReportView(APIView):
    """
    POST /api/reports/collections/export

    Trigger background export of the collections report to Excel.
    """

    def post(self, request):
        serializer = DateRangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        date_from = serializer.validated_data['date_from'].isoformat()
        date_to = serializer.validated_data['date_to'].isoformat()
        task = export_collections_report.delay(date_from, date_to)

        logger.info(
            "Collections report export triggered: %s..%s, task=%s",
            date_from,
            date_to,
            task.id,
        )

        return Response(
            {
                'message': 'Collections report export has been triggered.',
                'task_id': task.id,
            },
            status=status.HTTP_202_ACCEPTED,
        )
