"""
Loan views for the Loan Management System.

Views are thin; business logic lives in the service layer.
"""

import logging

from rest_framework import serializers, status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.loans.models import Loan
from apps.loans.serializers import (
    CreateLoanSerializer,
    DisburseLoanSerializer,
    EMICalculatorSerializer,
    LoanDecisionSerializer,
    LoanDetailSerializer,
    LoanListItemSerializer,
    ScheduleEntrySerializer,
    UpdateLoanSerializer,
)
from apps.loans.services import DashboardService, EMICalculatorService, LoanService

logger = logging.getLogger(__name__)


class LoanPagination(PageNumberPagination):
    """Pagination for loan lists."""
    page_size = 10
    page_size_query_param = 'page_size'
    max_page_size = 100


class LoanListView(APIView):
    """
    GET  /api/loans   List loans (?status=, ?search=)
    POST /api/loans   Submit a loan application
    """

    def get(self, request):
        """Handle listing loans."""
        loan_status = request.query_params.get('status')
        if loan_status and loan_status not in dict(Loan.STATUS_CHOICES):
            raise serializers.ValidationError(
                {'status': [f"Unknown loan status '{loan_status}'."]}
            )

        loans = LoanService.list_loans(
            status=loan_status,
            search=request.query_params.get('search', ''),
        )

        paginator = LoanPagination()
        page = paginator.paginate_queryset(loans, request)
        serializer = LoanListItemSerializer(page, many=True)

        return paginator.get_paginated_response(serializer.data)

    def post(self, request):
        """Handle a loan application."""
        serializer = CreateLoanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        loan = LoanService.apply(serializer.validated_data)

        return Response(
            LoanDetailSerializer(loan).data,
            status=status.HTTP_201_CREATED,
        )


class LoanDetailView(APIView):
    """
    GET   /api/loans/<loan_id>   Loan details with repayment schedule
    PATCH /api/loans/<loan_id>   Edit loan terms (regenerates the schedule)
    """

    def get(self, request, loan_id):
        """Handle viewing a single loan."""
        loan = LoanService.get_loan(loan_id)
        return Response(LoanDetailSerializer(loan).data, status=status.HTTP_200_OK)

    def patch(self, request, loan_id):
        """Handle editing a loan."""
        serializer = UpdateLoanSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        loan = LoanService.update(loan_id, serializer.validated_data)

        return Response(LoanDetailSerializer(loan).data, status=status.HTTP_200_OK)


class ApproveLoanView(APIView):
    """
    POST /api/loans/<loan_id>/approve
    """

    def post(self, request, loan_id):
        serializer = LoanDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        loan = LoanService.approve(loan_id, serializer.validated_data['comment'])

        return Response(LoanDetailSerializer(loan).data, status=status.HTTP_200_OK)


class RejectLoanView(APIView):
    """
    POST /api/loans/<loan_id>/reject
    """

    def post(self, request, loan_id):
        serializer = LoanDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        loan = LoanService.reject(loan_id, serializer.validated_data['comment'])

        return Response(LoanDetailSerializer(loan).data, status=status.HTTP_200_OK)


class DisburseLoanView(APIView):
    """
    POST /api/loans/<loan_id>/disburse

    Disburse an approved loan and generate its EMI schedule.
    """

    def post(self, request, loan_id):
        serializer = DisburseLoanSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        loan = LoanService.disburse(
            loan_id,
            serializer.validated_data.get('disbursal_date'),
        )

        return Response(LoanDetailSerializer(loan).data, status=status.HTTP_200_OK)


class EMICalculatorView(APIView):
    """
    POST /api/emi-calculator

    Compute EMI, totals and a repayment schedule without saving anything.
    """

    def post(self, request):
        serializer = EMICalculatorSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = EMICalculatorService.calculate(
            amount=serializer.validated_data['amount'],
            interest_rate=serializer.validated_data['interest_rate'],
            tenure=serializer.validated_data['tenure'],
            disbursal_date=serializer.validated_data.get('disbursal_date'),
        )
        result['schedule'] = ScheduleEntrySerializer(result['schedule'], many=True).data

        return Response(result, status=status.HTTP_200_OK)


class DashboardView(APIView):
    """
    GET /api/dashboard
    """

    def get(self, request):
        summary = DashboardService.summary()
        summary['recent_applications'] = LoanListItemSerializer(
            summary['recent_applications'], many=True,
        ).data

        return Response(summary, status=status.HTTP_200_OK)
