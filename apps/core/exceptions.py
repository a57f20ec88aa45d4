"""
Custom exceptions and DRF exception handler for the Loan Management System.
"""

import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.core.amortization import InvalidLoanTermsError

logger = logging.getLogger(__name__)


class CustomerNotFoundError(APIException):
    """Raised when a customer does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Customer not found.'
    default_code = 'customer_not_found'


class LoanNotFoundError(APIException):
    """Raised when a loan does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Loan not found.'
    default_code = 'loan_not_found'


class ReceiptNotFoundError(APIException):
    """Raised when a receipt does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Receipt not found.'
    default_code = 'receipt_not_found'


class InstallmentNotFoundError(APIException):
    """Raised when an EMI number is not part of a loan's schedule."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'EMI not found in repayment schedule.'
    default_code = 'installment_not_found'


class InvalidLoanStatusError(APIException):
    """Raised when a workflow action is not allowed in the loan's status."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Action not allowed for the current loan status.'
    default_code = 'invalid_loan_status'


class InstallmentAlreadyPaidError(APIException):
    """Raised when collecting an EMI that is already marked Paid."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'EMI has already been paid.'
    default_code = 'installment_already_paid'


def custom_exception_handler(exc, context):
    """
    Custom DRF exception handler that returns consistent error responses.

    Handles all DRF exceptions and adds logging for server errors.
    """
    response = exception_handler(exc, context)

    if response is not None:
        error_data = {
            'error': True,
            'status_code': response.status_code,
            'detail': response.data,
        }
        response.data = error_data
    elif isinstance(exc, InvalidLoanTermsError):
        logger.warning(
            "Invalid loan terms in %s: %s",
            context.get('view', 'unknown'),
            exc,
        )
        response = Response(
            {
                'error': True,
                'status_code': 400,
                'code': exc.code,
                'detail': str(exc),
            },
            status=status.HTTP_400_BAD_REQUEST,
        )
    else:
        # Unhandled exceptions: log and return 500
        logger.exception(
            "Unhandled exception in %s",
            context.get('view', 'unknown'),
            exc_info=exc,
        )
        response = Response(
            {
                'error': True,
                'status_code': 500,
                'detail': 'An unexpected error occurred. Please try again later.',
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return response
