"""
Customer views for the Loan Management System.

Views are thin; business logic lives in the service layer.
"""

import logging

from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.customers.serializers import (
    CustomerListItemSerializer,
    CustomerSerializer,
    RegisterCustomerSerializer,
)
from apps.customers.services import CustomerService
from apps.loans.serializers import LoanListItemSerializer

logger = logging.getLogger(__name__)


class CustomerPagination(PageNumberPagination):
    """Pagination for the customer list."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class CustomerListView(APIView):
    """
    GET  /api/customers   List customers, optionally filtered by ?search=
    POST /api/customers   Register a new customer (KYC intake)
    """

    def get(self, request):
        """Handle listing customers."""
        customers = CustomerService.search(request.query_params.get('search', ''))

        paginator = CustomerPagination()
        page = paginator.paginate_queryset(customers, request)
        serializer = CustomerListItemSerializer(page, many=True)

        return paginator.get_paginated_response(serializer.data)

    def post(self, request):
        """Handle customer registration."""
        serializer = RegisterCustomerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        customer = CustomerService.register(serializer.validated_data)

        return Response(
            CustomerSerializer(customer).data,
            status=status.HTTP_201_CREATED,
        )


class CustomerDetailView(APIView):
    """
    GET /api/customers/<customer_id>

    KYC details of a customer together with their loans.
    """

    def get(self, request, customer_id):
        """Handle viewing a single customer."""
        customer = CustomerService.get_customer(customer_id)
        loans = customer.loans.order_by('-application_date', '-created_at')

        response_data = dict(CustomerSerializer(customer).data)
        response_data['loans'] = LoanListItemSerializer(loans, many=True).data

        return Response(response_data, status=status.HTTP_200_OK)
