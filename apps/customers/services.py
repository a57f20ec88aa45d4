"""
Customer service layer.

All customer-related business logic resides here.
Views delegate to this service.
"""

import logging

from django.db.models import Q

from apps.core.exceptions import CustomerNotFoundError
from apps.customers.models import Customer

logger = logging.getLogger(__name__)


class CustomerService:
    """Service class for customer-related operations."""

    @staticmethod
    def register(validated_data: dict) -> Customer:
        """
        Register a new customer from KYC details.

        Args:
            validated_data: Dict from RegisterCustomerSerializer.

        Returns:
            The newly created Customer instance.
        """
        guarantor = validated_data.get('guarantor') or {}

        customer = Customer.objects.create(
            name=validated_data['name'],
            mobile=validated_data['mobile'],
            email=validated_data.get('email', ''),
            address=validated_data.get('address', ''),
            aadhaar=validated_data.get('aadhaar', ''),
            pan=validated_data.get('pan', ''),
            voter_id=validated_data.get('voter_id', ''),
            photo_url=validated_data.get('photo_url', ''),
            guarantor_name=guarantor.get('name', ''),
            guarantor_mobile=guarantor.get('mobile', ''),
            guarantor_address=guarantor.get('address', ''),
            guarantor_relation=guarantor.get('relation', ''),
        )

        logger.info(
            "Registered customer %s (ID: %d)",
            customer.name,
            customer.pk,
        )

        return customer

    @staticmethod
    def get_customer(customer_id: int) -> Customer:
        """
        Retrieve a customer by ID.

        Raises:
            CustomerNotFoundError: If customer not found.
        """
        try:
            return Customer.objects.get(pk=customer_id)
        except Customer.DoesNotExist:
            raise CustomerNotFoundError(
                detail=f"Customer with ID {customer_id} not found."
            )

    @staticmethod
    def search(term: str = ''):
        """Customers matching a name or mobile fragment, newest first."""
        customers = Customer.objects.all()
        term = (term or '').strip()
        if term:
            customers = customers.filter(
                Q(name__icontains=term) | Q(mobile__icontains=term)
            )
        return customers.order_by('-created_at')
