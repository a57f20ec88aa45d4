"""
Payment serializers for the Loan Management System.
"""

from datetime import date
from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from apps.core.utils import amount_in_words, format_inr
from apps.payments.models import Receipt


class CollectEMISerializer(serializers.Serializer):
    """Serializer for recording an EMI payment."""

    emi_number = serializers.IntegerField(min_value=1, required=True)
    payment_method = serializers.ChoiceField(
        choices=[choice for choice, _ in Receipt.METHOD_CHOICES],
        required=True,
    )
    payment_date = serializers.DateField(
        required=False,
        help_text="Defaults to today. Cannot be in the future.",
    )
    amount_paid = serializers.DecimalField(
        max_digits=15,
        decimal_places=2,
        min_value=Decimal('0.01'),
        required=False,
        help_text="Defaults to the installment amount.",
    )

    def validate_payment_date(self, value):
        if value > timezone.localdate():
            raise serializers.ValidationError(
                "Payment date cannot be in the future."
            )
        return value


class ReceiptSerializer(serializers.Serializer):
    """Serializer for a receipt in responses."""

    receipt_id = serializers.CharField()
    loan_id = serializers.IntegerField()
    customer_id = serializers.IntegerField()
    customer_name = serializers.CharField(source='customer.name')
    emi_number = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    amount_display = serializers.SerializerMethodField()
    amount_in_words = serializers.SerializerMethodField()
    payment_date = serializers.DateField()
    payment_method = serializers.CharField()
    created_at = serializers.DateTimeField()

    def get_amount_display(self, obj):
        return format_inr(obj.amount)

    def get_amount_in_words(self, obj):
        return f"{amount_in_words(obj.amount)} Rupees Only"


class DueInstallmentSerializer(serializers.Serializer):
    """One pending EMI on the monthly due list."""

    loan_id = serializers.IntegerField()
    customer_id = serializers.IntegerField()
    customer_name = serializers.CharField()
    customer_mobile = serializers.CharField()
    emi_number = serializers.IntegerField()
    due_date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    overdue = serializers.BooleanField()


class DateRangeSerializer(serializers.Serializer):
    """Serializer for report date ranges (?from=&to=)."""

    date_from = serializers.DateField(required=True)
    date_to = serializers.DateField(required=True)

    def to_internal_value(self, data):
        renamed = {
            'date_from': data.get('from', data.get('date_from')),
            'date_to': data.get('to', data.get('date_to')),
        }
        data = {key: value for key, value in renamed.items() if value}
        return super().to_internal_value(data)

    def validate(self, attrs):
        if attrs['date_from'] > attrs['date_to']:
            raise serializers.ValidationError(
                "'from' date must not be after 'to' date."
            )
        return attrs


class DueListQuerySerializer(serializers.Serializer):
    """Serializer for the due list's ?month=YYYY-MM filter."""

    month = serializers.RegexField(
        r'^\d{4}-(0[1-9]|1[0-2])$',
        required=False,
        error_messages={'invalid': "Month must be in YYYY-MM format."},
    )

    def validate_month(self, value):
        year, month = value.split('-')
        return date(int(year), int(month), 1)
