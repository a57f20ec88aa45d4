"""
Loan serializers for the Loan Management System.
"""

from decimal import Decimal

from django.conf import settings
from django.utils import timezone
from rest_framework import serializers


def _max_tenure():
    return getattr(settings, 'MAX_LOAN_TENURE_MONTHS', 360)


class LoanTermsSerializer(serializers.Serializer):
    """Principal, rate and tenure shared by every loan input."""

    amount = serializers.DecimalField(
        max_digits=15,
        decimal_places=2,
        min_value=Decimal('1'),
        required=True,
        help_text="Loan principal amount.",
    )
    interest_rate = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        required=True,
        help_text="Annual interest rate (%).",
    )
    tenure = serializers.IntegerField(
        min_value=1,
        required=True,
        help_text="Loan tenure in months.",
    )

    def validate_tenure(self, value):
        if value > _max_tenure():
            raise serializers.ValidationError(
                f"Tenure cannot exceed {_max_tenure()} months."
            )
        return value


class EMICalculatorSerializer(LoanTermsSerializer):
    """Serializer for the stateless EMI calculator."""

    disbursal_date = serializers.DateField(
        required=False,
        help_text="Optional disbursal date used to preview due dates.",
    )


class CreateLoanSerializer(LoanTermsSerializer):
    """Serializer for a loan application."""

    customer_id = serializers.IntegerField(
        min_value=1,
        required=True,
        help_text="Customer's ID.",
    )
    processing_fee_percentage = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        required=False,
        help_text="Processing fee as a percentage of the amount.",
    )
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class UpdateLoanSerializer(serializers.Serializer):
    """Serializer for editing a loan; every field is optional."""

    amount = serializers.DecimalField(
        max_digits=15,
        decimal_places=2,
        min_value=Decimal('1'),
        required=False,
    )
    interest_rate = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        required=False,
    )
    tenure = serializers.IntegerField(min_value=1, required=False)
    processing_fee_percentage = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        required=False,
    )
    disbursal_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate_tenure(self, value):
        if value > _max_tenure():
            raise serializers.ValidationError(
                f"Tenure cannot exceed {_max_tenure()} months."
            )
        return value

    def validate_disbursal_date(self, value):
        if value > timezone.localdate():
            raise serializers.ValidationError(
                "Disbursal date cannot be in the future."
            )
        return value


class LoanDecisionSerializer(serializers.Serializer):
    """Serializer for approve / reject actions."""

    comment = serializers.CharField(required=False, allow_blank=True, default='')


class DisburseLoanSerializer(serializers.Serializer):
    """Serializer for the disbursal action."""

    disbursal_date = serializers.DateField(
        required=False,
        help_text="Defaults to today. Cannot be in the future.",
    )

    def validate_disbursal_date(self, value):
        if value > timezone.localdate():
            raise serializers.ValidationError(
                "Disbursal date cannot be in the future."
            )
        return value


class ScheduleEntrySerializer(serializers.Serializer):
    """One row of a repayment schedule."""

    emi_number = serializers.IntegerField()
    due_date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    principal = serializers.DecimalField(max_digits=15, decimal_places=2)
    interest = serializers.DecimalField(max_digits=15, decimal_places=2)
    balance = serializers.DecimalField(max_digits=15, decimal_places=2)
    status = serializers.CharField()
    payment_date = serializers.DateField(required=False, allow_null=True)
    payment_method = serializers.CharField(required=False, allow_null=True)
    amount_paid = serializers.DecimalField(
        max_digits=15, decimal_places=2, required=False, allow_null=True,
    )


class LoanListItemSerializer(serializers.Serializer):
    """Serializer for a loan row in loan lists."""

    loan_id = serializers.IntegerField(source='pk')
    customer_id = serializers.IntegerField()
    customer_name = serializers.CharField(source='customer.name')
    amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    interest_rate = serializers.DecimalField(max_digits=5, decimal_places=2)
    tenure = serializers.IntegerField()
    emi = serializers.DecimalField(max_digits=15, decimal_places=2)
    status = serializers.CharField()
    application_date = serializers.DateField()
    disbursal_date = serializers.DateField(allow_null=True)
    repayments_left = serializers.IntegerField(source='due_emis_count')


class LoanDetailSerializer(LoanListItemSerializer):
    """Serializer for a single loan with its repayment schedule."""

    processing_fee_percentage = serializers.DecimalField(max_digits=5, decimal_places=2)
    processing_fee = serializers.DecimalField(max_digits=15, decimal_places=2)
    approval_date = serializers.DateField(allow_null=True)
    comment = serializers.CharField()
    notes = serializers.CharField()
    paid_emis = serializers.IntegerField(source='paid_emis_count')
    repayment_schedule = ScheduleEntrySerializer(many=True)
