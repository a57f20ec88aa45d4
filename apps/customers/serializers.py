"""
Customer serializers for the Loan Management System.
"""

from rest_framework import serializers


class GuarantorSerializer(serializers.Serializer):
    """Optional guarantor block of a KYC submission."""

    name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    mobile = serializers.CharField(max_length=10, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    relation = serializers.CharField(max_length=50, required=False, allow_blank=True)


class RegisterCustomerSerializer(serializers.Serializer):
    """Serializer for customer KYC intake."""

    name = serializers.CharField(
        min_length=2,
        max_length=200,
        required=True,
        help_text="Customer's full name.",
    )
    mobile = serializers.CharField(
        required=True,
        help_text="10-digit mobile number.",
    )
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    address = serializers.CharField(required=False, allow_blank=True, default='')
    aadhaar = serializers.CharField(required=False, allow_blank=True, default='')
    pan = serializers.CharField(required=False, allow_blank=True, default='')
    voter_id = serializers.CharField(
        max_length=20, required=False, allow_blank=True, default='',
    )
    photo_url = serializers.URLField(
        max_length=500, required=False, allow_blank=True, default='',
    )
    guarantor = GuarantorSerializer(required=False)

    def validate_mobile(self, value):
        """Validate mobile is a 10-digit number."""
        value = value.strip()
        if len(value) != 10 or not value.isdigit():
            raise serializers.ValidationError(
                "Mobile number must be a valid 10-digit number."
            )
        return value

    def validate_aadhaar(self, value):
        value = value.strip()
        if value and (len(value) != 12 or not value.isdigit()):
            raise serializers.ValidationError("Aadhaar must be 12 digits.")
        return value

    def validate_pan(self, value):
        value = value.strip().upper()
        if value and (len(value) != 10 or not value.isalnum()):
            raise serializers.ValidationError("PAN must be 10 characters.")
        return value


class CustomerSerializer(serializers.Serializer):
    """Serializer for customer KYC details in responses."""

    customer_id = serializers.IntegerField(source='pk')
    name = serializers.CharField()
    mobile = serializers.CharField()
    email = serializers.CharField()
    address = serializers.CharField()
    aadhaar = serializers.CharField()
    pan = serializers.CharField()
    voter_id = serializers.CharField()
    photo_url = serializers.CharField()
    guarantor = serializers.DictField(allow_null=True)
    status = serializers.CharField()
    created_at = serializers.DateTimeField()


class CustomerListItemSerializer(serializers.Serializer):
    """Serializer for a customer row in the customer list."""

    customer_id = serializers.IntegerField(source='pk')
    name = serializers.CharField()
    mobile = serializers.CharField()
    status = serializers.CharField()
    created_at = serializers.DateTimeField()
