"""
Customer model for the Loan Management System.
"""

from django.core.validators import RegexValidator
from django.db import models

mobile_validator = RegexValidator(
    regex=r'^\d{10}$',
    message="Mobile number must be exactly 10 digits.",
)
aadhaar_validator = RegexValidator(
    regex=r'^\d{12}$',
    message="Aadhaar must be exactly 12 digits.",
)
pan_validator = RegexValidator(
    regex=r'^[A-Za-z0-9]{10}$',
    message="PAN must be exactly 10 characters.",
)


class Customer(models.Model):
    """
    Represents a borrower in the loan management system.

    Holds the KYC details captured at intake along with an
    optional guarantor.
    """

    STATUS_ACTIVE = 'Active'
    STATUS_INACTIVE = 'Inactive'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_INACTIVE, 'Inactive'),
    ]

    name = models.CharField(
        max_length=200,
        help_text="Customer's full name."
    )
    mobile = models.CharField(
        max_length=10,
        validators=[mobile_validator],
        db_index=True,
        help_text="10-digit mobile number."
    )
    email = models.EmailField(blank=True, default='')
    address = models.TextField(blank=True, default='')
    aadhaar = models.CharField(
        max_length=12,
        blank=True,
        default='',
        validators=[aadhaar_validator],
        help_text="12-digit Aadhaar number."
    )
    pan = models.CharField(
        max_length=10,
        blank=True,
        default='',
        validators=[pan_validator],
        help_text="10-character PAN."
    )
    voter_id = models.CharField(max_length=20, blank=True, default='')
    photo_url = models.URLField(max_length=500, blank=True, default='')

    guarantor_name = models.CharField(max_length=200, blank=True, default='')
    guarantor_mobile = models.CharField(max_length=10, blank=True, default='')
    guarantor_address = models.TextField(blank=True, default='')
    guarantor_relation = models.CharField(max_length=50, blank=True, default='')

    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_ACTIVE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'customers'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['name'], name='idx_customer_name'),
        ]

    def __str__(self):
        return f"{self.name} (ID: {self.pk})"

    @property
    def guarantor(self):
        """Guarantor details as a dict, or None if not provided."""
        if not self.guarantor_name:
            return None
        return {
            'name': self.guarantor_name,
            'mobile': self.guarantor_mobile,
            'address': self.guarantor_address,
            'relation': self.guarantor_relation,
        }
