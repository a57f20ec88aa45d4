"""
Loan model for the Loan Management System.
"""

from decimal import Decimal

from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from apps.core.amortization import STATUS_PAID, STATUS_PENDING


class Loan(models.Model):
    """
    Represents a loan from application through repayment.

    The repayment schedule is embedded on the loan as a list of
    per-EMI records (see apps.core.amortization.ScheduleEntry.to_record).
    It is generated at disbursal, regenerated wholesale on edit, and
    updated entry-by-entry as EMIs are collected.
    """

    STATUS_PENDING = 'Pending'
    STATUS_APPROVED = 'Approved'
    STATUS_REJECTED = 'Rejected'
    STATUS_DISBURSED = 'Disbursed'
    STATUS_COMPLETED = 'Completed'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_DISBURSED, 'Disbursed'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.PROTECT,
        related_name='loans',
        db_index=True,
        help_text="The customer who owns this loan."
    )
    amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        help_text="Loan principal amount.",
    )
    interest_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Annual interest rate (percentage).",
    )
    tenure = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Loan tenure in months."
    )
    processing_fee_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('2.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
    )
    processing_fee = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0'),
        help_text="Processing fee in whole rupees.",
    )
    emi = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        help_text="Monthly installment in whole rupees.",
    )
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True,
    )
    application_date = models.DateField(help_text="Date the application was made.")
    approval_date = models.DateField(null=True, blank=True)
    disbursal_date = models.DateField(null=True, blank=True)
    comment = models.TextField(
        blank=True,
        default='',
        help_text="Approval or rejection remark.",
    )
    notes = models.TextField(blank=True, default='')
    repayment_schedule = models.JSONField(
        default=list,
        blank=True,
        encoder=DjangoJSONEncoder,
    )
    schedule_revision = models.PositiveIntegerField(
        default=0,
        help_text="Times the schedule has been generated (disbursal, then each edit).",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'loans'
        ordering = ['-application_date', '-created_at']
        indexes = [
            models.Index(
                fields=['customer', 'status'],
                name='idx_loan_customer_status'
            ),
        ]

    def __str__(self):
        return (
            f"Loan #{self.pk} - Customer: {self.customer_id} "
            f"- Amount: {self.amount} - {self.status}"
        )

    @property
    def paid_emis_count(self):
        return sum(
            1 for entry in self.repayment_schedule
            if entry.get('status') == STATUS_PAID
        )

    @property
    def due_emis_count(self):
        """Remaining EMIs to be collected."""
        return max(0, self.tenure - self.paid_emis_count)

    @property
    def is_fully_paid(self):
        return bool(self.repayment_schedule) and all(
            entry.get('status') == STATUS_PAID
            for entry in self.repayment_schedule
        )

    @property
    def pending_installments(self):
        return [
            entry for entry in self.repayment_schedule
            if entry.get('status') == STATUS_PENDING
        ]
