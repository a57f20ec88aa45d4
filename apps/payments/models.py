"""
Receipt model for the Loan Management System.
"""

from django.db import models


class Receipt(models.Model):
    """
    Proof of one collected EMI.

    A receipt is issued exactly once per (loan, emi_number); the
    receipt_id encodes both.
    """

    METHOD_CASH = 'cash'
    METHOD_UPI = 'upi'
    METHOD_BANK = 'bank'
    METHOD_CHOICES = [
        (METHOD_CASH, 'Cash'),
        (METHOD_UPI, 'UPI'),
        (METHOD_BANK, 'Bank Transfer'),
    ]

    receipt_id = models.CharField(max_length=50, unique=True)
    loan = models.ForeignKey(
        'loans.Loan',
        on_delete=models.PROTECT,
        related_name='receipts',
    )
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.PROTECT,
        related_name='receipts',
    )
    emi_number = models.PositiveIntegerField()
    amount = models.DecimalField(max_digits=15, decimal_places=2)
    payment_date = models.DateField(db_index=True)
    payment_method = models.CharField(max_length=10, choices=METHOD_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'receipts'
        ordering = ['-payment_date', '-created_at']

    def __str__(self):
        return f"{self.receipt_id} - {self.amount}"

    @staticmethod
    def make_receipt_id(loan_id, emi_number, schedule_revision=1):
        """
        RCPT-<loan>-<emi> for the schedule issued at disbursal;
        RCPT-<loan>-<emi>-R<n> once the schedule has been generated n times.
        """
        receipt_id = f"RCPT-{loan_id}-{emi_number}"
        if schedule_revision > 1:
            receipt_id = f"{receipt_id}-R{schedule_revision}"
        return receipt_id
