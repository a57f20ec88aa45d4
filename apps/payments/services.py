"""
Payment service layer.

EMI collection, the monthly due list, receipts and the collections
report. Collection mutates a loan's embedded schedule and always runs
with the loan row locked.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from apps.core.amortization import STATUS_PAID, STATUS_PENDING
from apps.core.exceptions import (
    InstallmentAlreadyPaidError,
    InstallmentNotFoundError,
    InvalidLoanStatusError,
    ReceiptNotFoundError,
)
from apps.loans.models import Loan
from apps.loans.services import LoanService
from apps.payments.models import Receipt

logger = logging.getLogger(__name__)


class PaymentService:
    """Service for EMI collection and receipts."""

    @staticmethod
    @transaction.atomic
    def collect(
        loan_id: int,
        emi_number: int,
        payment_method: str,
        payment_date: Optional[date] = None,
        amount_paid: Optional[Decimal] = None,
    ) -> Receipt:
        """
        Record payment of one EMI and issue its receipt.

        The entry moves Pending -> Paid exactly once. Any recorded
        amount marks it Paid; amount_paid defaults to the installment.
        When the last entry is paid the loan is marked Completed.

        Raises:
            LoanNotFoundError: If the loan does not exist.
            InvalidLoanStatusError: If the loan is not disbursed.
            InstallmentNotFoundError: If emi_number is not in the schedule.
            InstallmentAlreadyPaidError: If the EMI was already collected.
        """
        loan = LoanService.lock_loan(loan_id)

        if loan.status != Loan.STATUS_DISBURSED:
            logger.warning(
                "Loan #%d: collection refused in status %s", loan.pk, loan.status,
            )
            raise InvalidLoanStatusError(
                detail=f"Cannot collect EMI for loan #{loan.pk} with status {loan.status}."
            )

        schedule = list(loan.repayment_schedule)
        index = next(
            (i for i, entry in enumerate(schedule) if entry['emi_number'] == emi_number),
            None,
        )
        if index is None:
            raise InstallmentNotFoundError(
                detail=f"EMI #{emi_number} not found for loan #{loan.pk}."
            )

        entry = dict(schedule[index])
        if entry['status'] == STATUS_PAID:
            logger.warning("Loan #%d: EMI #%d already paid", loan.pk, emi_number)
            raise InstallmentAlreadyPaidError(
                detail=f"EMI #{emi_number} of loan #{loan.pk} has already been paid."
            )

        payment_date = payment_date or timezone.localdate()
        if amount_paid is None:
            amount_paid = Decimal(entry['amount'])

        entry.update({
            'status': STATUS_PAID,
            'payment_date': payment_date.isoformat(),
            'payment_method': payment_method,
            'amount_paid': str(amount_paid),
        })
        schedule[index] = entry
        loan.repayment_schedule = schedule

        update_fields = ['repayment_schedule', 'updated_at']
        if loan.is_fully_paid:
            loan.status = Loan.STATUS_COMPLETED
            update_fields.append('status')
        loan.save(update_fields=update_fields)

        receipt = Receipt.objects.create(
            receipt_id=Receipt.make_receipt_id(
                loan.pk, emi_number, loan.schedule_revision,
            ),
            loan=loan,
            customer_id=loan.customer_id,
            emi_number=emi_number,
            amount=amount_paid,
            payment_date=payment_date,
            payment_method=payment_method,
        )

        logger.info(
            "Loan #%d: EMI #%d collected (%s via %s), receipt %s",
            loan.pk,
            emi_number,
            amount_paid,
            payment_method,
            receipt.receipt_id,
        )
        if loan.status == Loan.STATUS_COMPLETED:
            logger.info("Loan #%d fully repaid, marked Completed", loan.pk)

        return receipt

    @staticmethod
    def due_list(month: Optional[date] = None, today: Optional[date] = None) -> list:
        """
        Pending EMIs of disbursed loans falling due in the given month.

        Args:
            month: Any date within the month (default: current month).
            today: Reference date for the overdue flag.

        Returns:
            List of dicts sorted by due date, then loan ID.
        """
        today = today or timezone.localdate()
        month_start = (month or today).replace(day=1)
        month_end = month_start + relativedelta(months=1)

        due = []
        loans = Loan.objects.select_related('customer').filter(
            status=Loan.STATUS_DISBURSED,
        )
        for loan in loans:
            for entry in loan.repayment_schedule:
                if entry['status'] != STATUS_PENDING:
                    continue
                due_date = date.fromisoformat(entry['due_date'])
                if not month_start <= due_date < month_end:
                    continue
                due.append({
                    'loan_id': loan.pk,
                    'customer_id': loan.customer_id,
                    'customer_name': loan.customer.name,
                    'customer_mobile': loan.customer.mobile,
                    'emi_number': entry['emi_number'],
                    'due_date': due_date,
                    'amount': Decimal(entry['amount']),
                    'overdue': due_date < today,
                })

        due.sort(key=lambda item: (item['due_date'], item['loan_id']))
        return due

    @staticmethod
    def list_receipts(loan_id: Optional[int] = None):
        receipts = Receipt.objects.select_related('customer')
        if loan_id is not None:
            receipts = receipts.filter(loan_id=loan_id)
        return receipts.order_by('-payment_date', '-created_at')

    @staticmethod
    def get_receipt(receipt_id: str) -> Receipt:
        """
        Retrieve a receipt by its receipt ID.

        Raises:
            ReceiptNotFoundError: If the receipt does not exist.
        """
        try:
            return Receipt.objects.select_related('customer').get(receipt_id=receipt_id)
        except Receipt.DoesNotExist:
            raise ReceiptNotFoundError(
                detail=f"Receipt {receipt_id} not found."
            )

    @staticmethod
    def collections_report(date_from: date, date_to: date) -> dict:
        """Receipts with payment_date in [date_from, date_to] and their total."""
        receipts = Receipt.objects.select_related('customer').filter(
            payment_date__gte=date_from,
            payment_date__lte=date_to,
        ).order_by('payment_date', 'created_at')
        total = receipts.aggregate(total=Sum('amount'))['total'] or Decimal('0')

        return {
            'from': date_from,
            'to': date_to,
            'count': receipts.count(),
            'total': total,
            'receipts': list(receipts),
        }
