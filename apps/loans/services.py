"""
Loan service layer.

Contains the loan application, approval, disbursal and edit
workflow, the EMI calculator and dashboard aggregation. Every
EMI and schedule figure comes from apps.core.amortization.
"""

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from apps.core.amortization import (
    calculate_emi,
    first_due_date,
    generate_schedule,
    schedule_totals,
    serialize_schedule,
)
from apps.core.exceptions import InvalidLoanStatusError, LoanNotFoundError
from apps.core.utils import format_inr
from apps.customers.models import Customer
from apps.customers.services import CustomerService
from apps.loans.models import Loan

logger = logging.getLogger(__name__)


def calculate_processing_fee(amount: Decimal, percentage: Decimal) -> Decimal:
    """Processing fee in whole rupees (half rounds up)."""
    fee = Decimal(str(amount)) * Decimal(str(percentage)) / Decimal('100')
    return fee.quantize(Decimal('1'), rounding=ROUND_HALF_UP)


class LoanService:
    """Service for the loan lifecycle."""

    @staticmethod
    def apply(validated_data: dict) -> Loan:
        """
        Record a new loan application.

        The EMI is computed up front so the applicant sees the
        installment; the schedule itself is built at disbursal.

        Args:
            validated_data: Dict from CreateLoanSerializer.

        Returns:
            The new Loan in Pending status.
        """
        customer = CustomerService.get_customer(validated_data['customer_id'])

        amount = validated_data['amount']
        interest_rate = validated_data['interest_rate']
        tenure = validated_data['tenure']
        fee_percentage = validated_data.get('processing_fee_percentage')
        if fee_percentage is None:
            fee_percentage = Decimal(str(settings.DEFAULT_PROCESSING_FEE_PERCENTAGE))

        loan = Loan.objects.create(
            customer=customer,
            amount=amount,
            interest_rate=interest_rate,
            tenure=tenure,
            processing_fee_percentage=fee_percentage,
            processing_fee=calculate_processing_fee(amount, fee_percentage),
            emi=calculate_emi(amount, interest_rate, tenure),
            status=Loan.STATUS_PENDING,
            application_date=timezone.localdate(),
            notes=validated_data.get('notes', ''),
        )

        logger.info(
            "Loan #%d applied for customer %d: amount=%s, rate=%s%%, "
            "tenure=%d, emi=%s",
            loan.pk,
            customer.pk,
            amount,
            interest_rate,
            tenure,
            loan.emi,
        )

        return loan

    @staticmethod
    def get_loan(loan_id: int) -> Loan:
        """
        Retrieve a single loan by ID.

        Raises:
            LoanNotFoundError: If the loan does not exist.
        """
        try:
            return Loan.objects.select_related('customer').get(pk=loan_id)
        except Loan.DoesNotExist:
            raise LoanNotFoundError(
                detail=f"Loan with ID {loan_id} not found."
            )

    @staticmethod
    def lock_loan(loan_id: int) -> Loan:
        """
        Fetch a loan with its row locked for the current transaction.

        Must be called inside transaction.atomic().
        """
        try:
            return Loan.objects.select_for_update().get(pk=loan_id)
        except Loan.DoesNotExist:
            raise LoanNotFoundError(
                detail=f"Loan with ID {loan_id} not found."
            )

    @staticmethod
    def list_loans(status: Optional[str] = None, search: str = ''):
        """Loans, newest application first, filtered by status and search."""
        loans = Loan.objects.select_related('customer')
        if status:
            loans = loans.filter(status=status)
        search = (search or '').strip()
        if search:
            query = Q(customer__name__icontains=search)
            if search.isdigit():
                query |= Q(pk=int(search))
            loans = loans.filter(query)
        return loans.order_by('-application_date', '-created_at')

    @staticmethod
    def _require_status(loan: Loan, *allowed: str, action: str) -> None:
        if loan.status not in allowed:
            logger.warning(
                "Loan #%d: cannot %s in status %s",
                loan.pk,
                action,
                loan.status,
            )
            raise InvalidLoanStatusError(
                detail=f"Cannot {action} loan #{loan.pk} with status {loan.status}."
            )

    @staticmethod
    def build_schedule(loan: Loan, disbursal_date: date) -> None:
        """
        Replace the loan's schedule with a fresh one for disbursal_date.

        Bumps schedule_revision so receipts issued against the new
        schedule get ids distinct from earlier ones.
        """
        schedule = generate_schedule(
            loan.amount,
            loan.interest_rate,
            loan.tenure,
            first_due_date(disbursal_date),
        )
        loan.repayment_schedule = serialize_schedule(schedule)
        loan.schedule_revision += 1

    @classmethod
    @transaction.atomic
    def approve(cls, loan_id: int, comment: str = '') -> Loan:
        """Approve a pending application."""
        loan = cls.lock_loan(loan_id)
        cls._require_status(loan, Loan.STATUS_PENDING, action='approve')

        loan.status = Loan.STATUS_APPROVED
        loan.comment = comment
        loan.approval_date = timezone.localdate()
        loan.save(update_fields=['status', 'comment', 'approval_date', 'updated_at'])

        logger.info("Loan #%d approved", loan.pk)
        return loan

    @classmethod
    @transaction.atomic
    def reject(cls, loan_id: int, comment: str = '') -> Loan:
        """Reject a pending application."""
        loan = cls.lock_loan(loan_id)
        cls._require_status(loan, Loan.STATUS_PENDING, action='reject')

        loan.status = Loan.STATUS_REJECTED
        loan.comment = comment
        loan.save(update_fields=['status', 'comment', 'updated_at'])

        logger.info("Loan #%d rejected: %s", loan.pk, comment or 'no comment')
        return loan

    @classmethod
    @transaction.atomic
    def disburse(cls, loan_id: int, disbursal_date: Optional[date] = None) -> Loan:
        """
        Disburse an approved loan and generate its EMI schedule.

        The first EMI is due on the 1st of the month after disbursal.
        """
        loan = cls.lock_loan(loan_id)
        cls._require_status(loan, Loan.STATUS_APPROVED, action='disburse')

        disbursal_date = disbursal_date or timezone.localdate()
        loan.status = Loan.STATUS_DISBURSED
        loan.disbursal_date = disbursal_date
        cls.build_schedule(loan, disbursal_date)
        loan.save(update_fields=[
            'status', 'disbursal_date', 'repayment_schedule',
            'schedule_revision', 'updated_at',
        ])

        logger.info(
            "Loan #%d disbursed on %s: %d EMIs of %s from %s",
            loan.pk,
            disbursal_date,
            loan.tenure,
            loan.emi,
            loan.repayment_schedule[0]['due_date'],
        )
        return loan

    @classmethod
    @transaction.atomic
    def update(cls, loan_id: int, changes: dict) -> Loan:
        """
        Edit loan terms.

        EMI and processing fee are recomputed. For a disbursed loan the
        repayment schedule is regenerated wholesale, which discards any
        recorded payments; a completed loan goes back to Disbursed.
        """
        loan = cls.lock_loan(loan_id)
        cls._require_status(
            loan,
            Loan.STATUS_PENDING,
            Loan.STATUS_APPROVED,
            Loan.STATUS_DISBURSED,
            Loan.STATUS_COMPLETED,
            action='edit',
        )

        if 'disbursal_date' in changes and loan.disbursal_date is None:
            raise InvalidLoanStatusError(
                detail=f"Loan #{loan.pk} has not been disbursed yet."
            )

        for field in (
            'amount', 'interest_rate', 'tenure',
            'processing_fee_percentage', 'disbursal_date', 'notes',
        ):
            if field in changes:
                setattr(loan, field, changes[field])

        loan.emi = calculate_emi(loan.amount, loan.interest_rate, loan.tenure)
        loan.processing_fee = calculate_processing_fee(
            loan.amount, loan.processing_fee_percentage,
        )

        if loan.disbursal_date is not None:
            discarded = loan.paid_emis_count
            cls.build_schedule(loan, loan.disbursal_date)
            loan.status = Loan.STATUS_DISBURSED
            if discarded:
                logger.warning(
                    "Loan #%d: schedule regenerated, %d recorded payment(s) discarded",
                    loan.pk,
                    discarded,
                )

        loan.save()

        logger.info(
            "Loan #%d updated: amount=%s, rate=%s%%, tenure=%d, emi=%s",
            loan.pk,
            loan.amount,
            loan.interest_rate,
            loan.tenure,
            loan.emi,
        )
        return loan


class EMICalculatorService:
    """Stateless EMI calculator."""

    @staticmethod
    def calculate(
        amount: Decimal,
        interest_rate: Decimal,
        tenure: int,
        disbursal_date: Optional[date] = None,
    ) -> dict:
        """
        Compute EMI, totals and a schedule preview.

        Due dates assume disbursal on disbursal_date (default: today).
        """
        disbursal_date = disbursal_date or timezone.localdate()
        emi = calculate_emi(amount, interest_rate, tenure)
        schedule = generate_schedule(
            amount, interest_rate, tenure, first_due_date(disbursal_date),
        )
        totals = schedule_totals(schedule)

        return {
            'amount': Decimal(str(amount)),
            'interest_rate': Decimal(str(interest_rate)),
            'tenure': tenure,
            'emi': emi,
            'emi_display': format_inr(emi),
            'total_interest': totals['total_interest'],
            'total_payable': totals['total_payable'],
            'total_payable_display': format_inr(totals['total_payable']),
            'schedule': serialize_schedule(schedule),
        }


class DashboardService:
    """Back-office headline figures."""

    RECENT_APPLICATIONS = 5
    CHART_MONTHS = 6

    @classmethod
    def summary(cls, today: Optional[date] = None) -> dict:
        """
        Aggregate headline numbers for the dashboard.

        Returns:
            Dict with totals, recent applications and a monthly chart of
            applications vs approvals for the last six months.
        """
        from apps.payments.models import Receipt

        today = today or timezone.localdate()

        disbursed = Loan.objects.filter(status=Loan.STATUS_DISBURSED)
        total_disbursed = disbursed.aggregate(total=Sum('amount'))['total'] or Decimal('0')
        collections_today = Receipt.objects.filter(
            payment_date=today,
        ).aggregate(total=Sum('amount'))['total'] or Decimal('0')

        recent = Loan.objects.select_related('customer').order_by(
            '-application_date', '-created_at',
        )[:cls.RECENT_APPLICATIONS]

        return {
            'total_disbursed': total_disbursed,
            'active_loans': disbursed.count(),
            'total_customers': Customer.objects.count(),
            'total_collections_today': collections_today,
            'recent_applications': list(recent),
            'monthly_applications': cls._monthly_chart(today),
        }

    @classmethod
    def _monthly_chart(cls, today: date) -> list:
        approved_statuses = (
            Loan.STATUS_APPROVED,
            Loan.STATUS_DISBURSED,
            Loan.STATUS_COMPLETED,
        )
        first_month = today.replace(day=1) - relativedelta(months=cls.CHART_MONTHS - 1)

        chart = []
        for offset in range(cls.CHART_MONTHS):
            month_start = first_month + relativedelta(months=offset)
            month_end = month_start + relativedelta(months=1)
            counts = Loan.objects.filter(
                application_date__gte=month_start,
                application_date__lt=month_end,
            ).aggregate(
                applications=Count('id'),
                approved=Count('id', filter=Q(status__in=approved_statuses)),
            )
            chart.append({
                'month': month_start.strftime('%Y-%m'),
                'applications': counts['applications'],
                'approved': counts['approved'],
            })
        return chart
