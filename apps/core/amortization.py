"""
Amortization engine for the Loan Management System.

Single home for EMI arithmetic and repayment schedule generation.
Loan creation, loan editing, disbursal and the EMI calculator all
call into this module. Everything here is pure: no Django, no I/O.

All money is handled as Decimal. Installments are whole rupees;
interest and principal components are kept to paise.
"""

from dataclasses import asdict, dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, getcontext
from typing import Iterable, List

from dateutil.relativedelta import relativedelta

# Set high precision for intermediate financial calculations
getcontext().prec = 28

RUPEE = Decimal('1')
PAISE = Decimal('0.01')
ZERO = Decimal('0')

STATUS_PENDING = 'Pending'
STATUS_PAID = 'Paid'


class InvalidLoanTermsError(ValueError):
    """Raised for non-positive principal or tenure, or a negative rate."""

    code = 'invalid_input'


@dataclass(frozen=True)
class LoanTerms:
    """Validated inputs to the engine."""

    principal: Decimal
    annual_rate: Decimal
    tenure_months: int

    @classmethod
    def from_values(cls, principal, annual_rate, tenure_months) -> 'LoanTerms':
        """
        Coerce and validate raw loan terms.

        Raises:
            InvalidLoanTermsError: If any term is out of range.
        """
        try:
            principal = Decimal(str(principal))
            annual_rate = Decimal(str(annual_rate))
            tenure_months = int(tenure_months)
        except (ArithmeticError, TypeError, ValueError) as exc:
            raise InvalidLoanTermsError(f"Invalid loan terms: {exc}") from exc

        if not principal.is_finite() or principal <= 0:
            raise InvalidLoanTermsError("Principal must be greater than 0.")
        if not annual_rate.is_finite() or annual_rate < 0:
            raise InvalidLoanTermsError("Interest rate cannot be negative.")
        if tenure_months < 1:
            raise InvalidLoanTermsError("Tenure must be at least 1 month.")

        return cls(principal, annual_rate, tenure_months)

    @property
    def monthly_rate(self) -> Decimal:
        return self.annual_rate / Decimal('1200')


@dataclass(frozen=True)
class ScheduleEntry:
    """One period of a repayment schedule."""

    emi_number: int
    due_date: date
    amount: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal
    status: str = STATUS_PENDING

    def to_record(self) -> dict:
        """Serialize for embedding in a loan's repayment_schedule."""
        record = asdict(self)
        record['due_date'] = self.due_date.isoformat()
        for key in ('amount', 'principal', 'interest', 'balance'):
            record[key] = str(record[key])
        return record


def _installment(terms: LoanTerms) -> Decimal:
    rate = terms.monthly_rate
    n = terms.tenure_months

    # 0% interest → straight-line repayment
    if rate == 0:
        emi = terms.principal / Decimal(n)
    else:
        power_term = (Decimal('1') + rate) ** n
        emi = terms.principal * rate * power_term / (power_term - Decimal('1'))

    emi = emi.quantize(RUPEE, rounding=ROUND_HALF_UP)
    if emi < RUPEE:
        raise InvalidLoanTermsError(
            "Installment rounds to less than one rupee; increase the principal."
        )
    return emi


def calculate_emi(principal, annual_rate, tenure_months: int) -> Decimal:
    """
    Calculate the fixed monthly installment.

    EMI = P × r × (1+r)^n / ((1+r)^n - 1)

    Where:
        P = principal (loan amount)
        r = monthly interest rate (annual_rate / 12 / 100)
        n = tenure in months

    Args:
        principal: Loan amount (must be > 0). Accepts Decimal, float, or int.
        annual_rate: Annual interest rate as percentage (e.g., 12 for 12%).
        tenure_months: Number of months for repayment (must be >= 1).

    Returns:
        Monthly EMI as Decimal, rounded to the nearest rupee (ROUND_HALF_UP).

    Raises:
        InvalidLoanTermsError: If inputs are invalid.
    """
    return _installment(LoanTerms.from_values(principal, annual_rate, tenure_months))


def first_due_date(disbursal_date: date) -> date:
    """
    Return the first EMI due date for a loan disbursed on disbursal_date.

    The first installment falls on the 1st of the month following
    the disbursal month.
    """
    return disbursal_date.replace(day=1) + relativedelta(months=1)


def generate_schedule(
    principal,
    annual_rate,
    tenure_months: int,
    first_due: date,
) -> List[ScheduleEntry]:
    """
    Generate the repayment schedule for a reducing-balance loan.

    The installment is constant for every period except the last, which
    clears whatever balance is left so the schedule closes at exactly 0.

    Args:
        principal: Loan amount.
        annual_rate: Annual interest rate (%).
        tenure_months: Number of installments.
        first_due: Due date of installment #1; later installments fall
            on the same day of each following month.

    Returns:
        List of ScheduleEntry ordered by emi_number.

    Raises:
        InvalidLoanTermsError: If inputs are invalid.
    """
    terms = LoanTerms.from_values(principal, annual_rate, tenure_months)
    emi = _installment(terms)
    rate = terms.monthly_rate

    schedule = []
    balance = terms.principal

    for emi_number in range(1, terms.tenure_months + 1):
        interest = (balance * rate).quantize(PAISE, rounding=ROUND_HALF_UP)

        if emi_number == terms.tenure_months:
            principal_part = balance
        else:
            if emi <= interest:
                raise InvalidLoanTermsError(
                    f"Installment of {emi} does not cover interest of {interest} "
                    f"in period {emi_number}."
                )
            principal_part = min(emi - interest, balance)

        balance -= principal_part

        schedule.append(ScheduleEntry(
            emi_number=emi_number,
            due_date=first_due + relativedelta(months=emi_number - 1),
            amount=principal_part + interest,
            principal=principal_part,
            interest=interest,
            balance=max(balance, ZERO),
        ))

    return schedule


def schedule_totals(schedule: Iterable[ScheduleEntry]) -> dict:
    """Aggregate payable, interest and principal over a schedule."""
    total_payable = ZERO
    total_interest = ZERO
    total_principal = ZERO

    for entry in schedule:
        total_payable += entry.amount
        total_interest += entry.interest
        total_principal += entry.principal

    return {
        'total_payable': total_payable,
        'total_interest': total_interest,
        'total_principal': total_principal,
    }


def serialize_schedule(schedule: Iterable[ScheduleEntry]) -> List[dict]:
    return [entry.to_record() for entry in schedule]
