"""
Core utility functions for the Loan Management System.

Presentation helpers for Indian Rupee amounts. Amounts are shown
in whole rupees with Indian digit grouping (lakh / crore).
"""

from decimal import ROUND_HALF_UP, Decimal

ONES = [
    '', 'one', 'two', 'three', 'four', 'five', 'six', 'seven', 'eight',
    'nine', 'ten', 'eleven', 'twelve', 'thirteen', 'fourteen', 'fifteen',
    'sixteen', 'seventeen', 'eighteen', 'nineteen',
]
TENS = [
    '', '', 'twenty', 'thirty', 'forty', 'fifty', 'sixty', 'seventy',
    'eighty', 'ninety',
]

# Largest unit first
INDIAN_UNITS = (
    (10000000, 'crore'),
    (100000, 'lakh'),
    (1000, 'thousand'),
)


def to_whole_rupees(amount) -> int:
    """Round an amount to the nearest rupee (half rounds up)."""
    return int(Decimal(str(amount)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def format_inr(amount) -> str:
    """
    Format an amount as whole Indian Rupees.

    Examples:
        format_inr(500000) → '₹5,00,000'
        format_inr(Decimal('10746.6')) → '₹10,747'
        format_inr(999) → '₹999'
    """
    rupees = to_whole_rupees(amount)
    sign = '-' if rupees < 0 else ''
    digits = str(abs(rupees))

    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ','.join(groups + [tail])

    return f"{sign}₹{digits}"


def _below_thousand(number: int) -> str:
    words = []
    if number > 99:
        words.append(f"{ONES[number // 100]} hundred")
        number %= 100
    if number > 19:
        words.append(TENS[number // 10])
        if number % 10:
            words.append(ONES[number % 10])
    elif number:
        words.append(ONES[number])
    return ' '.join(words)


def amount_in_words(amount) -> str:
    """
    Spell out a rupee amount using the Indian numbering system.

    Examples:
        amount_in_words(10747) → 'Ten Thousand Seven Hundred Forty Seven'
        amount_in_words(2500000) → 'Twenty Five Lakh'
    """
    number = to_whole_rupees(amount)
    if number <= 0:
        return 'Zero'

    parts = []
    for unit_value, unit_name in INDIAN_UNITS:
        if number >= unit_value:
            count = number // unit_value
            # Crores can exceed 999 for very large amounts
            if count >= 1000:
                parts.append(amount_in_words(count).lower())
            else:
                parts.append(_below_thousand(count))
            parts.append(unit_name)
            number %= unit_value
    if number:
        parts.append(_below_thousand(number))

    return ' '.join(' '.join(parts).split()).title()
