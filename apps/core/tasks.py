"""
Celery tasks for the Loan Management System.

The collections report export writes an .xlsx file with pandas;
the completion sweep closes loans whose schedule is fully paid.
"""

import logging
from datetime import date
from pathlib import Path

import pandas as pd
from celery import shared_task
from django.conf import settings
from django.db import transaction

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    'receipt_id', 'loan_id', 'customer_id', 'customer_name',
    'emi_number', 'amount', 'payment_date', 'payment_method',
]


@shared_task(
    bind=True,
    name='core.export_collections_report',
    max_retries=3,
    default_retry_delay=10,
)
def export_collections_report(self, date_from, date_to):
    """
    Export receipts collected between date_from and date_to (inclusive,
    ISO dates) to collections_<from>_<to>.xlsx under REPORTS_DIR.

    Re-running for the same range overwrites the file.
    """
    from apps.payments.services import PaymentService

    try:
        start = date.fromisoformat(str(date_from))
        end = date.fromisoformat(str(date_to))
    except ValueError as exc:
        logger.error("Invalid report range %s..%s: %s", date_from, date_to, exc)
        return {'status': 'error', 'message': f'Invalid date range: {exc}'}

    report_dir = Path(settings.REPORTS_DIR)
    file_path = report_dir / f'collections_{start.isoformat()}_{end.isoformat()}.xlsx'

    try:
        logger.info("Exporting collections report %s..%s", start, end)

        report = PaymentService.collections_report(start, end)
        rows = [
            {
                'receipt_id': receipt.receipt_id,
                'loan_id': receipt.loan_id,
                'customer_id': receipt.customer_id,
                'customer_name': receipt.customer.name,
                'emi_number': receipt.emi_number,
                'amount': float(receipt.amount),
                'payment_date': receipt.payment_date.isoformat(),
                'payment_method': receipt.payment_method,
            }
            for receipt in report['receipts']
        ]
        df = pd.DataFrame(rows, columns=REPORT_COLUMNS)

        report_dir.mkdir(parents=True, exist_ok=True)
        df.to_excel(file_path, index=False, sheet_name='Collections')

        result = {
            'status': 'success',
            'file': str(file_path),
            'rows': len(df),
            'total': str(report['total']),
        }
        logger.info("Collections report export complete: %s", result)
        return result

    except Exception as exc:
        logger.exception("Collections report export failed")
        raise self.retry(exc=exc)


@shared_task(name='core.close_completed_loans')
def close_completed_loans():
    """
    Mark disbursed loans whose every EMI is paid as Completed.

    Idempotent; a no-op when nothing is left to close.
    """
    from apps.loans.models import Loan

    closed = []
    candidates = Loan.objects.filter(status=Loan.STATUS_DISBURSED).values_list(
        'pk', flat=True,
    )
    for loan_id in candidates:
        with transaction.atomic():
            loan = Loan.objects.select_for_update().get(pk=loan_id)
            if loan.status != Loan.STATUS_DISBURSED or not loan.is_fully_paid:
                continue
            loan.status = Loan.STATUS_COMPLETED
            loan.save(update_fields=['status', 'updated_at'])
            closed.append(loan.pk)

    result = {'status': 'success', 'closed': len(closed), 'loan_ids': closed}
    logger.info("Completed-loan sweep: %s", result)
    return result
