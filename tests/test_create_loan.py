"""
Tests for the loan workflow: application, approval, rejection,
disbursal, editing and listing.
"""

from datetime import date
from decimal import Decimal

from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from apps.customers.models import Customer
from apps.loans.models import Loan
from apps.loans.services import LoanService, calculate_processing_fee


def make_loan(customer, status=Loan.STATUS_PENDING, **overrides):
    fields = {
        'customer': customer,
        'amount': Decimal('100000'),
        'interest_rate': Decimal('12'),
        'tenure': 12,
        'processing_fee': Decimal('2000'),
        'emi': Decimal('8885'),
        'status': status,
        'application_date': date(2024, 1, 10),
    }
    fields.update(overrides)
    return Loan.objects.create(**fields)


class ProcessingFeeTests(TestCase):

    def test_whole_rupees(self):
        self.assertEqual(
            calculate_processing_fee(Decimal('123456'), Decimal('2')),
            Decimal('2469'),
        )

    def test_zero_percentage(self):
        self.assertEqual(
            calculate_processing_fee(Decimal('100000'), Decimal('0')),
            Decimal('0'),
        )


@override_settings(API_KEYS=['test-key'])
class CreateLoanTests(TestCase):
    """Test POST /api/loans."""

    def setUp(self):
        self.client = APIClient()
        self.url = '/api/loans'
        self.header = {'HTTP_X_API_KEY': 'test-key'}
        self.customer = Customer.objects.create(name='Ravi Kumar', mobile='9876543210')

    def test_apply_success(self):
        """Application returns 201, Pending, with EMI and fee computed."""
        response = self.client.post(self.url, {
            'customer_id': self.customer.pk,
            'amount': '500000.00',
            'interest_rate': '10.50',
            'tenure': 60,
        }, format='json', **self.header)
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data['status'], 'Pending')
        self.assertEqual(Decimal(data['emi']), Decimal('10747'))
        self.assertEqual(Decimal(data['processing_fee_percentage']), Decimal('2'))
        self.assertEqual(Decimal(data['processing_fee']), Decimal('10000'))
        self.assertEqual(data['repayment_schedule'], [])
        self.assertIsNone(data['disbursal_date'])

    def test_apply_custom_fee(self):
        response = self.client.post(self.url, {
            'customer_id': self.customer.pk,
            'amount': '100000',
            'interest_rate': '12',
            'tenure': 12,
            'processing_fee_percentage': '1.5',
        }, format='json', **self.header)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(Decimal(response.json()['processing_fee']), Decimal('1500'))

    def test_zero_interest_allowed(self):
        response = self.client.post(self.url, {
            'customer_id': self.customer.pk,
            'amount': '120000',
            'interest_rate': '0',
            'tenure': 12,
        }, format='json', **self.header)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(Decimal(response.json()['emi']), Decimal('10000'))

    def test_customer_not_found(self):
        response = self.client.post(self.url, {
            'customer_id': 99999,
            'amount': '100000',
            'interest_rate': '10',
            'tenure': 12,
        }, format='json', **self.header)
        self.assertEqual(response.status_code, 404)

    def test_invalid_inputs(self):
        for bad in (
            {'amount': '0'},
            {'interest_rate': '-1'},
            {'tenure': 0},
            {'tenure': 361},
        ):
            payload = {
                'customer_id': self.customer.pk,
                'amount': '100000',
                'interest_rate': '10',
                'tenure': 12,
                **bad,
            }
            response = self.client.post(self.url, payload, format='json', **self.header)
            self.assertEqual(response.status_code, 400, bad)
            self.assertTrue(response.json()['error'])

    def test_missing_fields(self):
        response = self.client.post(self.url, {}, format='json', **self.header)
        self.assertEqual(response.status_code, 400)


@override_settings(API_KEYS=['test-key'])
class LoanDecisionTests(TestCase):
    """Test approve / reject / disburse transitions."""

    def setUp(self):
        self.client = APIClient()
        self.header = {'HTTP_X_API_KEY': 'test-key'}
        self.customer = Customer.objects.create(name='Ravi Kumar', mobile='9876543210')
        self.loan = make_loan(self.customer)

    def _post(self, action, data=None):
        return self.client.post(
            f'/api/loans/{self.loan.pk}/{action}',
            data or {},
            format='json',
            **self.header,
        )

    def test_approve(self):
        response = self._post('approve', {'comment': 'KYC verified'})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['status'], 'Approved')
        self.assertEqual(data['comment'], 'KYC verified')
        self.assertIsNotNone(data['approval_date'])

    def test_reject(self):
        response = self._post('reject', {'comment': 'Income not verified'})
        self.assertEqual(response.status_code, 200)
        self.loan.refresh_from_db()
        self.assertEqual(self.loan.status, Loan.STATUS_REJECTED)
        self.assertEqual(self.loan.comment, 'Income not verified')

    def test_cannot_approve_twice(self):
        self._post('approve')
        response = self._post('approve')
        self.assertEqual(response.status_code, 409)
        self.assertTrue(response.json()['error'])

    def test_cannot_reject_approved(self):
        self._post('approve')
        response = self._post('reject')
        self.assertEqual(response.status_code, 409)

    def test_cannot_disburse_pending(self):
        response = self._post('disburse')
        self.assertEqual(response.status_code, 409)
        self.loan.refresh_from_db()
        self.assertEqual(self.loan.repayment_schedule, [])

    def test_disburse_generates_schedule(self):
        self._post('approve')
        response = self._post('disburse', {'disbursal_date': '2024-01-15'})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['status'], 'Disbursed')
        self.assertEqual(data['disbursal_date'], '2024-01-15')

        schedule = data['repayment_schedule']
        self.assertEqual(len(schedule), 12)
        self.assertEqual(schedule[0]['due_date'], '2024-02-01')
        self.assertEqual(schedule[-1]['due_date'], '2025-01-01')
        self.assertEqual(Decimal(schedule[0]['amount']), Decimal('8885'))
        self.assertEqual(Decimal(schedule[-1]['balance']), Decimal('0'))
        self.assertTrue(all(entry['status'] == 'Pending' for entry in schedule))
        self.assertEqual(data['repayments_left'], 12)

    def test_disburse_defaults_to_today(self):
        self._post('approve')
        response = self._post('disburse')
        self.assertEqual(response.status_code, 200)
        self.loan.refresh_from_db()
        self.assertIsNotNone(self.loan.disbursal_date)
        self.assertEqual(len(self.loan.repayment_schedule), 12)

    def test_disburse_future_date_rejected(self):
        self._post('approve')
        response = self._post('disburse', {'disbursal_date': '2999-01-01'})
        self.assertEqual(response.status_code, 400)

    def test_loan_not_found(self):
        response = self.client.post('/api/loans/99999/approve', {}, format='json', **self.header)
        self.assertEqual(response.status_code, 404)


@override_settings(API_KEYS=['test-key'])
class UpdateLoanTests(TestCase):
    """Test PATCH /api/loans/<loan_id>."""

    def setUp(self):
        self.client = APIClient()
        self.header = {'HTTP_X_API_KEY': 'test-key'}
        self.customer = Customer.objects.create(name='Ravi Kumar', mobile='9876543210')

    def _patch(self, loan, data):
        return self.client.patch(
            f'/api/loans/{loan.pk}', data, format='json', **self.header,
        )

    def test_edit_pending_recomputes_emi(self):
        loan = make_loan(self.customer)
        response = self._patch(loan, {'amount': '500000', 'interest_rate': '10.5', 'tenure': 60})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(Decimal(data['emi']), Decimal('10747'))
        self.assertEqual(Decimal(data['processing_fee']), Decimal('10000'))
        self.assertEqual(data['repayment_schedule'], [])

    def test_edit_disbursed_regenerates_schedule(self):
        loan = make_loan(self.customer, status=Loan.STATUS_APPROVED)
        LoanService.disburse(loan.pk, date(2024, 1, 15))

        response = self._patch(loan, {'tenure': 24})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(len(data['repayment_schedule']), 24)
        self.assertEqual(data['repayment_schedule'][0]['due_date'], '2024-02-01')
        self.assertEqual(Decimal(data['repayment_schedule'][-1]['balance']), Decimal('0'))

    def test_edit_disbursal_date_shifts_due_dates(self):
        loan = make_loan(self.customer, status=Loan.STATUS_APPROVED)
        LoanService.disburse(loan.pk, date(2024, 1, 15))

        response = self._patch(loan, {'disbursal_date': '2024-03-20'})
        self.assertEqual(response.status_code, 200)
        schedule = response.json()['repayment_schedule']
        self.assertEqual(schedule[0]['due_date'], '2024-04-01')
        self.assertEqual(schedule[-1]['due_date'], '2025-03-01')

    def test_edit_discards_recorded_payments(self):
        """Regeneration is wholesale: paid entries revert to Pending."""
        loan = make_loan(self.customer, status=Loan.STATUS_APPROVED)
        LoanService.disburse(loan.pk, date(2024, 1, 15))
        loan.refresh_from_db()
        schedule = loan.repayment_schedule
        schedule[0] = {**schedule[0], 'status': 'Paid'}
        loan.repayment_schedule = schedule
        loan.save()

        response = self._patch(loan, {'notes': 'rescheduled'})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['paid_emis'], 0)
        self.assertEqual(data['notes'], 'rescheduled')

    def test_edit_disbursal_date_on_undisbursed_loan(self):
        loan = make_loan(self.customer)
        response = self._patch(loan, {'disbursal_date': '2024-01-15'})
        self.assertEqual(response.status_code, 409)

    def test_edit_rejected_loan(self):
        loan = make_loan(self.customer, status=Loan.STATUS_REJECTED)
        response = self._patch(loan, {'amount': '200000'})
        self.assertEqual(response.status_code, 409)

    def test_edit_invalid_tenure(self):
        loan = make_loan(self.customer)
        response = self._patch(loan, {'tenure': 0})
        self.assertEqual(response.status_code, 400)


@override_settings(API_KEYS=['test-key'])
class ViewLoanTests(TestCase):
    """Test GET /api/loans and GET /api/loans/<loan_id>."""

    def setUp(self):
        self.client = APIClient()
        self.header = {'HTTP_X_API_KEY': 'test-key'}
        self.ravi = Customer.objects.create(name='Ravi Kumar', mobile='9876543210')
        self.meena = Customer.objects.create(name='Meena Iyer', mobile='9123456780')
        self.pending = make_loan(self.ravi)
        self.approved = make_loan(self.meena, status=Loan.STATUS_APPROVED)

    def test_view_loan(self):
        response = self.client.get(f'/api/loans/{self.pending.pk}', **self.header)
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['loan_id'], self.pending.pk)
        self.assertEqual(data['customer_name'], 'Ravi Kumar')
        self.assertEqual(data['tenure'], 12)

    def test_view_loan_not_found(self):
        response = self.client.get('/api/loans/99999', **self.header)
        self.assertEqual(response.status_code, 404)

    def test_list_all(self):
        response = self.client.get('/api/loans', **self.header)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['count'], 2)

    def test_filter_by_status(self):
        response = self.client.get('/api/loans?status=Approved', **self.header)
        results = response.json()['results']
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0]['loan_id'], self.approved.pk)

    def test_unknown_status(self):
        response = self.client.get('/api/loans?status=Bogus', **self.header)
        self.assertEqual(response.status_code, 400)

    def test_search_by_customer_name(self):
        response = self.client.get('/api/loans?search=meena', **self.header)
        results = response.json()['results']
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0]['customer_name'], 'Meena Iyer')

    def test_search_by_loan_id(self):
        response = self.client.get(f'/api/loans?search={self.pending.pk}', **self.header)
        loan_ids = [row['loan_id'] for row in response.json()['results']]
        self.assertIn(self.pending.pk, loan_ids)

    def test_pagination(self):
        for _ in range(12):
            make_loan(self.ravi)
        response = self.client.get('/api/loans', **self.header)
        data = response.json()
        self.assertEqual(data['count'], 14)
        self.assertEqual(len(data['results']), 10)
        self.assertIsNotNone(data['next'])
