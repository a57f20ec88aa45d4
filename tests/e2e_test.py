"""
End-to-end API test script.
Uses urllib (no external deps needed).

Run against a live server: python tests/e2e_test.py
Set API_KEY in the environment when the server has API_KEYS configured.
"""

import json
import os
import urllib.error
import urllib.request

BASE = os.environ.get('API_BASE', 'http://localhost:8000/api')
API_KEY = os.environ.get('API_KEY', '')


def api_call(method, url, data=None):
    """Make an API call and return status + body."""
    headers = {'Content-Type': 'application/json'}
    if API_KEY:
        headers['X-API-KEY'] = API_KEY
    try:
        payload = json.dumps(data).encode('utf-8') if data is not None else None
        req = urllib.request.Request(url, data=payload, headers=headers, method=method)

        response = urllib.request.urlopen(req)
        body = json.loads(response.read().decode('utf-8'))
        return response.status, body
    except urllib.error.HTTPError as e:
        body = json.loads(e.read().decode('utf-8'))
        return e.code, body


def main():
    print('=' * 60)
    print('LOAN MANAGEMENT SYSTEM — END-TO-END API TESTS')
    print('=' * 60)

    # ─── Test 1: Register Customer ───
    print('\n--- TEST 1: POST /api/customers ---')
    status, body = api_call('POST', f'{BASE}/customers', {
        'name': 'Rahul Sharma',
        'mobile': '9876543210',
        'aadhaar': '123412341234',
        'pan': 'ABCDE1234F',
    })
    print(f'Status: {status}')
    print(f'Response: {json.dumps(body, indent=2)}')

    customer_id = body.get('customer_id')
    assert status == 201, f'Expected 201, got {status}'
    print('✓ PASSED')

    # ─── Test 2: EMI Calculator ───
    print('\n--- TEST 2: POST /api/emi-calculator ---')
    status, body = api_call('POST', f'{BASE}/emi-calculator', {
        'amount': 500000,
        'interest_rate': 10.5,
        'tenure': 60,
    })
    print(f'Status: {status}')
    assert status == 200, f'Expected 200, got {status}'
    assert float(body['emi']) == 10747, 'EMI wrong'
    assert len(body['schedule']) == 60, 'Schedule length wrong'
    print('✓ PASSED')

    # ─── Test 3: Apply, approve, disburse ───
    print('\n--- TEST 3: loan workflow ---')
    status, body = api_call('POST', f'{BASE}/loans', {
        'customer_id': customer_id,
        'amount': 100000,
        'interest_rate': 12,
        'tenure': 12,
    })
    assert status == 201, f'Expected 201, got {status}'
    loan_id = body['loan_id']
    print(f'  apply → {status} (loan #{loan_id}) ✓')

    status, body = api_call('POST', f'{BASE}/loans/{loan_id}/approve', {'comment': 'ok'})
    assert status == 200 and body['status'] == 'Approved', f'Approve failed: {status}'
    print(f'  approve → {status} ✓')

    status, body = api_call('POST', f'{BASE}/loans/{loan_id}/disburse', {})
    assert status == 200 and body['status'] == 'Disbursed', f'Disburse failed: {status}'
    assert len(body['repayment_schedule']) == 12, 'Schedule length wrong'
    print(f'  disburse → {status} ✓')
    print('✓ PASSED')

    # ─── Test 4: Collect EMI ───
    print(f'\n--- TEST 4: POST /api/loans/{loan_id}/collect ---')
    status, body = api_call('POST', f'{BASE}/loans/{loan_id}/collect', {
        'emi_number': 1,
        'payment_method': 'cash',
    })
    print(f'Status: {status}')
    print(f'Response: {json.dumps(body, indent=2)}')
    assert status == 201, f'Expected 201, got {status}'
    receipt_id = body['receipt_id']

    status, body = api_call('POST', f'{BASE}/loans/{loan_id}/collect', {
        'emi_number': 1,
        'payment_method': 'cash',
    })
    assert status == 409, f'Expected 409 on double collection, got {status}'
    print('✓ PASSED')

    # ─── Test 5: Receipt, due list, dashboard ───
    print('\n--- TEST 5: read endpoints ---')
    status, body = api_call('GET', f'{BASE}/receipts/{receipt_id}')
    assert status == 200, f'Expected 200, got {status}'
    print(f'  receipts/{receipt_id} → {status} ✓')

    status, body = api_call('GET', f'{BASE}/collections/due-list')
    assert status == 200, f'Expected 200, got {status}'
    print(f'  due-list → {status} ✓')

    status, body = api_call('GET', f'{BASE}/dashboard')
    assert status == 200, f'Expected 200, got {status}'
    assert body['active_loans'] >= 1, 'Active loan count wrong'
    print(f'  dashboard → {status} ✓')
    print('✓ PASSED')

    # ─── Test 6: 404 for non-existent resources ───
    print('\n--- TEST 6: Error handling (404s) ---')
    for path in ('loans/999999', 'customers/999999', 'receipts/RCPT-0-0'):
        status, body = api_call('GET', f'{BASE}/{path}')
        assert status == 404, f'Expected 404, got {status}'
        print(f'  {path} → {status} ✓')
    print('✓ PASSED')

    # ─── Test 7: Validation errors ───
    print('\n--- TEST 7: Validation errors (400s) ---')
    status, body = api_call('POST', f'{BASE}/customers', {'name': 'Bad'})
    assert status == 400, f'Expected 400, got {status}'
    print(f'  customers (missing mobile) → {status} ✓')

    status, body = api_call('POST', f'{BASE}/emi-calculator', {
        'amount': 100000,
        'interest_rate': 12,
        'tenure': 0,
    })
    assert status == 400, f'Expected 400, got {status}'
    print(f'  emi-calculator (tenure 0) → {status} ✓')
    print('✓ PASSED')

    print('\n' + '=' * 60)
    print('ALL 7 TESTS PASSED ✓')
    print('=' * 60)


if __name__ == '__main__':
    main()
