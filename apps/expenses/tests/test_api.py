import pytest
from uuid import uuid4
from django.urls import reverse
from rest_framework import status
from apps.expenses.models import Expense, ExpenseShare


def expense_list_url(plan):
    return reverse('expenses:plan-expense-list', kwargs={'plan_id': plan.id})


def expense_detail_url(expense):
    return reverse('expenses:expense-detail', kwargs={'pk': expense.id})


def settle_url(expense, user):
    return reverse('expenses:expense-settle', kwargs={'pk': expense.id, 'user_id': user.id})


# =============================================================================
# Plan Expense Collection Tests
# =============================================================================

@pytest.mark.django_db
class TestExpenseCreate:
    """Tests for POST /api/plans/{plan_id}/expenses/"""

    def test_create_equal_expense(self, alice_client, plan, alice):
        """Three-way EQUAL split; payer's share comes back paid."""
        data = {'title': 'Dinner', 'amount': '30.00'}
        response = alice_client.post(expense_list_url(plan), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['split_type'] == 'EQUAL'
        assert response.data['currency'] == 'USD'
        assert response.data['payer']['id'] == str(alice.id)
        assert len(response.data['shares']) == 3
        assert {s['amount'] for s in response.data['shares']} == {'10.00'}

        paid = [s for s in response.data['shares'] if s['is_paid']]
        assert len(paid) == 1
        assert paid[0]['user']['id'] == str(alice.id)

    def test_create_custom_expense(self, bob_client, plan, alice, bob, carol):
        data = {
            'title': 'Concert',
            'amount': '90.00',
            'currency': 'EUR',
            'split_type': 'CUSTOM',
            'shares': [
                {'user_id': str(alice.id), 'amount': '20.00'},
                {'user_id': str(bob.id), 'amount': '30.00'},
                {'user_id': str(carol.id), 'amount': '40.00'},
            ],
        }
        response = bob_client.post(expense_list_url(plan), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        shares = {s['user']['id']: s for s in response.data['shares']}
        assert shares[str(carol.id)]['amount'] == '40.00'
        assert shares[str(bob.id)]['is_paid'] is True

    def test_create_custom_sum_mismatch(self, alice_client, plan, alice, bob, carol):
        data = {
            'title': 'Hotel',
            'amount': '30.00',
            'split_type': 'CUSTOM',
            'shares': [
                {'user_id': str(alice.id), 'amount': '10.00'},
                {'user_id': str(bob.id), 'amount': '10.00'},
                {'user_id': str(carol.id), 'amount': '9.99'},
            ],
        }
        response = alice_client.post(expense_list_url(plan), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'must equal total' in response.data['error']
        assert not Expense.objects.exists()

    def test_create_custom_without_shares(self, alice_client, plan):
        data = {'title': 'Hotel', 'amount': '30.00', 'split_type': 'BY_ITEM'}
        response = alice_client.post(expense_list_url(plan), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'shares' in response.data

    def test_create_equal_with_shares_rejected(self, alice_client, plan, alice, bob, carol):
        data = {
            'title': 'Dinner',
            'amount': '30.00',
            'shares': [
                {'user_id': str(alice.id), 'amount': '30.00'},
                {'user_id': str(bob.id), 'amount': '0.00'},
                {'user_id': str(carol.id), 'amount': '0.00'},
            ],
        }
        response = alice_client.post(expense_list_url(plan), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'shares' in response.data
        assert not Expense.objects.exists()

    def test_create_non_positive_amount(self, alice_client, plan):
        response = alice_client.post(expense_list_url(plan), {'title': 'Free', 'amount': '0.00'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_with_foreign_activity(self, alice_client, plan, other_plan, outsider):
        from apps.plans.models import Activity
        foreign = Activity.objects.create(plan=other_plan, name='Elsewhere', created_by=outsider)

        data = {'title': 'Tickets', 'amount': '9.00', 'activity_id': str(foreign.id)}
        response = alice_client.post(expense_list_url(plan), data, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_create_non_member_forbidden(self, outsider_client, plan):
        response = outsider_client.post(expense_list_url(plan), {'title': 'X', 'amount': '5.00'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_create_missing_plan(self, alice_client):
        url = reverse('expenses:plan-expense-list', kwargs={'plan_id': uuid4()})
        response = alice_client.post(url, {'title': 'X', 'amount': '5.00'}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_create_unauthenticated(self, api_client, plan):
        response = api_client.post(expense_list_url(plan), {'title': 'X', 'amount': '5.00'}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestExpenseList:
    """Tests for GET /api/plans/{plan_id}/expenses/"""

    def test_list_expenses(self, bob_client, plan, equal_expense, skewed_expense):
        response = bob_client.get(expense_list_url(plan))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
        assert {e['title'] for e in response.data['results']} == {'Groceries', 'Apartment'}

    def test_list_non_member(self, outsider_client, plan, equal_expense):
        response = outsider_client.get(expense_list_url(plan))

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestExpenseSummary:
    """Tests for GET /api/plans/{plan_id}/expenses/summary/"""

    def test_summary(self, bob_client, plan, equal_expense, alice, bob):
        url = reverse('expenses:plan-expense-summary', kwargs={'plan_id': plan.id})
        response = bob_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_spent'] == '30.00'
        assert response.data['expense_count'] == 1
        assert response.data['currency'] == 'USD'

        balances = {b['user']['id']: b for b in response.data['balances']}
        assert balances[str(alice.id)]['balance'] == '20.00'
        assert balances[str(alice.id)]['owed_to_you'] == '20.00'
        assert balances[str(bob.id)]['balance'] == '-10.00'
        assert balances[str(bob.id)]['outstanding'] == '10.00'

    def test_summary_non_member(self, outsider_client, plan):
        url = reverse('expenses:plan-expense-summary', kwargs={'plan_id': plan.id})
        response = outsider_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert 'error' in response.data

    def test_summary_missing_plan(self, alice_client):
        url = reverse('expenses:plan-expense-summary', kwargs={'plan_id': uuid4()})
        response = alice_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert list(response.data) == ['error']
        assert 'not found' in response.data['error']


@pytest.mark.django_db
class TestExpenseDebts:
    """Tests for GET /api/plans/{plan_id}/expenses/debts/"""

    def test_debts(self, bob_client, plan, skewed_expense, alice):
        url = reverse('expenses:plan-expense-debts', kwargs={'plan_id': plan.id})
        response = bob_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['creditor']['id'] == str(alice.id)
        assert response.data[0]['total_owed'] == '40.00'
        assert response.data[0]['expenses'][0]['title'] == 'Apartment'

    def test_payer_has_no_debts(self, alice_client, plan, skewed_expense):
        url = reverse('expenses:plan-expense-debts', kwargs={'plan_id': plan.id})
        response = alice_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == []


@pytest.mark.django_db
class TestSettlementPlan:
    """Tests for GET /api/plans/{plan_id}/expenses/settlements/"""

    def test_settlements(self, carol_client, plan, skewed_expense, alice, bob, carol):
        url = reverse('expenses:plan-expense-settlements', kwargs={'plan_id': plan.id})
        response = carol_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        transfers = [
            (t['from_user']['id'], t['to_user']['id'], t['amount'])
            for t in response.data['transfers']
        ]
        assert transfers == [
            (str(bob.id), str(alice.id), '40.00'),
            (str(carol.id), str(alice.id), '20.00'),
        ]

    def test_settlements_empty_plan(self, alice_client, plan):
        url = reverse('expenses:plan-expense-settlements', kwargs={'plan_id': plan.id})
        response = alice_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['transfers'] == []


# =============================================================================
# Single Expense Tests
# =============================================================================

@pytest.mark.django_db
class TestExpenseDetail:
    """Tests for GET/PATCH/DELETE /api/expenses/{id}/"""

    def test_retrieve(self, carol_client, equal_expense):
        response = carol_client.get(expense_detail_url(equal_expense))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['title'] == 'Groceries'
        assert len(response.data['shares']) == 3

    def test_retrieve_non_member(self, outsider_client, equal_expense):
        response = outsider_client.get(expense_detail_url(equal_expense))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_retrieve_missing(self, alice_client):
        url = reverse('expenses:expense-detail', kwargs={'pk': uuid4()})
        response = alice_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_retrieve_malformed_id(self, alice_client):
        response = alice_client.get('/api/expenses/not-a-uuid/')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_amount(self, alice_client, equal_expense):
        response = alice_client.patch(expense_detail_url(equal_expense), {'amount': '45.00'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['amount'] == '45.00'
        assert {s['amount'] for s in response.data['shares']} == {'15.00'}

    def test_update_title_only(self, alice_client, equal_expense):
        share_ids = {
            str(share_id)
            for share_id in ExpenseShare.objects.filter(expense=equal_expense).values_list('id', flat=True)
        }

        response = alice_client.patch(expense_detail_url(equal_expense), {'title': 'Market'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['title'] == 'Market'
        assert {s['id'] for s in response.data['shares']} == share_ids

    def test_update_invalid_split_keeps_shares(self, alice_client, equal_expense):
        before = sorted(ExpenseShare.objects.filter(expense=equal_expense).values_list('id', 'amount'))

        response = alice_client.patch(
            expense_detail_url(equal_expense),
            {'split_type': 'CUSTOM'},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        after = sorted(ExpenseShare.objects.filter(expense=equal_expense).values_list('id', 'amount'))
        assert after == before

    def test_resubmitting_same_split_keeps_settlement(self, alice_client, skewed_expense, alice, bob, carol):
        alice_client.post(settle_url(skewed_expense, bob))

        data = {
            'title': 'Apartment (final)',
            'amount': '100.00',
            'split_type': 'CUSTOM',
            'shares': [
                {'user_id': str(alice.id), 'amount': '40.00'},
                {'user_id': str(bob.id), 'amount': '40.00'},
                {'user_id': str(carol.id), 'amount': '20.00'},
            ],
        }
        response = alice_client.patch(expense_detail_url(skewed_expense), data, format='json')

        assert response.status_code == status.HTTP_200_OK
        shares = {s['user']['id']: s for s in response.data['shares']}
        assert shares[str(bob.id)]['is_paid'] is True
        assert ExpenseShare.objects.get(expense=skewed_expense, user=bob).is_paid is True

    def test_update_to_equal_with_shares_rejected(self, alice_client, skewed_expense, alice, bob, carol):
        data = {
            'split_type': 'EQUAL',
            'shares': [
                {'user_id': str(alice.id), 'amount': '40.00'},
                {'user_id': str(bob.id), 'amount': '40.00'},
                {'user_id': str(carol.id), 'amount': '20.00'},
            ],
        }
        response = alice_client.patch(expense_detail_url(skewed_expense), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'shares' in response.data

    def test_update_shares_on_stored_equal_split_rejected(self, alice_client, equal_expense, alice, bob, carol):
        data = {
            'shares': [
                {'user_id': str(alice.id), 'amount': '10.00'},
                {'user_id': str(bob.id), 'amount': '10.00'},
                {'user_id': str(carol.id), 'amount': '10.00'},
            ],
        }
        response = alice_client.patch(expense_detail_url(equal_expense), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'EQUAL split' in response.data['error']

    def test_update_by_non_payer(self, bob_client, equal_expense):
        response = bob_client.patch(expense_detail_url(equal_expense), {'title': 'Mine'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_delete_by_payer(self, alice_client, equal_expense):
        response = alice_client.delete(expense_detail_url(equal_expense))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Expense.objects.filter(id=equal_expense.id).exists()
        assert not ExpenseShare.objects.filter(expense_id=equal_expense.id).exists()

    def test_delete_by_other_member(self, bob_client, equal_expense):
        response = bob_client.delete(expense_detail_url(equal_expense))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Expense.objects.filter(id=equal_expense.id).exists()


@pytest.mark.django_db
class TestSettleShare:
    """Tests for POST /api/expenses/{id}/settle/{user_id}/"""

    def test_settle(self, alice_client, equal_expense, bob):
        response = alice_client.post(settle_url(equal_expense, bob))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_paid'] is True
        assert response.data['paid_at'] is not None
        assert response.data['user']['id'] == str(bob.id)

    def test_settle_twice_conflicts(self, alice_client, equal_expense, bob):
        first = alice_client.post(settle_url(equal_expense, bob))
        second = alice_client.post(settle_url(equal_expense, bob))

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_409_CONFLICT
        assert 'already' in second.data['error']

    def test_settle_by_non_payer(self, bob_client, equal_expense, bob):
        response = bob_client.post(settle_url(equal_expense, bob))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_settle_missing_share(self, alice_client, equal_expense, outsider):
        response = alice_client.post(settle_url(equal_expense, outsider))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_settle_clears_debts(self, alice_client, bob_client, plan, skewed_expense, bob):
        alice_client.post(settle_url(skewed_expense, bob))

        url = reverse('expenses:plan-expense-debts', kwargs={'plan_id': plan.id})
        response = bob_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == []
