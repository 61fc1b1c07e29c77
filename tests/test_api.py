"""HTTP tests for the ledger endpoints and the response envelope."""

from datetime import date
from decimal import Decimal

import pytest

from apps.expenses.models import Expense, ExpenseSplit
from apps.expenses.services.expense_store import ExpenseStore
from apps.expenses.services.split_allocator import make_split

pytestmark = pytest.mark.django_db


@pytest.fixture
def dinner(travel, categories, u1, u2, u3):
    return ExpenseStore().create_expense(
        travel.id,
        paid_by=u1.id,
        category_id="food",
        amount=Decimal("99.99"),
        title="Dinner",
        split=make_split("equal"),
        participants=[u1.id, u2.id, u3.id],
        date=date(2026, 4, 2),
        requesting_user_id=u1.id,
    )


def expense_payload(*users, **overrides):
    payload = {
        "amount": "99.99",
        "title": "Dinner",
        "categoryId": "food",
        "paidBy": str(users[0].id),
        "splitBetween": [str(u.id) for u in users],
        "splitMethod": "equal",
        "date": "2026-04-02",
    }
    payload.update(overrides)
    return payload


class TestCategories:

    def test_list_ordered_by_name(self, member_client, categories):
        response = member_client.get("/api/v1/expense-categories/")

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 6
        assert [c["name"] for c in data] == sorted(c["name"] for c in data)
        assert {"id": "food", "name": "食事", "color": "#F59E0B", "icon": "🍽️"} in data

    def test_requires_authentication(self, api_client):
        response = api_client.get("/api/v1/expense-categories/")

        assert response.status_code == 401
        assert response.json()["success"] is False


class TestCreateExpenseEndpoint:

    def test_created_with_envelope(self, member_client, travel, categories, u1, u2, u3):
        response = member_client.post(
            f"/api/v1/travels/{travel.id}/expenses/",
            expense_payload(u1, u2, u3, memo="Izakaya"),
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["amount"] == "99.99"
        assert data["travelId"] == str(travel.id)
        assert data["splitMethod"] == "equal"
        assert data["splitBetween"] == [str(u1.id), str(u2.id), str(u3.id)]
        assert "customSplits" not in data
        assert [s["amount"] for s in data["splits"]] == ["33.33", "33.33", "33.33"]
        assert data["payer"] == {"id": str(u1.id), "name": "Alice", "email": "alice@example.com"}
        assert data["createdBy"] == str(u1.id)
        assert data["memo"] == "Izakaya"
        assert data["itineraryItemId"] is None

    def test_custom_split_echoes_entries(self, member_client, travel, categories, u1, u2):
        payload = expense_payload(
            u1,
            u2,
            amount="50.00",
            splitMethod="custom",
            customSplits=[
                {"userId": str(u1.id), "amount": "20.00"},
                {"userId": str(u2.id), "amount": "30.00"},
            ],
        )

        response = member_client.post(
            f"/api/v1/travels/{travel.id}/expenses/", payload, format="json",
        )

        assert response.status_code == 201
        assert response.json()["data"]["customSplits"] == [
            {"userId": str(u1.id), "amount": "20.00"},
            {"userId": str(u2.id), "amount": "30.00"},
        ]

    def test_custom_mismatch_is_400(self, member_client, travel, categories, u1, u2):
        payload = expense_payload(
            u1,
            u2,
            amount="100.00",
            splitMethod="custom",
            customSplits=[
                {"userId": str(u1.id), "amount": "60.00"},
                {"userId": str(u2.id), "amount": "30.00"},
            ],
        )

        response = member_client.post(
            f"/api/v1/travels/{travel.id}/expenses/", payload, format="json",
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert error["details"] == {"expected": "100.00", "actual": "90.00"}
        assert not Expense.objects.exists()

    def test_malformed_payload_is_400(self, member_client, travel, categories, u1):
        response = member_client.post(
            f"/api/v1/travels/{travel.id}/expenses/",
            expense_payload(u1, amount="-5", splitBetween=[]),
            format="json",
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert {"amount", "splitBetween"} <= set(error["details"])

    def test_outsider_is_403(self, api_client, travel, categories, u1, outsider):
        api_client.force_authenticate(user=outsider)

        response = api_client.post(
            f"/api/v1/travels/{travel.id}/expenses/", expense_payload(u1), format="json",
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "forbidden"

    def test_unknown_travel_is_404(self, member_client, categories, u1):
        response = member_client.post(
            "/api/v1/travels/00000000-0000-0000-0000-000000000000/expenses/",
            expense_payload(u1),
            format="json",
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"


class TestExpenseEndpoints:

    def test_list_requires_travel_id(self, member_client):
        response = member_client.get("/api/v1/expenses/")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_list_by_travel(self, member_client, travel, dinner):
        response = member_client.get("/api/v1/expenses/", {"travelId": str(travel.id)})

        assert response.status_code == 200
        assert [e["id"] for e in response.json()["data"]] == [str(dinner.id)]

    def test_retrieve(self, member_client, dinner):
        response = member_client.get(f"/api/v1/expenses/{dinner.id}/")

        assert response.status_code == 200
        assert response.json()["data"]["category"]["id"] == "food"

    def test_patch_resplits(self, member_client, dinner, u1, u2, u3):
        response = member_client.patch(
            f"/api/v1/expenses/{dinner.id}/",
            {
                "splitMethod": "custom",
                "splitBetween": [str(u1.id), str(u2.id)],
                "customSplits": [
                    {"userId": str(u1.id), "amount": "90.00"},
                    {"userId": str(u2.id), "amount": "9.99"},
                ],
            },
            format="json",
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["splitBetween"] == [str(u1.id), str(u2.id)]
        assert not ExpenseSplit.objects.filter(expense=dinner, user=u3).exists()

    def test_patch_title_only(self, member_client, dinner):
        response = member_client.patch(
            f"/api/v1/expenses/{dinner.id}/", {"title": "Supper"}, format="json",
        )

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Supper"
        assert ExpenseSplit.objects.filter(expense=dinner).count() == 3

    def test_delete(self, member_client, dinner):
        response = member_client.delete(f"/api/v1/expenses/{dinner.id}/")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"message": "Expense deleted successfully"},
        }
        assert not ExpenseSplit.objects.filter(expense_id=dinner.id).exists()

    def test_delete_missing_is_404(self, member_client):
        response = member_client.delete(
            "/api/v1/expenses/00000000-0000-0000-0000-000000000000/",
        )

        assert response.status_code == 404


class TestBudgetEndpoints:

    def test_null_before_first_write(self, member_client, travel):
        response = member_client.get("/api/v1/budgets/", {"travelId": str(travel.id)})

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": None}

    def test_upsert_and_read(self, member_client, travel, categories, u1):
        response = member_client.post(
            f"/api/v1/travels/{travel.id}/budgets/",
            {
                "totalBudget": "1000.00",
                "categoryBudgets": [{"categoryId": "food", "amount": "250.00"}],
            },
            format="json",
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalBudget"] == "1000.00"
        assert data["travelId"] == str(travel.id)
        assert data["createdBy"] == str(u1.id)
        assert [(c["categoryId"], c["amount"]) for c in data["categoryBudgets"]] == [
            ("food", "250.00"),
        ]

        read = member_client.get("/api/v1/budgets/", {"travelId": str(travel.id)})
        assert read.json()["data"]["id"] == data["id"]

    def test_unknown_category_is_400(self, member_client, travel, categories):
        response = member_client.post(
            f"/api/v1/travels/{travel.id}/budgets/",
            {"categoryBudgets": [{"categoryId": "yachts", "amount": "1.00"}]},
            format="json",
        )

        assert response.status_code == 400


class TestAnalyticsEndpoint:

    def test_scenario(self, member_client, travel, dinner, u1, u2, u3):
        response = member_client.get(f"/api/v1/travels/{travel.id}/expense-analytics/")

        assert response.status_code == 200
        assert response.json()["data"] == {
            "totalAmount": "99.99",
            "categoryTotals": {"food": "99.99"},
            "payerTotals": {str(u1.id): "99.99"},
            "balances": {
                str(u1.id): "66.66",
                str(u2.id): "-33.33",
                str(u3.id): "-33.33",
            },
            "expenseCount": 1,
        }

    def test_totals_beyond_single_expense_width(self, member_client, travel, categories, u1, u2):
        """Sums may need more digits than any one stored amount."""
        store = ExpenseStore()
        for _ in range(101):
            store.create_expense(
                travel.id,
                paid_by=u1.id,
                category_id="food",
                amount=Decimal("9999999999.99"),
                title="Charter",
                split=make_split("equal"),
                participants=[u2.id],
                date=date(2026, 4, 1),
                requesting_user_id=u1.id,
            )

        response = member_client.get(f"/api/v1/travels/{travel.id}/expense-analytics/")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalAmount"] == "1009999999998.99"
        assert data["categoryTotals"] == {"food": "1009999999998.99"}
        assert data["balances"] == {
            str(u1.id): "1009999999998.99",
            str(u2.id): "-1009999999998.99",
        }
        assert data["expenseCount"] == 101


class TestTokenAuth:

    def test_bearer_token_grants_access(self, api_client, categories, u1):
        """A token obtained with email and password authenticates ledger calls."""
        token = api_client.post(
            "/api/v1/auth/token/",
            {"email": u1.email, "password": "not-a-real-password"},
            format="json",
        )
        assert token.status_code == 200

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.json()['access']}")
        response = api_client.get("/api/v1/expense-categories/")

        assert response.status_code == 200
