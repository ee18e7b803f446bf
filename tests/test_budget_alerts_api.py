import pytest
from fastapi import status
from sqlalchemy.exc import OperationalError

from app.core.security import create_access_token
from app.services.budget_service import BudgetService


def expense_payload(category, amount, when="2025-01-10T12:00:00"):
    return {
        "type": "EXPENSE",
        "amount": amount,
        "category": category.name,
        "category_id": str(category.id),
        "date": when,
        "payment_method": "CARD",
    }


async def create_budget(client, headers, category_id, amount="100.00", month="2025-01-01"):
    r = await client.post(
        "/api/v1/budgets/",
        json={"category_id": str(category_id), "amount": amount, "month": month},
        headers=headers,
    )
    assert r.status_code == status.HTTP_201_CREATED, r.text
    return r.json()


@pytest.mark.asyncio
async def test_requires_authentication(client):
    r = await client.get("/api/v1/alerts/")
    assert r.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    r = await client.get("/api/v1/alerts/", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_food_budget_end_to_end(client, auth_headers, food):
    budget = await create_budget(client, auth_headers, food.id, month="2025-01-17")
    assert budget["month"] == "2025-01-01"

    r = await client.post("/api/v1/transactions/", json=expense_payload(food, "60.00"), headers=auth_headers)
    assert r.status_code == status.HTTP_201_CREATED, r.text
    assert r.json()["alert"] is None

    r = await client.post("/api/v1/transactions/", json=expense_payload(food, "35.00"), headers=auth_headers)
    alert = r.json()["alert"]
    assert alert["tier"] == "90%"
    assert alert["percentage"] == "95.0"
    assert "95.0%" in alert["message"]

    r = await client.get(f"/api/v1/budgets/{budget['id']}/progress", headers=auth_headers)
    progress = r.json()
    assert progress["spending"] == "95.00"
    assert progress["remaining"] == "5.00"
    assert progress["status"] == "red"
    assert progress["category_name"] == "Food"

    r = await client.post("/api/v1/transactions/", json=expense_payload(food, "10.00"), headers=auth_headers)
    assert r.json()["alert"]["tier"] == "100%"

    r = await client.get("/api/v1/alerts/", headers=auth_headers)
    pending = r.json()
    assert [a["tier"] for a in pending] == ["100%"]
    assert pending[0]["message"] == "Alert: You've exceeded your Food budget by $5.00 (105.0% used)"

    r = await client.get("/api/v1/alerts/count", headers=auth_headers)
    assert r.json() == {"count": 1}


@pytest.mark.asyncio
async def test_dismiss_alert(client, auth_headers, food):
    budget = await create_budget(client, auth_headers, food.id)
    await client.post("/api/v1/transactions/", json=expense_payload(food, "92.00"), headers=auth_headers)

    r = await client.delete(f"/api/v1/alerts/{budget['id']}/150", headers=auth_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST

    r = await client.delete(f"/api/v1/alerts/{budget['id']}/100", headers=auth_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND

    r = await client.delete(f"/api/v1/alerts/{budget['id']}/90", headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK

    r = await client.get("/api/v1/alerts/count", headers=auth_headers)
    assert r.json() == {"count": 0}


@pytest.mark.asyncio
async def test_clear_alerts(client, auth_headers, food, rent):
    await create_budget(client, auth_headers, food.id)
    await create_budget(client, auth_headers, rent.id, amount="500.00")
    await client.post("/api/v1/transactions/", json=expense_payload(food, "99.00"), headers=auth_headers)
    await client.post("/api/v1/transactions/", json=expense_payload(rent, "600.00"), headers=auth_headers)

    r = await client.get("/api/v1/alerts/count", headers=auth_headers)
    assert r.json() == {"count": 2}

    r = await client.delete("/api/v1/alerts/", headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK
    r = await client.get("/api/v1/alerts/", headers=auth_headers)
    assert r.json() == []


@pytest.mark.asyncio
async def test_disabling_alerts_via_preferences(client, auth_headers, food):
    await create_budget(client, auth_headers, food.id)

    r = await client.put(
        "/api/v1/users/me/preferences", json={"budget_alerts_enabled": False}, headers=auth_headers
    )
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["budget_alerts_enabled"] is False
    assert r.json()["notification_method"] == "IN_APP"

    r = await client.post("/api/v1/transactions/", json=expense_payload(food, "150.00"), headers=auth_headers)
    assert r.status_code == status.HTTP_201_CREATED
    assert r.json()["alert"] is None

    r = await client.get("/api/v1/alerts/count", headers=auth_headers)
    assert r.json() == {"count": 0}


@pytest.mark.asyncio
async def test_preferences_validate_reminder_time(client, auth_headers):
    r = await client.put("/api/v1/users/me/preferences", json={"reminder_time": "25:00"}, headers=auth_headers)
    assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    r = await client.put("/api/v1/users/me/preferences", json={"reminder_time": "08:30"}, headers=auth_headers)
    assert r.json()["reminder_time"] == "08:30"

    r = await client.get("/api/v1/users/me/preferences", headers=auth_headers)
    assert r.json()["reminder_time"] == "08:30"
    assert r.json()["budget_alerts_enabled"] is True


@pytest.mark.asyncio
async def test_transaction_survives_alert_read_failure(client, auth_headers, food, monkeypatch):
    await create_budget(client, auth_headers, food.id)

    def failing_lookup(self, *args, **kwargs):
        raise OperationalError("SELECT budgets", {}, Exception("database is locked"))

    monkeypatch.setattr(BudgetService, "find_budget", failing_lookup)

    r = await client.post("/api/v1/transactions/", json=expense_payload(food, "150.00"), headers=auth_headers)
    assert r.status_code == status.HTTP_201_CREATED
    assert r.json()["alert"] is None
    assert r.json()["transaction"]["amount"] == "150.00"


@pytest.mark.asyncio
async def test_future_transaction_is_rejected(client, auth_headers, food):
    r = await client.post(
        "/api/v1/transactions/",
        json=expense_payload(food, "10.00", when="2999-01-01T00:00:00"),
        headers=auth_headers,
    )
    assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


@pytest.mark.asyncio
async def test_transaction_update_and_delete(client, auth_headers, food):
    await create_budget(client, auth_headers, food.id)
    r = await client.post("/api/v1/transactions/", json=expense_payload(food, "50.00"), headers=auth_headers)
    tx_id = r.json()["transaction"]["id"]

    r = await client.put(f"/api/v1/transactions/{tx_id}", json={"amount": "100.00"}, headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["transaction"]["amount"] == "100.00"
    assert r.json()["alert"]["tier"] == "100%"

    r = await client.delete(f"/api/v1/transactions/{tx_id}", headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["alert"] is None

    r = await client.get(f"/api/v1/transactions/{tx_id}", headers=auth_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_list_transactions_filters(client, auth_headers, food, rent):
    await client.post("/api/v1/transactions/", json=expense_payload(food, "10.00"), headers=auth_headers)
    await client.post("/api/v1/transactions/", json=expense_payload(rent, "20.00"), headers=auth_headers)

    r = await client.get("/api/v1/transactions/", params={"category_id": str(food.id)}, headers=auth_headers)
    assert [t["amount"] for t in r.json()] == ["10.00"]

    r = await client.get("/api/v1/transactions/", params={"type": "INCOME"}, headers=auth_headers)
    assert r.json() == []


@pytest.mark.asyncio
async def test_budget_endpoints(client, auth_headers, food, salary):
    budget = await create_budget(client, auth_headers, food.id)

    r = await client.post(
        "/api/v1/budgets/",
        json={"category_id": str(food.id), "amount": "50.00", "month": "2025-01-20"},
        headers=auth_headers,
    )
    assert r.status_code == status.HTTP_409_CONFLICT

    r = await client.post(
        "/api/v1/budgets/",
        json={"category_id": str(salary.id), "amount": "50.00", "month": "2025-01-01"},
        headers=auth_headers,
    )
    assert r.status_code == status.HTTP_400_BAD_REQUEST

    r = await client.post(
        "/api/v1/budgets/",
        json={"category_id": str(food.id), "amount": "0", "month": "2025-03-01"},
        headers=auth_headers,
    )
    assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    await client.post("/api/v1/transactions/", json=expense_payload(food, "75.00"), headers=auth_headers)

    r = await client.get("/api/v1/budgets/", params={"month": "2025-01"}, headers=auth_headers)
    [progress] = r.json()
    assert progress["status"] == "yellow"
    assert progress["percentage"] == "75.0"

    r = await client.get("/api/v1/budgets/", params={"month": "January"}, headers=auth_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST

    r = await client.put(f"/api/v1/budgets/{budget['id']}", json={"amount": "300.00"}, headers=auth_headers)
    assert r.json()["percentage"] == "25.0"
    assert r.json()["status"] == "green"

    r = await client.get("/api/v1/budgets/summary", params={"month": "2025-01"}, headers=auth_headers)
    summary = r.json()
    assert summary["total_budgets"] == 1
    assert summary["budgets_healthy"] == 1
    assert summary["total_spending"] == "75.00"

    r = await client.delete(f"/api/v1/budgets/{budget['id']}", headers=auth_headers)
    assert r.status_code == status.HTTP_200_OK
    r = await client.get(f"/api/v1/budgets/{budget['id']}", headers=auth_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_budgets_are_private(client, auth_headers, other_user, food):
    budget = await create_budget(client, auth_headers, food.id)
    bob_headers = {"Authorization": f"Bearer {create_access_token({'sub': other_user.email})}"}

    r = await client.get(f"/api/v1/budgets/{budget['id']}/progress", headers=bob_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND

    r = await client.delete(f"/api/v1/budgets/{budget['id']}", headers=bob_headers)
    assert r.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_category_endpoints(client, auth_headers, food):
    r = await client.get("/api/v1/categories/", params={"type": "EXPENSE"}, headers=auth_headers)
    names = [c["name"] for c in r.json()]
    assert "Food" in names and "Salary" not in names

    r = await client.post("/api/v1/categories/", json={"name": "Pets", "type": "EXPENSE"}, headers=auth_headers)
    assert r.status_code == status.HTTP_201_CREATED
    pets = r.json()
    assert pets["is_predefined"] is False

    r = await client.post("/api/v1/categories/", json={"name": "food", "type": "EXPENSE"}, headers=auth_headers)
    assert r.status_code == status.HTTP_409_CONFLICT

    r = await client.put(f"/api/v1/categories/{food.id}", json={"name": "Groceries"}, headers=auth_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST

    r = await client.put(f"/api/v1/categories/{pets['id']}", json={"name": "Pet care"}, headers=auth_headers)
    assert r.json()["name"] == "Pet care"

    await create_budget(client, auth_headers, pets["id"])
    r = await client.delete(f"/api/v1/categories/{pets['id']}", headers=auth_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST

    r = await client.delete(f"/api/v1/categories/{food.id}", headers=auth_headers)
    assert r.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/health")
    assert r.json()["status"] == "healthy"
