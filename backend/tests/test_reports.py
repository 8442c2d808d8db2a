"""Tests for reports and operational endpoints."""

from datetime import date, timedelta
from decimal import Decimal

from storeroom.models.item import Category


def _issue(client, headers, number, department, item, quantity, issue_date=None):
    return client.post("/api/issues", json={
        "issue_number": number,
        "department_id": department.id,
        "issue_date": (issue_date or date.today()).isoformat(),
        "items": [{"item_id": item.id, "quantity": str(quantity)}],
    }, headers=headers)


class TestDashboard:
    def test_counts(self, client, viewer_headers, storekeeper_headers, item_a, item_b, department):
        _issue(client, storekeeper_headers, "ISS-R1", department, item_a, 1)
        _issue(client, storekeeper_headers, "ISS-OLD", department, item_a, 1,
               issue_date=date.today() - timedelta(days=90))

        res = client.get("/api/reports/dashboard-stats", headers=viewer_headers)
        assert res.status_code == 200
        assert res.json() == {
            "total_items": 2,
            "low_stock_items": 1,
            # item_a's opening GRN is dated 2024-01-02
            "recent_grns": 0,
            "recent_issues": 1,
        }


class TestStockByCategory:
    def test_totals(self, client, db_session, viewer_headers, item_a, item_b):
        db_session.add(Category(name="Cleaning"))
        db_session.commit()

        rows = client.get("/api/reports/stock-by-category", headers=viewer_headers).json()
        assert [r["category"] for r in rows] == ["Cleaning", "Stationery"]
        assert rows[0]["item_count"] == 0
        assert Decimal(str(rows[0]["total_quantity"])) == 0
        assert rows[1]["item_count"] == 2
        assert Decimal(str(rows[1]["total_quantity"])) == 10


class TestDepartmentConsumption:
    def test_recent_issues_only(self, client, viewer_headers, storekeeper_headers, item_a, department):
        _issue(client, storekeeper_headers, "ISS-C1", department, item_a, 2)
        _issue(client, storekeeper_headers, "ISS-C2", department, item_a, 3)
        _issue(client, storekeeper_headers, "ISS-C3", department, item_a, 4,
               issue_date=date.today() - timedelta(days=60))

        rows = client.get("/api/reports/department-consumption", headers=viewer_headers).json()
        assert len(rows) == 1
        assert rows[0]["department"] == "Maintenance"
        assert rows[0]["issue_count"] == 2
        assert Decimal(str(rows[0]["items_issued"])) == 5


class TestOperational:
    def test_health(self, client):
        res = client.get("/health")
        assert res.status_code == 200
        assert res.json()["status"] == "healthy"

    def test_metrics_count_transactions(self, client, storekeeper_headers, item_a, department):
        _issue(client, storekeeper_headers, "ISS-MET", department, item_a, 1)
        _issue(client, storekeeper_headers, "ISS-MET2", department, item_a, 500)

        body = client.get("/metrics").text
        assert 'stock_transactions_total{kind="issue",outcome="committed"}' in body
        assert 'stock_transactions_total{kind="issue",outcome="INSUFFICIENT_STOCK"}' in body
        assert 'stock_lines_committed_total{kind="issue"}' in body

    def test_security_headers(self, client):
        res = client.get("/health")
        assert res.headers["X-Content-Type-Options"] == "nosniff"
        assert res.headers["X-Frame-Options"] == "DENY"
