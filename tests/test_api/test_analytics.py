"""Tests for the analytics endpoints."""


class TestAnalytics:
    """Tests for /api/analytics."""

    def test_empty_summary(self, client):
        data = client.get("/api/analytics").json()

        assert data["summary"]["total_filter_usage"] == 0
        assert data["top_values"]["sport"] == []
        assert data["top_combinations"] == []

    def test_records_tracked_requests(self, client):
        client.get("/api/photos", params={"sport": "volleyball", "category": "action"})
        client.get("/api/photos", params={"sport": "volleyball", "category": "action"})

        data = client.get("/api/analytics").json()

        assert data["summary"]["most_used_sport"] == "volleyball"
        # Every request starts from an empty session, so each one counts.
        assert data["top_values"]["category"] == [{"value": "action", "count": 2}]
        assert data["top_combinations"][0]["count"] == 2
        assert data["top_combinations"][0]["description"] == "Action + Volleyball"

    def test_top_validated(self, client):
        assert client.get("/api/analytics", params={"top": 0}).status_code == 422

    def test_export_and_reset(self, client):
        client.get("/api/photos", params={"sport": "soccer"})

        exported = client.get("/api/analytics/export").json()
        assert exported["values"]["sport"] == {"soccer": 1}

        assert client.delete("/api/analytics").status_code == 200
        assert client.get("/api/analytics").json()["summary"]["total_filter_usage"] == 0
