"""Tests for the history endpoints."""


class TestHistory:
    """Tests for /api/history."""

    def test_empty(self, client):
        assert client.get("/api/history").json() == []

    def test_newest_first(self, client):
        client.get("/api/photos", params={"sport": "soccer"})
        client.get("/api/photos", params={"sport": "volleyball"})

        entries = client.get("/api/history").json()

        assert [e["filters"]["sport"] for e in entries] == ["volleyball", "soccer"]
        assert entries[0]["url"] == "/explore?sport=volleyball"
        assert entries[0]["description"] == "Volleyball"
        assert entries[0]["relative_time"] == "Just now"

    def test_limit(self, client):
        for sport in ["soccer", "volleyball", "basketball"]:
            client.get("/api/photos", params={"sport": sport})
        assert len(client.get("/api/history", params={"limit": 2}).json()) == 2

    def test_limit_validated(self, client):
        assert client.get("/api/history", params={"limit": 50}).status_code == 422

    def test_delete_entry(self, client):
        client.get("/api/photos", params={"sport": "soccer"})
        entry_id = client.get("/api/history").json()[0]["id"]

        assert client.delete(f"/api/history/{entry_id}").status_code == 200
        assert client.get("/api/history").json() == []
        assert client.delete(f"/api/history/{entry_id}").status_code == 404

    def test_clear(self, client):
        client.get("/api/photos", params={"sport": "soccer"})
        client.delete("/api/history")
        assert client.get("/api/history").json() == []
