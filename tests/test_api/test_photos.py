"""Tests for the photos and filter-counts endpoints."""


class TestPhotos:
    """Tests for GET /api/photos."""

    def test_no_filters_returns_everything_newest_first(self, client):
        response = client.get("/api/photos")
        assert response.status_code == 200

        data = response.json()
        assert data["pagination"]["total"] == 10
        assert data["photos"][0]["photo_id"] == "p10"
        assert data["sort"] == "newest"
        assert data["filters"] == {}
        assert data["share_url"] == "/explore"

    def test_filters_from_query_params(self, client):
        response = client.get(
            "/api/photos",
            params=[("sport", "volleyball"), ("lighting", "natural"), ("lighting", "backlit"), ("sort", "oldest")],
        )
        assert response.status_code == 200

        data = response.json()
        assert [p["photo_id"] for p in data["photos"]] == ["p01", "p03", "p08"]
        assert data["filters"] == {"sport": "volleyball", "lighting": ["natural", "backlit"]}
        assert data["query"] == "sport=volleyball&lighting=natural&lighting=backlit"

    def test_invalid_values_dropped(self, client):
        response = client.get("/api/photos", params={"sport": "curling", "mood": "happy", "page": "abc"})
        assert response.status_code == 200

        data = response.json()
        assert data["filters"] == {}
        assert data["pagination"]["page"] == 1

    def test_incompatible_filters_auto_cleared(self, client):
        response = client.get("/api/photos", params={"sport": "soccer", "play_type": "serve"})
        assert response.status_code == 200

        data = response.json()
        assert data["cleared"] == ["play_type"]
        assert data["filters"] == {"sport": "soccer"}
        assert data["pagination"]["total"] == 2
        assert data["notifications"][0]["message"].startswith("Cleared Play Type")

    def test_zero_results_warning(self, client):
        response = client.get("/api/photos", params={"sport": "portrait", "category": "action"})
        assert response.status_code == 200

        data = response.json()
        assert data["pagination"]["total"] == 0
        assert data["photos"] == []
        assert data["notifications"][-1]["severity"] == "warning"

    def test_catalog_failure_is_503(self, client, failing_catalog):
        response = client.get("/api/photos", params={"sport": "soccer"})
        assert response.status_code == 503
        assert response.json()["detail"]["retryable"] is True

    def test_tracked_requests_recorded_in_history(self, client):
        client.get("/api/photos", params={"sport": "soccer"})
        client.get("/api/photos", params={"sport": "basketball", "track": "false"})

        entries = client.get("/api/history").json()
        assert [e["filters"] for e in entries] == [{"sport": "soccer"}]

    def test_no_cache_header(self, client):
        response = client.get("/api/photos")
        assert response.headers["cache-control"] == "no-cache"


class TestFilterCounts:
    """Tests for GET /api/filter-counts."""

    def test_counts_scoped_to_other_filters(self, client):
        response = client.get("/api/filter-counts", params={"sport": "volleyball"})
        assert response.status_code == 200

        data = response.json()
        assert data["counts"]["category"]["action"] == 3
        # Sport counts ignore the sport filter itself.
        assert data["counts"]["sport"]["soccer"] == 2
        assert data["counts"]["sport"]["volleyball"] == 5

    def test_option_states(self, client):
        data = client.get("/api/filter-counts", params={"sport": "soccer"}).json()

        assert data["options"]["sport"]["soccer"] == "active"
        assert data["options"]["lighting"]["natural"] == "available"
        assert data["options"]["lighting"]["backlit"] == "disabled"
        # Volleyball-only play types conflict with soccer.
        assert data["options"]["play_type"]["serve"] == "disabled"

    def test_counts_not_recorded_in_history(self, client):
        client.get("/api/filter-counts", params={"sport": "soccer"})
        assert client.get("/api/history").json() == []

    def test_cache_header(self, client):
        response = client.get("/api/filter-counts")
        assert response.headers["cache-control"] == "public, max-age=300"
