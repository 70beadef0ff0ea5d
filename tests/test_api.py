"""
Integration tests for the FastAPI application.

Tests the info and health endpoints, rendered pages, statistics,
bloom lookups, controls and playback through the TestClient.
"""


class TestInfo:
    """Test info and health endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["map"] == "/api/v1/map"

    def test_health(self, client):
        response = client.get("/health")
        body = response.json()

        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["records"]["observations"] == 340
        assert body["playback"] == "stopped"

    def test_unknown_path_returns_json_404(self, client):
        response = client.get("/api/v1/nothing-here")
        assert response.status_code == 404
        assert response.json()["error"] == "Not Found"


class TestViews:
    """Test state, layers and rendered pages."""

    def test_state(self, client):
        state = client.get("/api/v1/state").json()

        assert state["region"] == "global"
        assert state["layers"] == {"blooms": True, "citizen": True, "climate": True, "agricultural": True}
        assert state["playback"]["state"] == "stopped"

    def test_layers(self, client):
        body = client.get("/api/v1/layers").json()

        assert body["time_index"] is None
        assert body["counts"]["blooms"] == 340
        marker = body["layers"]["blooms"][0]
        assert set(marker) == {"record_id", "position", "style", "popup_html"}
        assert marker["style"]["radius"] in (8, 12, 16, 20)

    def test_map_page(self, client):
        response = client.get("/api/v1/map")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "leaflet" in response.text.lower()

    def test_globe_page(self, client):
        response = client.get("/api/v1/globe")
        assert response.status_code == 200
        assert "plotly" in response.text.lower()

    def test_statistics(self, client):
        body = client.get("/api/v1/statistics").json()

        assert body["summary"]["active_blooms"] == 340
        assert set(body) == {"summary", "ecosystem", "agriculture"}


class TestBloomInfo:
    """Test click lookups."""

    def test_found(self, client):
        marker = client.get("/api/v1/layers").json()["layers"]["blooms"][0]
        lat, lng = marker["position"]

        body = client.get("/api/v1/bloom-info", params={"lat": lat, "lng": lng}).json()

        assert body["found"] is True
        assert body["distance_m"] < 50_000
        assert "bloom-popup" in body["popup_html"]

    def test_not_found(self, client):
        body = client.get("/api/v1/bloom-info", params={"lat": 0.0, "lng": -150.0}).json()

        assert body["found"] is False
        assert body["message"] == "No Bloom Data"

    def test_invalid_coordinates(self, client):
        response = client.get("/api/v1/bloom-info", params={"lat": 100.0, "lng": 0.0})
        assert response.status_code == 422


class TestControls:
    """Test control dispatch over HTTP."""

    def test_bloom_type(self, client):
        response = client.post("/api/v1/controls/bloom_type", json={"value": "superbloom"})
        body = response.json()

        assert response.status_code == 200
        assert body["result"] == "superbloom"
        assert body["state"]["bloom_type"] == "superbloom"

        counts = client.get("/api/v1/layers").json()["counts"]
        assert 0 < counts["blooms"] < 340

    def test_region(self, client):
        client.post("/api/v1/controls/region", json={"value": "india"})
        summary = client.get("/api/v1/statistics").json()["summary"]

        assert summary["current_region"] == "india"
        assert summary["countries_covered"] == 1

    def test_invalid_value(self, client):
        response = client.post("/api/v1/controls/confidence", json={"value": 500})
        assert response.status_code == 400
        assert "confidence" in response.json()["detail"]

    def test_unknown_control(self, client):
        response = client.post("/api/v1/controls/radar", json={"value": True})
        assert response.status_code == 400


class TestPlayback:
    """Test playback endpoints."""

    def test_play_and_pause(self, client):
        playing = client.post("/api/v1/playback/play").json()
        paused = client.post("/api/v1/playback/pause").json()

        assert playing["state"] == "playing"
        assert paused["state"] == "stopped"

    def test_toggle(self, client):
        assert client.post("/api/v1/playback/toggle").json()["state"] == "playing"
        assert client.post("/api/v1/playback/toggle").json()["state"] == "stopped"

    def test_speed(self, client):
        body = client.post("/api/v1/playback/speed").json()

        assert body["speed"] == 2.0
        assert body["period_ms"] == 500.0

    def test_reset(self, client):
        client.post("/api/v1/controls/time_slider", json={"value": 6})
        body = client.post("/api/v1/playback/reset").json()

        assert body["index"] == 0
        assert body["label"] == "Jan 2024"
        assert body["state"] == "stopped"
