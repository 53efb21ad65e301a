"""Tests for metrics path labelling."""

from types import SimpleNamespace

from prometheus_client import REGISTRY

from api.middleware.metrics import MetricsMiddleware


def fake_request(scope, routes=()):
    return SimpleNamespace(scope=scope, app=SimpleNamespace(routes=list(routes)))


class TestPathTemplate:
    def setup_method(self):
        self.middleware = MetricsMiddleware(app=None)

    def test_uses_matched_route_from_scope(self):
        route = SimpleNamespace(path="/api/closet/{item_id}")
        request = fake_request({"route": route, "path": "/api/closet/rec1"})

        assert self.middleware._get_path_template(request) == "/api/closet/{item_id}"

    def test_skips_routes_without_path(self):
        # Included routers in newer FastAPI releases carry no .path
        request = fake_request({"type": "http", "path": "/nowhere"}, routes=[object()])

        assert self.middleware._get_path_template(request) == "unmatched"


def test_requests_labelled_by_route_pattern(client, fake_store):
    record = fake_store.seed(
        "Clothing Items", {"Name": "Tee", "Category": "Top", "Owner User Id": "user-a"}
    )
    labels = {"method": "PUT", "path": "/api/closet/{item_id}", "status": "200"}
    before = REGISTRY.get_sample_value("outfitted_http_requests_total", labels) or 0

    response = client.put(f"/api/closet/{record.id}", json={"color": "red"})

    assert response.status_code == 200
    after = REGISTRY.get_sample_value("outfitted_http_requests_total", labels)
    assert after == before + 1
