from __future__ import annotations

from fastapi.testclient import TestClient

from movie_agent.api.app import create_app


def test_index_page_renders_preferences_form() -> None:
    app = create_app()
    client = TestClient(app)

    resp = client.get("/")
    assert resp.status_code == 200
    assert "text/html" in resp.headers["content-type"]

    body = resp.text
    assert "<title>Movie Night Agent</title>" in body
    assert 'id="mood"' in body
    assert 'id="watchingWith"' in body
    assert 'id="availableTime"' in body
    assert 'id="recentlyEnjoyed"' in body
    assert '<option value="thought-provoking">' in body
    assert '<option value="family">' in body
    assert "/api/recommend/stream" in body
