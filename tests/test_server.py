"""
Tests for the Flask server: card API, CORS, HTML endpoints.
"""
import pytest
from flask import Flask

from kanban.config import Config, ConfigError
from kanban_server import create_app, main


def post_card(http, **body):
    return http.post("/api/cards", json=body)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# GET /api/cards
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestListCards:

    def test_returns_seed_cards(self):
        http = create_app().test_client()
        res = http.get("/api/cards")
        assert res.status_code == 200
        body = res.get_json()
        assert isinstance(body, list)
        assert len(body) == 3

    def test_each_card_has_id_title_column(self):
        body = create_app().test_client().get("/api/cards").get_json()
        for card in body:
            assert card["id"]
            assert card["title"]
            assert card["column"] in ("todo", "doing", "done")

    def test_apps_do_not_share_state(self):
        first = create_app().test_client()
        second = create_app().test_client()
        post_card(first, title="Only in first")
        assert len(first.get("/api/cards").get_json()) == 4
        assert len(second.get("/api/cards").get_json()) == 3

    def test_seed_from_config(self):
        cfg = Config(seed_cards=[])
        assert create_app(cfg).test_client().get("/api/cards").get_json() == []

    def test_invalid_seed_is_a_config_error(self):
        cfg = Config(seed_cards=[{"id": "1", "title": "A"}, {"id": "1", "title": ""}])
        with pytest.raises(ConfigError, match="seed_cards"):
            create_app(cfg)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# POST /api/cards
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestCreateCard:

    def test_creates_card_and_returns_201(self, http):
        res = post_card(http, title="New task")
        assert res.status_code == 201
        card = res.get_json()
        assert card["title"] == "New task"
        assert card["column"] == "todo"
        assert card["id"]

    def test_respects_column_when_provided(self, http):
        card = post_card(http, title="Already doing", column="doing").get_json()
        assert card["column"] == "doing"

    def test_new_card_appears_exactly_once(self, http):
        created = post_card(http, title="Check me").get_json()
        cards = http.get("/api/cards").get_json()
        assert [c["id"] for c in cards].count(created["id"]) == 1

    def test_blank_title_rejected(self, http):
        res = post_card(http, title="   ")
        assert res.status_code == 400
        assert "error" in res.get_json()
        assert len(http.get("/api/cards").get_json()) == 3

    def test_unknown_column_rejected(self, http):
        res = post_card(http, title="Task", column="backlog")
        assert res.status_code == 400

    def test_malformed_body_is_treated_as_empty(self, http):
        res = http.post("/api/cards", data="{not json", content_type="application/json")
        assert res.status_code == 400


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PATCH /api/cards/<id>
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestPatchCard:

    def test_updates_title(self, http):
        res = http.patch("/api/cards/1", json={"title": "Renamed task"})
        assert res.status_code == 200
        updated = res.get_json()
        assert updated == {"id": "1", "title": "Renamed task", "column": "todo"}

    def test_moves_card_to_new_column(self, http):
        updated = http.patch("/api/cards/2", json={"column": "done"}).get_json()
        assert updated == {"id": "2", "title": "B", "column": "done"}

    def test_only_supplied_fields_change(self, http):
        before = {c["id"]: c for c in http.get("/api/cards").get_json()}
        for card_id, patch in [("1", {"title": "X"}), ("2", {"column": "todo"}), ("3", {})]:
            after = http.patch(f"/api/cards/{card_id}", json=patch).get_json()
            assert after["id"] == card_id
            changed = {k for k in after if after[k] != before[card_id][k]}
            assert changed == set(patch)

    def test_id_is_immutable(self, http):
        updated = http.patch("/api/cards/1", json={"id": "other"}).get_json()
        assert updated["id"] == "1"

    @pytest.mark.parametrize("card_id", ["nonexistent", "0", "1x"])
    def test_returns_404_for_unknown_id(self, http, card_id):
        res = http.patch(f"/api/cards/{card_id}", json={"column": "done"})
        assert res.status_code == 404
        assert res.get_json() == {"error": "Not found"}

    def test_encoded_id_reaches_the_card(self):
        cfg = Config(seed_cards=[{"id": "a?b", "title": "Odd id"}])
        http = create_app(cfg).test_client()
        updated = http.patch("/api/cards/a%3Fb", json={"column": "done"}).get_json()
        assert updated == {"id": "a?b", "title": "Odd id", "column": "done"}

    def test_invalid_column_rejected(self, http):
        res = http.patch("/api/cards/1", json={"column": "archive"})
        assert res.status_code == 400
        assert http.get("/api/cards").get_json()[0]["column"] == "todo"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# DELETE /api/cards/<id>
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestDeleteCard:

    def test_removes_card(self, http):
        res = http.delete("/api/cards/1")
        assert res.status_code == 200
        assert res.get_json() == {"success": True}
        ids = [c["id"] for c in http.get("/api/cards").get_json()]
        assert "1" not in ids

    def test_deleting_twice_succeeds_both_times(self, http):
        for _ in range(2):
            res = http.delete("/api/cards/1")
            assert res.status_code == 200
            assert res.get_json() == {"success": True}

    def test_missing_id_is_not_an_error(self, http):
        res = http.delete("/api/cards/nonexistent")
        assert res.status_code == 200


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CORS, UI, health
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestCors:

    def test_wildcard_origin_by_default(self, http):
        res = http.get("/api/cards", headers={"Origin": "http://example.com"})
        assert res.headers["Access-Control-Allow-Origin"] == "*"

    def test_preflight_answered(self, http):
        res = http.open("/api/cards/1", method="OPTIONS")
        assert res.status_code == 204
        assert "PATCH" in res.headers["Access-Control-Allow-Methods"]

    def test_configured_origins(self):
        http = create_app(Config(cors_origins=["http://allowed.test"])).test_client()
        allowed = http.get("/api/cards", headers={"Origin": "http://allowed.test"})
        denied = http.get("/api/cards", headers={"Origin": "http://other.test"})
        assert allowed.headers["Access-Control-Allow-Origin"] == "http://allowed.test"
        assert "Access-Control-Allow-Origin" not in denied.headers

    def test_html_routes_have_no_cors_headers(self, http):
        assert "Access-Control-Allow-Origin" not in http.get("/board").headers


class TestUi:

    def test_index_renders_board(self, http):
        res = http.get("/")
        assert res.status_code == 200
        html = res.get_data(as_text=True)
        assert "<kanban-board" in html
        assert html.count('class="column"') == 3
        assert "/static/kanban.js" in html

    def test_board_fragment_reflects_store(self, http):
        post_card(http, title="<b>bold</b>", column="done")
        html = http.get("/board").get_data(as_text=True)
        assert "<b>bold</b>" not in html
        assert "&lt;b&gt;bold&lt;/b&gt;" in html
        assert html.count("<kanban-card") == 4

    def test_static_script_served(self, http):
        res = http.get("/static/kanban.js")
        assert res.status_code == 200
        res.close()

    def test_health(self, http):
        assert http.get("/health").get_json() == {"status": "ok", "cards": 3}

    def test_unknown_api_route_is_json_404(self, http):
        res = http.get("/api/nothing")
        assert res.status_code == 404
        assert res.get_json() == {"error": "Not found"}


def test_main_runs_single_threaded(monkeypatch, tmp_path, capsys):
    for var in ("KANBAN_HOST", "KANBAN_PORT", "KANBAN_CONFIG"):
        monkeypatch.delenv(var, raising=False)
    calls = {}
    monkeypatch.setattr(Flask, "run", lambda self, **kw: calls.update(kw))
    main(["--port", "4000", "--config", str(tmp_path / "missing.yaml")])
    assert calls == {"host": "127.0.0.1", "port": 4000, "debug": False, "threaded": False}
    assert "http://127.0.0.1:4000" in capsys.readouterr().out
