"""Integration tests for the v1 REST API.

Tests exercise the full HTTP stack via ASGI test client, with the local store
in a temp directory and the remote document table in in-memory SQLite.
"""

from unittest.mock import AsyncMock, patch

import pytest

from project50.crud import crud_progress_document
from project50.main import app
from project50.services.storage_service import LocalProgressStore, get_local_store

HEADERS = {"X-User-Id": "alice"}

HABITS = [
    {"id": "run", "label": "Run 5k"},
    {"id": "read", "label": "Read 10 pages"},
]


async def _start(client, **body):
    payload = {"total_days": 10, "habits": HABITS, **body}
    resp = await client.post("/api/v1/progress/start", json=payload, headers=HEADERS)
    assert resp.status_code == 201
    return resp.json()


async def _complete_today(client):
    for habit in HABITS:
        resp = await client.post(
            "/api/v1/progress/habits/toggle", json={"habit_id": habit["id"]}, headers=HEADERS
        )
        assert resp.status_code == 200
    return resp.json()


# ---------------------------------------------------------------------------
# Identity and lifecycle
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_missing_user_header(client):
    resp = await client.get("/api/v1/progress")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_invalid_user_header(client):
    resp = await client.get("/api/v1/progress", headers={"X-User-Id": "../etc"})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_no_challenge_yet(client):
    resp = await client.get("/api/v1/progress", headers=HEADERS)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_start_saves_locally_and_pushes(client, store, session_factory):
    data = await _start(client, strict_mode=True, user_name="Alice")
    assert data["persisted"] is True
    assert data["progress"]["current_day"] == 1
    assert data["progress"]["total_days"] == 10
    assert data["progress"]["strict_mode"] is True

    assert store.load("alice").user_name == "Alice"
    async with session_factory() as db:
        doc = await crud_progress_document.fetch(db, "alice")
    assert doc is not None
    assert doc.data["user_name"] == "Alice"


@pytest.mark.asyncio
async def test_start_uses_default_length(client):
    resp = await client.post("/api/v1/progress/start", json={}, headers=HEADERS)
    assert resp.status_code == 201
    assert resp.json()["progress"]["total_days"] == 50


@pytest.mark.asyncio
async def test_reset_removes_local_and_remote(client, store, session_factory):
    await _start(client)
    resp = await client.delete("/api/v1/progress", headers=HEADERS)
    assert resp.status_code == 204
    assert store.load("alice") is None

    resp = await client.get("/api/v1/progress", headers=HEADERS)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Daily flow
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_complete_and_finish_first_day(client):
    await _start(client)
    data = await _complete_today(client)
    assert data["progress"]["xp"] == 20
    assert [e["badge_id"] for e in data["events"]] == ["first_step"]

    resp = await client.post("/api/v1/progress/finish-day", json={}, headers=HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    # 20 from toggles, then 50 base + 2 * 10 + 50 perfect-day bonus
    assert data["progress"]["xp"] == 140
    assert data["progress"]["current_day"] == 2
    assert [e["type"] for e in data["events"]] == ["level_up"]
    assert data["events"][0]["level"] == 2


@pytest.mark.asyncio
async def test_toggle_rejects_future_and_unknown(client):
    await _start(client)
    resp = await client.post(
        "/api/v1/progress/habits/toggle", json={"habit_id": "run", "day": 5}, headers=HEADERS
    )
    assert resp.status_code == 422

    resp = await client.post(
        "/api/v1/progress/habits/toggle", json={"habit_id": "swim"}, headers=HEADERS
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_strict_mode_reset_over_http(client):
    await _start(client, strict_mode=True)
    await _complete_today(client)
    await client.post("/api/v1/progress/finish-day", json={}, headers=HEADERS)

    resp = await client.post("/api/v1/progress/finish-day", json={}, headers=HEADERS)
    data = resp.json()
    assert data["progress"]["current_day"] == 1
    assert data["progress"]["history"] == {}
    assert "challenge_reset" in [e["type"] for e in data["events"]]


@pytest.mark.asyncio
async def test_journal_and_focus(client):
    await _start(client)
    resp = await client.patch(
        "/api/v1/progress/journal",
        json={"notes": "Felt strong", "mood": "great", "habit_logs": {"run": "28 min"}},
        headers=HEADERS,
    )
    assert resp.status_code == 200
    day = resp.json()["progress"]["history"]["1"]
    assert day["notes"] == "Felt strong"
    assert day["mood"] == "great"
    assert day["habit_logs"] == {"run": "28 min"}

    resp = await client.post(
        "/api/v1/progress/focus", json={"habit_id": "read", "minutes": 25}, headers=HEADERS
    )
    progress = resp.json()["progress"]
    assert progress["xp"] == 50
    assert progress["habit_focus_distribution"] == {"read": 25}


@pytest.mark.asyncio
async def test_settings_validation(client):
    await _start(client)
    resp = await client.patch(
        "/api/v1/progress/settings", json={"ai_persona": "empathetic"}, headers=HEADERS
    )
    assert resp.status_code == 200
    assert resp.json()["progress"]["ai_persona"] == "empathetic"

    resp = await client.patch(
        "/api/v1/progress/settings",
        json={"custom_habits": [{"id": "a", "label": "A"}, {"id": "a", "label": "B"}]},
        headers=HEADERS,
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"user_name": None}, {"total_days": None}])
async def test_null_setting_is_rejected_and_progress_kept(client, store, body):
    await _start(client, user_name="Alice")
    resp = await client.patch("/api/v1/progress/settings", json=body, headers=HEADERS)
    assert resp.status_code == 422

    resp = await client.get("/api/v1/progress", headers=HEADERS)
    assert resp.status_code == 200
    assert resp.json()["user_name"] == "Alice"
    assert resp.json()["total_days"] == 10
    assert store.load("alice").user_name == "Alice"


@pytest.mark.asyncio
async def test_quota_exceeded_still_returns_state(client, tmp_path):
    app.dependency_overrides[get_local_store] = lambda: LocalProgressStore(tmp_path / "tiny", 1)
    resp = await client.post(
        "/api/v1/progress/start", json={"manifesto": "x" * 4096}, headers=HEADERS
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["persisted"] is False
    assert data["warning"]
    assert data["progress"]["manifesto"] == "x" * 4096


# ---------------------------------------------------------------------------
# Shop
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_shop_items_affordability(client):
    await _start(client)
    resp = await client.get("/api/v1/shop/items", headers=HEADERS)
    items = {item["id"]: item for item in resp.json()}
    assert items["streak_freeze"]["cost"] == 500
    assert items["streak_repair"]["label"] == "Time Warp"
    assert not items["streak_freeze"]["affordable"]


@pytest.mark.asyncio
async def test_purchase_errors(client):
    await _start(client)
    resp = await client.post(
        "/api/v1/shop/purchase", json={"item_id": "streak_freeze"}, headers=HEADERS
    )
    assert resp.status_code == 409
    assert resp.json()["detail"]["error"] == "InsufficientFunds"

    resp = await client.post("/api/v1/shop/purchase", json={"item_id": "nope"}, headers=HEADERS)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_freeze_without_inventory(client):
    await _start(client)
    resp = await client.post("/api/v1/shop/freeze", headers=HEADERS)
    assert resp.status_code == 409
    assert resp.json()["detail"]["error"] == "NoFreezeAvailable"


@pytest.mark.asyncio
async def test_buy_and_use_freeze(client):
    await _start(client)
    await client.post(
        "/api/v1/progress/focus", json={"habit_id": "run", "minutes": 300}, headers=HEADERS
    )
    resp = await client.post(
        "/api/v1/shop/purchase", json={"item_id": "streak_freeze"}, headers=HEADERS
    )
    assert resp.status_code == 200
    assert resp.json()["progress"]["xp"] == 100
    assert resp.json()["progress"]["streak_freezes"] == 1

    resp = await client.post("/api/v1/shop/freeze", headers=HEADERS)
    progress = resp.json()["progress"]
    assert progress["history"]["1"]["frozen"] is True
    assert progress["streak_freezes"] == 0

    resp = await client.delete("/api/v1/shop/freeze", headers=HEADERS)
    progress = resp.json()["progress"]
    assert progress["history"]["1"]["frozen"] is False
    assert progress["streak_freezes"] == 1


# ---------------------------------------------------------------------------
# Read-only views
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_stats_and_badges(client):
    await _start(client)
    await _complete_today(client)
    resp = await client.get("/api/v1/stats", headers=HEADERS)
    stats = resp.json()
    assert stats["current_streak"] == 1
    assert stats["heatmap"][0] == 3
    assert len(stats["heatmap"]) == 10

    resp = await client.get("/api/v1/badges", headers=HEADERS)
    badges = resp.json()
    assert [b["id"] for b in badges] == [
        "first_step",
        "week_warrior",
        "halfway_hero",
        "strict_master",
        "project_elite",
    ]
    assert badges[0]["unlocked"] is True
    assert badges[1]["unlocked"] is False


@pytest.mark.asyncio
async def test_motivation_falls_back_when_generation_fails(client):
    await _start(client)
    with patch(
        "project50.services.motivation_service.llm_service.generate_text",
        new_callable=AsyncMock,
        side_effect=RuntimeError("offline"),
    ):
        resp = await client.get("/api/v1/motivation", headers=HEADERS)
    assert resp.status_code == 200
    assert resp.json()["message"]


@pytest.mark.asyncio
async def test_remote_copy_wins_when_newer(client, store, session_factory):
    await _start(client)
    local = store.load("alice")
    # Another device advanced further and synced later
    newer = local.model_copy(
        update={"current_day": 4, "updated_at": local.updated_at.replace(year=2099)}
    )
    async with session_factory() as db:
        await crud_progress_document.upsert(db, "alice", newer, newer.updated_at)
        await db.commit()

    resp = await client.get("/api/v1/progress", headers=HEADERS)
    assert resp.json()["current_day"] == 4


@pytest.mark.asyncio
async def test_sync_now_records_sync_time(client, store):
    await _start(client)
    resp = await client.post("/api/v1/progress/sync", headers=HEADERS)
    assert resp.status_code == 200
    assert resp.json()["last_synced_at"] is not None
    assert store.load("alice").last_synced_at is not None
