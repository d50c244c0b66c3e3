from datetime import date, datetime, timedelta, timezone

from mindful.crud.user import crud_user
from mindful.services.affirmation import affirmation_service
from mindful.services.challenge import challenge_service
from mindful.services.llm import FALLBACK_AFFIRMATION, FALLBACK_CHALLENGE
from mindful.services.subscription import BASIC_AI_REQUESTS_LIMIT

GOAL = {
    "title": "Meditate",
    "category": "mindfulness",
    "target_value": 3,
    "frequency": "daily",
    "start_date": "2024-05-01T00:00:00",
}


# ---------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------

def test_create_and_list_goals(client, headers):
    created = client.post("/api/goals", json=GOAL, headers=headers)

    assert created.status_code == 201
    assert created.json()["current_value"] == 0
    assert created.json()["is_completed"] is False
    assert [g["title"] for g in client.get("/api/goals", headers=headers).json()] == ["Meditate"]


def test_invalid_frequency_is_rejected(client, headers):
    response = client.post("/api/goals", json={**GOAL, "frequency": "hourly"}, headers=headers)
    assert response.status_code == 422


def test_progress_completes_goal_at_target(client, headers):
    goal_id = client.post("/api/goals", json=GOAL, headers=headers).json()["id"]

    client.post(f"/api/goals/{goal_id}/progress", json={"value": 2}, headers=headers)
    client.post(f"/api/goals/{goal_id}/progress", json={"value": 1, "note": "done"}, headers=headers)

    goal = client.get("/api/goals", headers=headers).json()[0]
    assert goal["current_value"] == 3
    assert goal["is_completed"] is True
    history = client.get(f"/api/goals/{goal_id}/progress", headers=headers).json()
    assert [p["value"] for p in history] == [2, 1]


def test_update_goal(client, headers):
    goal_id = client.post("/api/goals", json=GOAL, headers=headers).json()["id"]

    response = client.put(f"/api/goals/{goal_id}", json={"title": "Meditate daily"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["title"] == "Meditate daily"
    assert response.json()["category"] == "mindfulness"


def test_goals_are_private(client, headers):
    from conftest import auth_headers, register

    goal_id = client.post("/api/goals", json=GOAL, headers=headers).json()["id"]
    bob = auth_headers(register(client, username="bob"))

    assert client.put(f"/api/goals/{goal_id}", json={"title": "x"}, headers=bob).status_code == 404
    assert client.get(f"/api/goals/{goal_id}/progress", headers=bob).status_code == 404


# ---------------------------------------------------------------------
# Daily challenges
# ---------------------------------------------------------------------

def test_today_challenge_is_generated_once(client, headers):
    first = client.get("/api/challenges/today", headers=headers)
    second = client.get("/api/challenges/today", headers=headers)

    assert first.status_code == 200
    assert first.json()["challenge"] == FALLBACK_CHALLENGE["challenge"]
    assert second.json()["id"] == first.json()["id"]

    status = client.get("/api/subscription", headers=headers).json()
    assert status["ai_requests_used"] == 1


def test_challenge_over_quota_is_rejected(client, headers, db, user_tokens):
    user = crud_user.get(db, id=user_tokens["user"]["id"])
    crud_user.set_ai_usage(db, user=user, count=BASIC_AI_REQUESTS_LIMIT, reset_date=date(2099, 1, 1))

    assert client.get("/api/challenges/today", headers=headers).status_code == 429


def test_completing_challenge_unlocks_achievement(client, headers):
    challenge_id = client.get("/api/challenges/today", headers=headers).json()["id"]

    completed = client.post(
        f"/api/challenges/{challenge_id}/complete",
        json={"reflection_note": "Felt lighter"},
        headers=headers,
    )

    assert completed.status_code == 200
    assert completed.json()["completed"] is True
    assert completed.json()["reflection_note"] == "Felt lighter"
    unlocked = client.get("/api/achievements/unlocked", headers=headers).json()
    assert [row["achievement"]["name"] for row in unlocked] == ["Challenge Accepted"]

    again = client.post(f"/api/challenges/{challenge_id}/complete", headers=headers)
    assert again.status_code == 409


def test_challenge_history_is_newest_first(client, headers, db, user_tokens):
    user = crud_user.get(db, id=user_tokens["user"]["id"])
    yesterday = challenge_service.get_today(db, user)
    yesterday.created_at = datetime.now(timezone.utc) - timedelta(days=1)
    db.commit()

    today = client.get("/api/challenges/today", headers=headers).json()
    history = client.get("/api/challenges/history", headers=headers).json()

    assert today["id"] != yesterday.id
    assert [c["id"] for c in history] == [today["id"], yesterday.id]


# ---------------------------------------------------------------------
# Affirmations
# ---------------------------------------------------------------------

def test_affirmation_falls_back_and_is_cached_for_the_day(client, headers):
    first = client.get("/api/affirmations/today", headers=headers).json()
    second = client.get("/api/affirmations/today", headers=headers).json()

    assert first["content"] == FALLBACK_AFFIRMATION
    assert second["id"] == first["id"]


def test_new_affirmation_on_a_new_day(db, client, user_tokens):
    user = crud_user.get(db, id=user_tokens["user"]["id"])
    first = affirmation_service.get_today(db, user)

    later = affirmation_service.get_today(db, user, today=first.created_at.date() + timedelta(days=1))

    assert later.id != first.id
