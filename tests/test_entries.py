import json

import httpx
from sqlalchemy.exc import OperationalError

from conftest import auth_headers, register
from mindful.crud.user import crud_user
from mindful.services.journal import journal_service
from mindful.services.llm import FALLBACK_INSIGHT, LLMClient
from mindful.services.subscription import subscription_service


def create_entry(client, headers, content="Felt calm after a walk.", mood=4, **extra):
    return client.post("/api/entries", json={"content": content, "mood": mood, **extra}, headers=headers)


def test_create_entry_without_provider_stores_neutral_analysis(client, headers):
    response = create_entry(client, headers, tags=["walk"])

    assert response.status_code == 201
    body = response.json()
    assert body["tags"] == ["walk"]
    assert body["analysis"]["sentiment"] == {"score": 3.0, "label": "neutral"}
    assert body["analysis"]["insights"] == FALLBACK_INSIGHT


def test_create_entry_updates_streak(client, headers):
    create_entry(client, headers)
    create_entry(client, headers, content="Second note today")

    me = client.get("/auth/me", headers=headers).json()
    assert me["current_streak"] == 1
    assert me["longest_streak"] == 1
    assert me["last_entry_date"] is not None


def test_mood_must_be_between_one_and_five(client, headers):
    assert create_entry(client, headers, mood=0).status_code == 422
    assert create_entry(client, headers, mood=6).status_code == 422


def test_entries_require_authentication(client):
    response = client.get("/api/entries")
    assert response.status_code in (401, 403)


def test_list_is_newest_first_and_scoped_to_owner(client, headers):
    create_entry(client, headers, content="first")
    create_entry(client, headers, content="second")
    other = auth_headers(register(client, username="bob"))
    create_entry(client, other, content="bob's entry")

    entries = client.get("/api/entries", headers=headers).json()
    assert [e["content"] for e in entries] == ["second", "first"]


def test_other_users_entries_are_not_found(client, headers):
    entry_id = create_entry(client, headers).json()["id"]
    other = auth_headers(register(client, username="bob"))

    assert client.get(f"/api/entries/{entry_id}", headers=other).status_code == 404
    assert client.put(f"/api/entries/{entry_id}", json={"mood": 1}, headers=other).status_code == 404


def test_update_entry_does_not_touch_streak(client, headers, db, user_tokens):
    entry_id = create_entry(client, headers).json()["id"]
    user = crud_user.get(db, id=user_tokens["user"]["id"])
    db.refresh(user)
    before = (user.current_streak, user.longest_streak, user.last_entry_date)

    response = client.put(
        f"/api/entries/{entry_id}", json={"content": "Edited", "tags": ["edit"]}, headers=headers
    )

    assert response.status_code == 200
    assert response.json()["content"] == "Edited"
    db.refresh(user)
    assert (user.current_streak, user.longest_streak, user.last_entry_date) == before


def test_evaluator_store_failure_still_returns_entry(client, headers, monkeypatch):
    class BrokenEvaluator:
        def record_entry(self, db, user_id, today=None):
            raise OperationalError("UPDATE users", {}, Exception("database is locked"))

    monkeypatch.setattr(journal_service, "evaluator", BrokenEvaluator())

    response = create_entry(client, headers)

    assert response.status_code == 201
    assert response.json()["content"] == "Felt calm after a walk."
    assert len(client.get("/api/entries", headers=headers).json()) == 1


def test_analysis_uses_provider_response(client, headers, monkeypatch):
    analysis = {
        "sentiment": {"score": 4.5, "label": "positive"},
        "themes": ["nature"],
        "insights": "Walking helps you.",
        "recommendations": [{"activity": "Walk again", "reason": "It worked"}],
    }
    requests = []

    def handler(request):
        requests.append(json.loads(request.content))
        return httpx.Response(
            200, json={"choices": [{"message": {"content": json.dumps(analysis)}}]}
        )

    client_with_transport = LLMClient(
        api_url="https://llm.test/v1/chat/completions",
        api_key="test-key",
        model="test-model",
        transport=httpx.MockTransport(handler),
    )
    monkeypatch.setattr(journal_service, "llm", client_with_transport)

    body = create_entry(client, headers).json()

    assert body["analysis"]["sentiment"]["label"] == "positive"
    assert body["analysis"]["themes"] == ["nature"]
    assert requests[0]["model"] == "test-model"
    assert requests[0]["response_format"] == {"type": "json_object"}


def test_provider_error_falls_back_to_neutral():
    llm = LLMClient(
        api_url="https://llm.test/v1/chat/completions",
        api_key="test-key",
        model="test-model",
        transport=httpx.MockTransport(lambda request: httpx.Response(500, json={"error": "boom"})),
    )

    result = llm.analyze_entry("Rough day", 2)

    assert result["sentiment"] == {"score": 3, "label": "neutral"}


def test_malformed_provider_json_falls_back_to_neutral():
    llm = LLMClient(
        api_url="https://llm.test/v1/chat/completions",
        api_key="test-key",
        model="test-model",
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"choices": [{"message": {"content": "not json"}}]})
        ),
    )

    assert llm.analyze_entry("Rough day", 2)["sentiment"]["label"] == "neutral"


def mock_llm(payload):
    return LLMClient(
        api_url="https://llm.test/v1/chat/completions",
        api_key="test-key",
        model="test-model",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)),
    )


def test_non_text_provider_content_falls_back_and_still_counts_streak(client, headers, monkeypatch):
    monkeypatch.setattr(
        journal_service, "llm", mock_llm({"choices": [{"message": {"content": {"sentiment": 4}}}]})
    )

    response = create_entry(client, headers)

    assert response.status_code == 201
    assert response.json()["analysis"]["sentiment"]["label"] == "neutral"
    assert client.get("/api/streak", headers=headers).json()["current_streak"] == 1


def test_malformed_choice_shapes_fall_back_to_neutral():
    for payload in (
        {"choices": ["not a dict"]},
        {"choices": {"message": "x"}},
        {"choices": [{"message": "plain string"}]},
    ):
        assert mock_llm(payload).analyze_entry("Rough day", 2)["sentiment"]["label"] == "neutral"


def test_quota_store_failure_still_runs_evaluator(client, headers, monkeypatch):
    def broken_quota(db, user, today=None):
        raise OperationalError("UPDATE users", {}, Exception("database is locked"))

    monkeypatch.setattr(subscription_service, "consume_ai_request", broken_quota)

    response = create_entry(client, headers)

    assert response.status_code == 201
    assert response.json()["analysis"]["sentiment"]["label"] == "neutral"
    assert client.get("/api/streak", headers=headers).json()["current_streak"] == 1
    unlocked = client.get("/api/achievements/unlocked", headers=headers).json()
    assert [row["achievement"]["name"] for row in unlocked] == ["First Step"]


def test_unexpected_evaluator_error_still_returns_entry(client, headers, monkeypatch):
    class FailingEvaluator:
        def record_entry(self, db, user_id, today=None):
            raise RuntimeError("unexpected")

    monkeypatch.setattr(journal_service, "evaluator", FailingEvaluator())

    response = create_entry(client, headers)

    assert response.status_code == 201
    assert len(client.get("/api/entries", headers=headers).json()) == 1
