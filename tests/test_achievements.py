from datetime import date, timedelta

from mindful.crud.achievement import crud_achievement
from mindful.crud.user import crud_user
from mindful.models.achievement import Achievement, AchievementKind
from mindful.schemas.user import UserCreate
from mindful.services.achievement import plan_unlocks
from mindful.services.streak import StreakEvaluator

TODAY = date(2024, 3, 1)


def catalog():
    return [
        Achievement(id=1, name="First Step", kind=AchievementKind.first_entry, threshold=1, level=1),
        Achievement(id=2, name="Getting Started", kind=AchievementKind.streak, threshold=3, level=1),
        Achievement(id=3, name="Week Warrior", kind=AchievementKind.streak, threshold=7, level=2),
        Achievement(id=4, name="Mindful Month", kind=AchievementKind.streak, threshold=30, level=3),
        Achievement(
            id=5, name="Challenge Accepted", kind=AchievementKind.challenges_completed, threshold=1, level=1
        ),
    ]


def unlocked_names(db, user_id):
    return {row.achievement.name for row in crud_achievement.get_unlocks_by_user(db, user_id=user_id)}


# ---------------------------------------------------------------------
# plan_unlocks
# ---------------------------------------------------------------------

def test_first_entry_unlocks_first_step_only():
    assert plan_unlocks(catalog(), set(), current_streak=1, entry_count=1) == [1]


def test_reaching_three_unlocks_getting_started():
    assert plan_unlocks(catalog(), {1}, current_streak=3, entry_count=3) == [2]


def test_crossing_thirty_catches_up_every_tier():
    assert plan_unlocks(catalog(), {1}, current_streak=30, entry_count=30) == [2, 3, 4]


def test_already_unlocked_tiers_are_not_repeated():
    assert plan_unlocks(catalog(), {1, 2, 3}, current_streak=8, entry_count=8) == []


def test_unevaluated_metrics_unlock_nothing():
    assert plan_unlocks(catalog(), set()) == []


def test_first_step_needs_exactly_one_entry():
    assert plan_unlocks(catalog(), set(), entry_count=2) == []


def test_completed_challenge_unlocks_challenge_achievement():
    assert plan_unlocks(catalog(), {1}, challenges_completed=1) == [5]


# ---------------------------------------------------------------------
# Unlocks through the evaluator
# ---------------------------------------------------------------------

def make_user(db):
    return crud_user.create(
        db,
        obj_in=UserCreate(
            username="achiever",
            email="achiever@example.com",
            password="password123",
            first_name="A",
            last_name="Chiever",
        ),
    )


def write_entry(db, user, day, evaluator):
    from mindful.crud.journal_entry import crud_journal_entry
    from mindful.schemas.journal_entry import EntryCreate

    crud_journal_entry.create(db, obj_in=EntryCreate(content=f"Entry for {day}", mood=3), user_id=user.id)
    return evaluator.record_entry(db, user.id, today=day)


def test_seven_consecutive_days_unlock_three_achievements_once(db):
    user = make_user(db)
    evaluator = StreakEvaluator()

    for offset in range(7):
        write_entry(db, user, TODAY + timedelta(days=offset), evaluator)
    # Extra entry on day 7 is a no-op for streak tiers
    write_entry(db, user, TODAY + timedelta(days=6), evaluator)

    assert unlocked_names(db, user.id) == {"First Step", "Getting Started", "Week Warrior"}
    assert len(crud_achievement.get_unlocked_ids(db, user_id=user.id)) == 3


def test_gap_after_ten_days_keeps_earned_achievements(db):
    user = make_user(db)
    evaluator = StreakEvaluator()

    for offset in range(10):
        write_entry(db, user, TODAY + timedelta(days=offset), evaluator)
    update = write_entry(db, user, TODAY + timedelta(days=13), evaluator)

    assert update.current_streak == 1
    assert update.longest_streak == 10
    assert update.unlocked == []
    assert unlocked_names(db, user.id) == {"First Step", "Getting Started", "Week Warrior"}


def test_catalog_seeding_is_idempotent(db):
    from mindful.services.achievement import achievement_service

    before = len(achievement_service.list_catalog(db))
    assert achievement_service.seed_catalog(db) == 0
    assert len(achievement_service.list_catalog(db)) == before


def test_achievement_endpoints(client, headers):
    response = client.post("/api/entries", json={"content": "Hello", "mood": 4}, headers=headers)
    assert response.status_code == 201

    catalog_response = client.get("/api/achievements", headers=headers)
    assert catalog_response.status_code == 200
    assert len(catalog_response.json()) == 5

    unlocked = client.get("/api/achievements/unlocked", headers=headers).json()
    assert [row["achievement"]["name"] for row in unlocked] == ["First Step"]

    streak = client.get("/api/streak", headers=headers).json()
    assert streak["current_streak"] == 1
    assert streak["longest_streak"] == 1


def test_day_thirty_persists_longest_and_unlocks_every_streak_tier(db):
    from mindful.crud.journal_entry import crud_journal_entry

    user = make_user(db)
    evaluator = StreakEvaluator()
    write_entry(db, user, TODAY - timedelta(days=1), evaluator)
    crud_user.update_streak(
        db, user=user, current_streak=29, longest_streak=29, last_entry_date=TODAY - timedelta(days=1)
    )

    update = write_entry(db, user, TODAY, evaluator)

    db.refresh(user)
    assert update.current_streak == 30
    assert (user.current_streak, user.longest_streak) == (30, 30)
    assert user.last_entry_date == TODAY
    assert crud_journal_entry.count_by_user(db, user_id=user.id) == 2
    assert unlocked_names(db, user.id) == {
        "First Step", "Getting Started", "Week Warrior", "Mindful Month"
    }


def test_applying_the_same_streak_twice_adds_no_rows(db):
    from mindful.services.achievement import achievement_service

    user = make_user(db)
    achievement_service.apply_unlocks(db, user.id, current_streak=7)
    second = achievement_service.apply_unlocks(db, user.id, current_streak=7)

    assert second == []
    assert len(crud_achievement.get_unlocked_ids(db, user_id=user.id)) == 2
