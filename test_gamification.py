from datetime import date

from academy.models import Badge, User, UserBadge, UserXP
from academy.services.gamification import DEFAULT_BADGES, GamificationService


def add_badge(db, name, requirement_type, requirement_value, xp_reward, sort_order=1):
    badge = Badge(
        name=name,
        description=name,
        requirement_type=requirement_type,
        requirement_value=requirement_value,
        xp_reward=xp_reward,
        sort_order=sort_order,
        is_active=True,
    )
    db.add(badge)
    db.commit()
    return badge


# ==================== XP and streaks ====================


def test_award_xp_creates_totals(db, make_user):
    user = make_user()
    service = GamificationService(db)

    result = service.award_xp(user.id, 120, "manual", today=date(2026, 5, 1))
    db.commit()

    assert result["xp_gained"] == 120
    assert result["total_xp"] == 120
    assert result["old_level"] == 1
    assert result["new_level"] == 2
    assert result["leveled_up"] is True
    assert result["streak"] == 1
    assert result["new_badges"] == []


def test_streak_grows_on_consecutive_days(db, make_user):
    user = make_user()
    service = GamificationService(db)

    service.award_xp(user.id, 10, "video_complete", today=date(2026, 5, 1))
    service.award_xp(user.id, 10, "video_complete", today=date(2026, 5, 1))
    service.award_xp(user.id, 10, "video_complete", today=date(2026, 5, 2))
    result = service.award_xp(user.id, 10, "video_complete", today=date(2026, 5, 3))
    db.commit()

    assert result["streak"] == 3
    user_xp = db.query(UserXP).filter(UserXP.user_id == user.id).one()
    assert user_xp.longest_streak == 3
    assert user_xp.last_activity_date == date(2026, 5, 3)


def test_gap_resets_streak_but_keeps_longest(db, make_user):
    user = make_user()
    service = GamificationService(db)

    service.award_xp(user.id, 10, "video_complete", today=date(2026, 5, 1))
    service.award_xp(user.id, 10, "video_complete", today=date(2026, 5, 2))
    result = service.award_xp(user.id, 10, "video_complete", today=date(2026, 5, 5))
    db.commit()

    assert result["streak"] == 1
    user_xp = db.query(UserXP).filter(UserXP.user_id == user.id).one()
    assert user_xp.longest_streak == 2


def test_first_course_gets_bonus(db, make_user):
    user = make_user()
    service = GamificationService(db)

    first = service.record_course_complete(user.id)
    second = service.record_course_complete(user.id)
    db.commit()

    assert first["xp_gained"] == 150
    assert second["xp_gained"] == 100
    user_xp = db.query(UserXP).filter(UserXP.user_id == user.id).one()
    assert user_xp.courses_completed == 2
    assert user_xp.total_xp == 250


def test_counters_are_incremented(db, make_user):
    user = make_user()
    service = GamificationService(db)

    service.record_video_complete(user.id)
    service.record_video_complete(user.id)
    service.record_quiz_pass(user.id)
    db.commit()

    user_xp = db.query(UserXP).filter(UserXP.user_id == user.id).one()
    assert user_xp.videos_completed == 2
    assert user_xp.quizzes_passed == 1
    assert user_xp.total_xp == 45


# ==================== Badges ====================


def test_badge_reward_is_added_once(db, make_user):
    user = make_user()
    add_badge(db, "First Steps", "videos_completed", 1, 10)
    service = GamificationService(db)

    first = service.record_video_complete(user.id)
    second = service.record_video_complete(user.id)
    db.commit()

    assert first["new_badges"] == ["First Steps"]
    assert first["total_xp"] == 20
    assert second["new_badges"] == []
    assert second["total_xp"] == 30
    assert db.query(UserBadge).filter(UserBadge.user_id == user.id).count() == 1


def test_badge_reward_can_unlock_level_badge(db, make_user):
    user = make_user()
    add_badge(db, "A", "videos_completed", 1, 590, sort_order=1)
    add_badge(db, "B", "level", 4, 0, sort_order=2)
    service = GamificationService(db)

    result = service.record_video_complete(user.id)
    db.commit()

    assert result["new_badges"] == ["A", "B"]
    assert result["total_xp"] == 600
    assert result["new_level"] == 4


def test_inactive_badges_are_not_awarded(db, make_user):
    user = make_user()
    badge = add_badge(db, "Hidden", "videos_completed", 1, 10)
    badge.is_active = False
    db.commit()

    result = GamificationService(db).record_video_complete(user.id)
    assert result["new_badges"] == []


def test_initialize_badges_is_idempotent(db):
    service = GamificationService(db)
    assert service.initialize_badges() == len(DEFAULT_BADGES) == 12
    assert service.initialize_badges() == 0
    assert db.query(Badge).count() == 12


def test_user_badges_mark_earned(db, make_user):
    user = make_user()
    service = GamificationService(db)
    service.initialize_badges()
    service.record_video_complete(user.id)
    db.commit()

    badges = {b["name"]: b for b in service.get_user_badges(user.id)}
    assert badges["First Steps"]["earned"] is True
    assert badges["First Steps"]["earned_at"] is not None
    assert badges["Graduate"]["earned"] is False


# ==================== Queries ====================


def test_stats_without_activity(db, make_user):
    user = make_user()
    stats = GamificationService(db).get_stats(user.id)
    assert stats["total_xp"] == 0
    assert stats["level"] == 1
    assert stats["next_level_xp"] == 100
    assert stats["xp_to_next_level"] == 100
    assert stats["progress_to_next_level"] == 0


def test_stats_level_progress(db, make_user):
    user = make_user()
    service = GamificationService(db)
    service.award_xp(user.id, 150, "manual")
    db.commit()

    stats = service.get_stats(user.id)
    assert stats["level"] == 2
    assert stats["current_level_xp"] == 100
    assert stats["next_level_xp"] == 300
    assert stats["progress_to_next_level"] == 25
    assert stats["xp_to_next_level"] == 150


def test_leaderboard_orders_by_xp(db, make_user):
    alice = make_user(full_name="Alice")
    bob = make_user(full_name="Bob")
    carol = make_user(full_name="Carol")
    service = GamificationService(db)
    service.award_xp(alice.id, 50, "manual")
    service.award_xp(bob.id, 300, "manual")
    service.award_xp(carol.id, 120, "manual")
    db.commit()

    board = service.get_leaderboard(limit=2, current_user_id=alice.id)

    assert [row["full_name"] for row in board["leaderboard"]] == ["Bob", "Carol"]
    assert [row["rank"] for row in board["leaderboard"]] == [1, 2]
    assert board["current_user_rank"] == 3


def test_leaderboard_skips_inactive_users(db, make_user):
    active = make_user(full_name="Active")
    banned = make_user(full_name="Banned")
    service = GamificationService(db)
    service.award_xp(active.id, 10, "manual")
    service.award_xp(banned.id, 500, "manual")
    db.query(User).filter(User.id == banned.id).update({User.is_active: False})
    db.commit()

    board = service.get_leaderboard(current_user_id=active.id)
    assert [row["full_name"] for row in board["leaderboard"]] == ["Active"]
    assert board["leaderboard"][0]["is_current_user"] is True


def test_leaderboard_rank_without_xp(db, make_user):
    user = make_user()
    board = GamificationService(db).get_leaderboard(current_user_id=user.id)
    assert board["leaderboard"] == []
    assert board["current_user_rank"] is None


def test_reset_stale_streaks(db, make_user):
    fresh = make_user()
    stale = make_user()
    service = GamificationService(db)
    service.award_xp(fresh.id, 10, "manual", today=date(2026, 5, 9))
    service.award_xp(stale.id, 10, "manual", today=date(2026, 5, 7))
    db.commit()

    assert service.reset_stale_streaks(today=date(2026, 5, 10)) == 1

    db.expire_all()
    streaks = {
        x.user_id: (x.current_streak, x.longest_streak) for x in db.query(UserXP).all()
    }
    assert streaks[fresh.id] == (1, 1)
    assert streaks[stale.id] == (0, 1)


# ==================== API ====================


def test_stats_endpoint_requires_login(client):
    response = client.get("/gamification/stats")
    assert response.status_code == 401


def test_stats_endpoint(client, db, make_user, auth_headers):
    user = make_user()
    GamificationService(db).award_xp(user.id, 150, "manual")
    db.commit()

    response = client.get("/gamification/stats", headers=auth_headers(user))
    assert response.status_code == 200
    assert response.json()["total_xp"] == 150
    assert response.json()["level"] == 2


def test_initialize_badges_endpoint_is_admin_only(client, make_user, auth_headers, admin_headers):
    user = make_user()
    assert (
        client.post("/gamification/badges/initialize", headers=auth_headers(user)).status_code
        == 403
    )

    response = client.post("/gamification/badges/initialize", headers=admin_headers)
    assert response.status_code == 200
    badges = client.get("/gamification/badges", headers=auth_headers(user)).json()
    assert len(badges) == 12
