from datetime import datetime


def test_analytics_requires_admin(client, make_user, auth_headers):
    assert client.get("/analytics/platform").status_code == 401
    assert (
        client.get("/analytics/platform", headers=auth_headers(make_user())).status_code
        == 403
    )


def test_platform_analytics(client, make_user, make_course, enroll, admin_headers):
    course = make_course(videos=2, lectures=1)
    enroll(make_user(), course)
    make_user()

    data = client.get("/analytics/platform", headers=admin_headers).json()
    assert data["total_users"] == 2
    assert data["total_courses"] == 1
    assert data["total_enrollments"] == 1
    assert data["total_videos"] == 2
    assert data["total_text_lectures"] == 1
    assert data["total_coupon_redemptions"] == 0


def test_course_stats(client, db, make_user, make_course, enroll, admin_headers):
    popular = make_course()
    make_course()

    finished = enroll(make_user(), popular)
    finished.progress = 100
    finished.completed_at = datetime.utcnow()
    halfway = enroll(make_user(), popular)
    halfway.progress = 50
    db.commit()

    data = client.get("/analytics/courses", headers=admin_headers).json()
    assert data["courses_count"] == 2
    assert data["students_count"] == 2

    stats = {c["course_id"]: c for c in data["courses"]}
    assert stats[popular.id]["students_count"] == 2
    assert stats[popular.id]["completed_count"] == 1
    assert stats[popular.id]["average_progress"] == 75.0
    empty = [c for c in data["courses"] if c["course_id"] != popular.id][0]
    assert empty["students_count"] == 0
    assert empty["average_progress"] == 0.0
