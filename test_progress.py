from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from academy.core.decorator import DataUnavailableException, NotFoundException
from academy.models import TextLecture, TextLectureProgress, Video, VideoProgress
from academy.services.progress import ProgressService, compute_progress
from academy.utils.progress import (
    content_key,
    next_streak,
    progress_percentage,
    watch_percentage,
)

# ==================== Pure helpers ====================


def test_progress_percentage_without_units_is_zero():
    assert progress_percentage(0, 0) == 0
    assert progress_percentage(3, 0) == 0


@pytest.mark.parametrize(
    "completed, total, expected",
    [(3, 5, 60), (1, 3, 33), (2, 3, 67), (1, 8, 13), (1, 40, 3), (5, 5, 100)],
)
def test_progress_percentage_rounds_half_up(completed, total, expected):
    assert progress_percentage(completed, total) == expected


def test_progress_percentage_is_clamped():
    assert progress_percentage(7, 5) == 100
    assert progress_percentage(-1, 5) == 0


def test_watch_percentage():
    assert watch_percentage(85, 100) == 85.0
    assert watch_percentage(250, 100) == 100.0
    assert watch_percentage(10, 0) == 0.0


def test_content_key():
    assert content_key("video", 12) == "video:12"
    assert content_key("text_lecture", 3) == "text_lecture:3"


def test_next_streak():
    today = date(2026, 3, 10)
    assert next_streak(0, None, today) == 1
    assert next_streak(4, date(2026, 3, 10), today) == 4
    assert next_streak(4, date(2026, 3, 9), today) == 5
    assert next_streak(4, date(2026, 3, 7), today) == 1


# ==================== compute_progress ====================


def complete_videos(db, user, course, count):
    videos = db.query(Video).filter(Video.course_id == course.id).order_by(Video.id).all()
    for video in videos[:count]:
        db.add(
            VideoProgress(
                user_id=user.id,
                video_id=video.id,
                course_id=course.id,
                watch_time=100,
                duration=100,
                completed=True,
                completed_at=datetime.utcnow(),
            )
        )
    db.commit()
    return videos


def test_missing_course_raises_not_found(db, make_user):
    user = make_user()
    with pytest.raises(NotFoundException):
        compute_progress(db, user.id, 999)


def test_course_without_content_is_zero(db, make_user, make_course):
    user = make_user()
    course = make_course()
    assert compute_progress(db, user.id, course.id) == 0


def test_three_of_five_units_is_sixty(db, make_user, make_course):
    user = make_user()
    course = make_course(videos=5)
    complete_videos(db, user, course, 3)
    assert compute_progress(db, user.id, course.id) == 60


def test_videos_and_text_lectures_both_count(db, make_user, make_course):
    user = make_user()
    course = make_course(videos=2, lectures=2)
    complete_videos(db, user, course, 1)
    assert compute_progress(db, user.id, course.id) == 25


def test_incomplete_records_do_not_count(db, make_user, make_course):
    user = make_user()
    course = make_course(videos=2)
    video = db.query(Video).filter(Video.course_id == course.id).first()
    db.add(
        VideoProgress(
            user_id=user.id,
            video_id=video.id,
            course_id=course.id,
            watch_time=10,
            duration=100,
            completed=False,
        )
    )
    db.commit()
    assert compute_progress(db, user.id, course.id) == 0


def test_other_users_progress_is_ignored(db, make_user, make_course):
    user = make_user()
    other = make_user()
    course = make_course(videos=4)
    complete_videos(db, other, course, 4)
    assert compute_progress(db, user.id, course.id) == 0
    assert compute_progress(db, other.id, course.id) == 100


def test_deleted_units_stop_counting(db, make_user, make_course):
    user = make_user()
    course = make_course(videos=3)
    videos = complete_videos(db, user, course, 2)

    # remove a video the user never completed
    db.delete(videos[2])
    db.commit()
    assert compute_progress(db, user.id, course.id) == 100


def test_failed_query_raises_data_unavailable():
    broken_engine = create_engine("sqlite:////nonexistent-dir/academy.db")
    session = sessionmaker(bind=broken_engine)()
    try:
        with pytest.raises(DataUnavailableException):
            compute_progress(session, 1, 1)
    finally:
        session.close()


# ==================== Dashboard ====================


def test_dashboard_without_enrollments_is_zeroed(db, make_user):
    user = make_user()
    dashboard = ProgressService(db).get_dashboard(user.id, "all")
    summary = dashboard["summary"]
    assert summary["course_title"] == "All Courses"
    assert "total_lectures" not in summary
    assert dashboard["lecture_chart"] == {"completed": 0, "remaining": 0}
    assert dashboard["quiz_performance"] == []


def test_dashboard_counts_lectures(db, make_user, make_course, enroll):
    user = make_user()
    course = make_course(videos=2, lectures=2)
    enrollment = enroll(user, course)
    complete_videos(db, user, course, 1)
    lecture = db.query(TextLecture).filter(TextLecture.course_id == course.id).first()
    db.add(
        TextLectureProgress(
            user_id=user.id,
            text_lecture_id=lecture.id,
            course_id=course.id,
            completed=True,
        )
    )
    enrollment.progress = 50
    db.commit()

    dashboard = ProgressService(db).get_dashboard(user.id, str(course.id))
    summary = dashboard["summary"]
    assert summary["course_title"] == "Python Basics"
    assert summary["total_lectures"] == 4
    assert summary["completed_lectures"] == 2
    assert summary["lecture_completion_percentage"] == 50
    assert summary["overall_completion_percentage"] == 50
    assert dashboard["lecture_chart"] == {"completed": 2, "remaining": 2}
