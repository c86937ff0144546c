import pytest

from academy.models import Chapter, QuizAttempt, UserXP


@pytest.fixture
def quiz_setup(client, db, make_course, admin_headers):
    """A course with one quiz of two single-answer questions worth 1 and 3 points."""

    def _quiz_setup(quiz_type="quiz", **quiz_fields):
        course = make_course()
        chapter = db.query(Chapter).filter(Chapter.course_id == course.id).one()
        payload = {"chapter_id": chapter.id, "title": "Basics check", "type": quiz_type}
        payload.update(quiz_fields)
        quiz = client.post("/quizzes/", json=payload, headers=admin_headers).json()

        questions = [
            client.post(
                f"/quizzes/{quiz['id']}/questions",
                json={
                    "question": "2 + 2?",
                    "options": ["3", "4"],
                    "correct_answers": ["4"],
                    "points": 1,
                },
                headers=admin_headers,
            ).json(),
            client.post(
                f"/quizzes/{quiz['id']}/questions",
                json={
                    "question": "Python is dynamically typed",
                    "question_type": "true_false",
                    "options": ["true", "false"],
                    "correct_answers": ["true"],
                    "points": 3,
                },
                headers=admin_headers,
            ).json(),
        ]
        return course, quiz, questions

    return _quiz_setup


def test_create_quiz_takes_course_from_chapter(quiz_setup):
    course, quiz, questions = quiz_setup()
    assert quiz["course_id"] == course.id
    assert quiz["is_active"] is True
    assert [q["points"] for q in questions] == [1, 3]


def test_question_answers_must_be_options(client, quiz_setup, admin_headers):
    _, quiz, _ = quiz_setup()
    response = client.post(
        f"/quizzes/{quiz['id']}/questions",
        json={"question": "?", "options": ["a", "b"], "correct_answers": ["c"]},
        headers=admin_headers,
    )
    assert response.status_code == 422


def test_quiz_requires_enrollment(client, quiz_setup, make_user, auth_headers):
    _, quiz, _ = quiz_setup()
    user = make_user()
    response = client.get(f"/quizzes/{quiz['id']}", headers=auth_headers(user))
    assert response.status_code == 403


def test_student_view_hides_answers(client, quiz_setup, make_user, enroll, auth_headers):
    course, quiz, _ = quiz_setup()
    user = make_user()
    enroll(user, course)

    data = client.get(f"/quizzes/{quiz['id']}", headers=auth_headers(user)).json()
    assert data["total_points"] == 4
    assert len(data["questions"]) == 2
    assert all("correct_answers" not in q for q in data["questions"])


def test_submit_grades_and_awards_xp_once(
    client, db, quiz_setup, make_user, enroll, auth_headers
):
    course, quiz, questions = quiz_setup(passing_marks=70)
    user = make_user()
    enroll(user, course)
    headers = auth_headers(user)
    url = f"/quizzes/{quiz['id']}/submit"
    first_id, second_id = str(questions[0]["id"]), str(questions[1]["id"])

    failed = client.post(
        url, json={"answers": {first_id: "4", second_id: "false"}}, headers=headers
    ).json()
    assert failed["attempt"]["score"] == 1
    assert failed["attempt"]["percentage"] == 25
    assert failed["passed"] is False
    assert failed["xp"] is None

    passed = client.post(
        url, json={"answers": {first_id: "4", second_id: "true"}}, headers=headers
    ).json()
    assert passed["attempt"]["percentage"] == 100
    assert passed["attempt"]["status"] == "completed"
    assert passed["passed"] is True
    assert passed["xp"]["xp_gained"] == 25

    again = client.post(
        url, json={"answers": {first_id: "4", second_id: "true"}}, headers=headers
    ).json()
    assert again["passed"] is True
    assert again["xp"] is None

    db.expire_all()
    assert db.query(UserXP).filter(UserXP.user_id == user.id).one().quizzes_passed == 1
    attempts = client.get(f"/quizzes/{quiz['id']}/attempts", headers=headers).json()
    assert len(attempts) == 3


def test_max_attempts(client, quiz_setup, make_user, enroll, auth_headers):
    course, quiz, _ = quiz_setup(max_attempts=1)
    user = make_user()
    enroll(user, course)
    headers = auth_headers(user)
    url = f"/quizzes/{quiz['id']}/submit"

    assert client.post(url, json={"answers": {}}, headers=headers).status_code == 200
    response = client.post(url, json={"answers": {}}, headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Maximum attempts reached"


def test_assignment_is_graded_by_admin(
    client, db, quiz_setup, make_user, enroll, auth_headers, admin_headers
):
    course, quiz, _ = quiz_setup(quiz_type="assignment")
    user = make_user()
    enroll(user, course)

    submitted = client.post(
        f"/quizzes/{quiz['id']}/submit",
        json={"answers": {"essay": "my answer"}},
        headers=auth_headers(user),
    ).json()
    assert submitted["attempt"]["status"] == "submitted"
    assert submitted["passed"] is False

    attempt_id = submitted["attempt"]["id"]
    too_high = client.post(
        f"/quizzes/attempts/{attempt_id}/grade",
        json={"score": 120, "total_points": 100},
        headers=admin_headers,
    )
    assert too_high.status_code == 400

    graded = client.post(
        f"/quizzes/attempts/{attempt_id}/grade",
        json={"score": 80, "total_points": 100, "feedback": "Good"},
        headers=admin_headers,
    ).json()
    assert graded["status"] == "graded"
    assert graded["percentage"] == 80
    assert graded["is_passed"] is True

    db.expire_all()
    assert db.get(QuizAttempt, attempt_id).feedback == "Good"
    assert db.query(UserXP).filter(UserXP.user_id == user.id).one().quizzes_passed == 1


def test_quiz_results_show_on_dashboard(
    client, quiz_setup, make_user, enroll, auth_headers
):
    course, quiz, questions = quiz_setup()
    user = make_user()
    enroll(user, course)
    headers = auth_headers(user)
    client.post(
        f"/quizzes/{quiz['id']}/submit",
        json={"answers": {str(questions[1]["id"]): "true"}},
        headers=headers,
    )

    dashboard = client.get(
        f"/progress/dashboard?course_id={course.id}", headers=headers
    ).json()
    assert dashboard["summary"]["total_quizzes"] == 1
    assert dashboard["summary"]["passed_quizzes"] == 1
    assert dashboard["summary"]["average_quiz_score"] == 75
    assert dashboard["quiz_performance"][0]["score"] == 75
    assert dashboard["quiz_performance"][0]["quiz_title"] == "Basics check"
