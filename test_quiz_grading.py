from types import SimpleNamespace

from academy.utils.quiz_grading import grade_answers, is_answer_correct, percentage_of


def question(id, question_type, correct, points=1):
    return SimpleNamespace(
        id=id, question_type=question_type, correct_answers=correct, points=points
    )


def test_single_correct():
    assert is_answer_correct("single_correct", ["B"], "B")
    assert is_answer_correct("single_correct", ["B"], ["B"])
    assert not is_answer_correct("single_correct", ["B"], "A")
    assert not is_answer_correct("single_correct", ["B"], ["B", "A"])


def test_true_false():
    assert is_answer_correct("true_false", ["True"], "True")
    assert not is_answer_correct("true_false", ["True"], "False")


def test_multiple_correct_needs_exact_set():
    assert is_answer_correct("multiple_correct", ["A", "C"], ["C", "A"])
    assert not is_answer_correct("multiple_correct", ["A", "C"], ["A"])
    assert not is_answer_correct("multiple_correct", ["A", "C"], ["A", "C", "D"])
    assert not is_answer_correct("multiple_correct", ["A", "C"], ["A", "A"])


def test_missing_answer_is_wrong():
    assert not is_answer_correct("single_correct", ["A"], None)
    assert not is_answer_correct("multiple_correct", ["A"], [])


def test_grade_answers_sums_points():
    questions = [
        question(1, "single_correct", ["A"], points=2),
        question(2, "multiple_correct", ["A", "B"], points=3),
        question(3, "true_false", ["False"], points=5),
    ]
    answers = {"1": "A", "2": ["B", "A"], "3": "True"}
    assert grade_answers(questions, answers) == (5, 10, 50)


def test_grade_answers_accepts_int_keys():
    questions = [question(7, "single_correct", ["X"])]
    assert grade_answers(questions, {7: "X"}) == (1, 1, 100)


def test_no_points_gives_zero_percentage():
    assert grade_answers([], {}) == (0, 0, 0)
    assert percentage_of(0, 0) == 0


def test_percentage_rounds_half_up():
    assert percentage_of(1, 8) == 13
    assert percentage_of(2, 3) == 67
    assert percentage_of(1, 3) == 33
