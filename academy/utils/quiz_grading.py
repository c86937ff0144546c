import math
from typing import Dict, Iterable, List, Tuple


def _normalize(answer) -> List[str]:
    if answer is None:
        return []
    if isinstance(answer, (list, tuple, set)):
        return [str(a).strip() for a in answer]
    return [str(answer).strip()]


def is_answer_correct(question_type: str, correct_answers, given) -> bool:
    correct = _normalize(correct_answers)
    answers = _normalize(given)
    if not correct or not answers:
        return False

    if question_type == "multiple_correct":
        return len(correct) == len(answers) and set(correct) == set(answers)

    # single_correct and true_false
    return len(answers) == 1 and answers[0] == correct[0]


def grade_answers(questions: Iterable, answers: Dict[str, object]) -> Tuple[int, int, int]:
    """
    Grade submitted answers against quiz questions.

    ``answers`` maps question id (as a string) to the chosen option or list of
    options. Returns (score, total_points, percentage).
    """
    answers = {str(k): v for k, v in (answers or {}).items()}
    score = 0
    total_points = 0

    for question in questions:
        points = question.points or 0
        total_points += points
        if is_answer_correct(
            question.question_type,
            question.correct_answers,
            answers.get(str(question.id)),
        ):
            score += points

    return score, total_points, percentage_of(score, total_points)


def percentage_of(score: int, total_points: int) -> int:
    if not total_points or total_points <= 0:
        return 0
    return min(100, max(0, math.floor(score / total_points * 100 + 0.5)))
