# academy/schemas/quiz.py
from datetime import datetime
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from academy.schemas.gamification import XPAward

QuestionType = Literal["single_correct", "multiple_correct", "true_false"]


class QuizCreate(BaseModel):
    chapter_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type: Literal["quiz", "assignment"] = "quiz"
    time_limit: Optional[int] = Field(None, ge=1)
    max_attempts: Optional[int] = Field(None, ge=1)
    passing_marks: int = Field(50, ge=0, le=100)
    order: int = Field(1, ge=0)


class QuizQuestionCreate(BaseModel):
    question: str = Field(..., min_length=1)
    question_type: QuestionType = "single_correct"
    points: int = Field(1, ge=0)
    options: List[str] = Field(..., min_length=2)
    correct_answers: List[str] = Field(..., min_length=1)
    order: int = 0

    @model_validator(mode="after")
    def check_answers(self):
        missing = [a for a in self.correct_answers if a not in self.options]
        if missing:
            raise ValueError(f"Correct answers not in options: {missing}")
        if self.question_type != "multiple_correct" and len(self.correct_answers) != 1:
            raise ValueError(f"{self.question_type} questions need exactly one answer")
        return self


class QuizQuestionPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    question: str
    question_type: str
    points: int
    options: List[str]
    order: int


class QuizQuestionResponse(QuizQuestionPublic):
    correct_answers: List[str]


class QuizResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    chapter_id: int
    course_id: int
    title: str
    description: Optional[str] = None
    type: str
    time_limit: Optional[int] = None
    max_attempts: Optional[int] = None
    passing_marks: int
    is_active: bool
    order: int


class QuizDetailResponse(QuizResponse):
    questions: List[QuizQuestionPublic] = []
    total_points: int = 0


class QuizSubmitRequest(BaseModel):
    # question id -> chosen option(s)
    answers: Dict[str, Union[str, List[str]]] = Field(default_factory=dict)


class QuizGradeRequest(BaseModel):
    score: int = Field(..., ge=0)
    total_points: int = Field(100, ge=1)
    feedback: Optional[str] = None


class QuizAttemptResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    quiz_id: int
    user_id: int
    course_id: int
    score: int
    total_points: int
    percentage: int
    is_passed: bool
    status: str
    feedback: Optional[str] = None
    submitted_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None


class QuizSubmitResponse(BaseModel):
    attempt: QuizAttemptResponse
    passed: bool
    xp: Optional[XPAward] = None
