# academy/schemas/progress.py
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel


class CourseProgress(BaseModel):
    course_id: int
    progress: int
    total_units: int
    completed_units: int


class DashboardSummary(BaseModel):
    user_id: int
    course_id: Union[int, str]
    course_title: str
    total_lectures: int = 0
    completed_lectures: int = 0
    lecture_completion_percentage: int = 0
    total_assignments: int = 0
    submitted_assignments: int = 0
    average_assignment_score: int = 0
    total_quizzes: int = 0
    completed_quizzes: int = 0
    passed_quizzes: int = 0
    average_quiz_score: int = 0
    overall_completion_percentage: int = 0
    last_activity_date: Optional[datetime] = None
    current_streak: int = 0


class QuizPerformancePoint(BaseModel):
    attempt: str
    score: int
    date: Optional[datetime] = None
    quiz_title: str


class ProgressDashboard(BaseModel):
    summary: DashboardSummary
    lecture_chart: dict
    quiz_performance: List[QuizPerformancePoint] = []
