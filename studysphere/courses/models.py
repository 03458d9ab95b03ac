from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# ==================== ENUMS ====================

class UserRole(str, Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"

class QuizType(str, Enum):
    COURSE = "course"
    MODULE = "module"
    LESSON = "lesson"

class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    MULTIPLE_SELECT = "multiple-select"

class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DROPPED = "dropped"

class CertificateGrade(str, Enum):
    A_PLUS = "A+"
    A = "A"
    B_PLUS = "B+"
    B = "B"
    C_PLUS = "C+"
    C = "C"
    PASS = "Pass"

# ==================== QUIZ DRAFTS ====================

class OptionDraft(BaseModel):
    text: str
    is_correct: bool = False

class QuestionDraft(BaseModel):
    text: str
    type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: List[OptionDraft] = []
    correct_answer: str
    explanation: str = ""
    points: int = 1

class QuizDraft(BaseModel):
    title: str
    type: QuizType = QuizType.COURSE
    module_index: Optional[int] = None
    module_title: Optional[str] = None
    lesson_index: Optional[int] = None
    lesson_title: Optional[str] = None
    duration: int = 30
    passing_score: int = 70
    questions: List[QuestionDraft] = []

# ==================== CONTENT GENERATION REQUESTS ====================

class CourseTemplateRequest(BaseModel):
    templateType: str
    customization: Optional[Dict[str, Any]] = None

class AutoGenerateQuizRequest(BaseModel):
    courseId: str
    topic: str
    difficulty: str = "intermediate"
    questionCount: int = Field(10, ge=1, le=100)
    questionTypes: List[QuestionType] = [QuestionType.MULTIPLE_CHOICE]
    moduleIndex: Optional[int] = None
    lessonIndex: Optional[int] = None
