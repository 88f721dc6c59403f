from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

OPTION_COUNT = 4


class Difficulty(str, Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class OptionDoc(BaseModel):
    """A single answer option; only display text is stored."""

    text: str


class QuestionBase(BaseModel):
    question: str
    options: List[OptionDoc]
    correct_index: int
    difficulty: Difficulty = Difficulty.easy
    explanation: Optional[str] = None


class QuestionCreate(QuestionBase):
    """Payload to add a question; the topic is created on first use."""

    topic: str


class QuestionUpdate(BaseModel):
    """Admin patch for a stored question."""

    question: Optional[str] = None
    options: Optional[List[OptionDoc]] = None
    correct_index: Optional[int] = None
    difficulty: Optional[Difficulty] = None
    explanation: Optional[str] = None


class QuestionDoc(QuestionBase):
    """Stored question, including the answer key."""

    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(extra="ignore")


class TopicResponse(BaseModel):
    topic: str
    is_active: bool = True
    questions: List[QuestionDoc] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(extra="ignore")


class TopicSummary(BaseModel):
    topic: str
    is_active: bool
    question_count: int


class TopicActivation(BaseModel):
    is_active: bool


class QuestionView(BaseModel):
    """Client-safe question: no answer key."""

    id: str
    topic: Optional[str] = None
    question: str
    options: List[OptionDoc]
    difficulty: Difficulty = Difficulty.easy
    explanation: Optional[str] = None
    model_config = ConfigDict(extra="ignore")


class MixedTestMeta(BaseModel):
    questions_per_topic: int
    topics_count: int
    total_questions: int


class TestInstance(BaseModel):
    topic: Optional[str] = None
    questions: List[QuestionView]
    meta: Optional[MixedTestMeta] = None
