from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, field_validator, model_validator


class QuizQuestion(BaseModel):
    model_config = ConfigDict(extra="allow")

    question: StrictStr = Field(..., min_length=1, description="The text of the question.")
    options: List[StrictStr] = Field(..., min_length=4, max_length=4, description="Exactly four answer options.")
    correct: StrictInt = Field(..., ge=0, le=3, description="Index of the correct option.")
    explanation: Optional[str] = Field(None, description="Why the correct option is correct.")

    @field_validator("question")
    @classmethod
    def question_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("question must not be blank")
        return value

    @field_validator("options")
    @classmethod
    def options_distinct(cls, value: List[str]) -> List[str]:
        if len(set(value)) != len(value):
            raise ValueError("options must be distinct")
        return value


class QuizFeedbackItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    questionIndex: StrictInt
    isCorrect: StrictBool
    explanation: StrictStr


class QuizFeedback(BaseModel):
    model_config = ConfigDict(extra="allow")

    feedback: List[QuizFeedbackItem]
    totalScore: StrictStr
    suggestions: StrictStr


class AnsweredQuestion(BaseModel):
    question: str = Field(..., min_length=1)
    userAnswer: str = Field(..., description="Text of the option the user picked.")
    correctAnswer: str = Field(..., description="Text of the correct option.")
    isCorrect: bool


class QuizRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    difficulty: Optional[str] = None
    action: Literal["generate", "feedback"] = "generate"
    userAnswers: Optional[List[AnsweredQuestion]] = None

    @model_validator(mode="after")
    def check_mode_fields(self) -> "QuizRequest":
        if self.action == "generate" and not (self.difficulty and self.difficulty.strip()):
            raise ValueError("difficulty is required to generate a quiz")
        if self.action == "feedback" and not self.userAnswers:
            raise ValueError("userAnswers is required for feedback")
        return self
