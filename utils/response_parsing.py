import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from models.quiz_models import QuizFeedback, QuizFeedbackItem, QuizQuestion
from models.schedule_models import Schedule, ScheduleBlock
from utils.errors import AppError, ParseError, ShapeError


T = TypeVar("T")

QUIZ_QUESTION_COUNT = 5

_OPENING_FENCE = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\n?```$")
_SUMMARY_PREAMBLE = re.compile(r"^(?:summary|here's a summary):?\s*", re.IGNORECASE)


def normalize(raw: str) -> str:
    """
    Strip markdown code fences (```json / ```) and surrounding whitespace
    from model output. Does not try to repair the JSON inside.
    """
    text = raw.strip()
    while True:
        cleaned = _CLOSING_FENCE.sub("", _OPENING_FENCE.sub("", text)).strip()
        if cleaned == text:
            return cleaned
        text = cleaned


def clean_summary(raw: str) -> str:
    """Drop fences and "Summary:" style preambles from a summary."""
    text = normalize(raw).replace("```", "")
    while True:
        cleaned = _SUMMARY_PREAMBLE.sub("", text).strip()
        if cleaned == text:
            return cleaned
        text = cleaned


@dataclass
class ParseResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[AppError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value


@dataclass(frozen=True)
class ResponseShape(Generic[T]):
    name: str
    check: Callable[[Any], T]


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "value"
    return f"{location}: {first['msg']}"


def _model_at(model: Type[BaseModel], item: Any, label: str, index: int) -> BaseModel:
    try:
        return model.model_validate(item)
    except ValidationError as e:
        raise ShapeError(f"Invalid {label} format at index {index}: {_describe(e)}") from e


def _require_list(data: Any, key: str) -> List[Any]:
    if not isinstance(data, dict) or not isinstance(data.get(key), list):
        raise ShapeError(f"Invalid response format: missing {key} array")
    return data[key]


def _check_quiz_questions(data: Any) -> List[QuizQuestion]:
    items = _require_list(data, "questions")
    questions = [_model_at(QuizQuestion, item, "question", i) for i, item in enumerate(items)]
    if len(questions) != QUIZ_QUESTION_COUNT:
        raise ShapeError(f"Expected {QUIZ_QUESTION_COUNT} questions, got {len(questions)}")
    return questions


def _check_quiz_feedback(data: Any) -> QuizFeedback:
    items = _require_list(data, "feedback")
    for i, item in enumerate(items):
        _model_at(QuizFeedbackItem, item, "feedback", i)
    try:
        return QuizFeedback.model_validate(data)
    except ValidationError as e:
        raise ShapeError(f"Invalid feedback format: {_describe(e)}") from e


def _check_schedule(data: Any) -> Schedule:
    items = _require_list(data, "blocks")
    blocks = [_model_at(ScheduleBlock, item, "block", i) for i, item in enumerate(items)]
    # summary, recommendations and any other keys are returned untouched
    return Schedule.model_validate({**data, "blocks": blocks})


QUIZ_QUESTIONS = ResponseShape("quiz_questions", _check_quiz_questions)
QUIZ_FEEDBACK = ResponseShape("quiz_feedback", _check_quiz_feedback)
SCHEDULE = ResponseShape("schedule", _check_schedule)


def validate(normalized: str, shape: ResponseShape[T]) -> ParseResult[T]:
    """Parse normalized model output as JSON and check it against ``shape``."""
    try:
        data = json.loads(normalized)
    except json.JSONDecodeError as e:
        return ParseResult(error=ParseError(f"Failed to parse AI response as JSON: {e}"))

    try:
        return ParseResult(value=shape.check(data))
    except ShapeError as e:
        return ParseResult(error=e)
