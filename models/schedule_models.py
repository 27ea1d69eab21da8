import datetime
from typing import Any, List, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator


class StudyTopic(BaseModel):
    subject: str = Field(..., min_length=1, description="What is being studied.")
    deadline: datetime.date = Field(..., description="Date the topic must be covered by.")
    difficulty: Literal["easy", "medium", "hard"] = "medium"
    estimatedHours: float = Field(..., gt=0, description="Hours the learner expects to need.")


class ScheduleBlock(BaseModel):
    model_config = ConfigDict(extra="allow")

    date: StrictStr = Field(..., min_length=1)
    timeSlot: StrictStr = Field(..., min_length=1)
    topic: StrictStr = Field(..., min_length=1)
    activity: StrictStr = Field(..., min_length=1)
    duration: Union[StrictInt, StrictFloat, StrictStr]

    @field_validator("date", "timeSlot", "topic", "activity")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("duration")
    @classmethod
    def duration_present(cls, value: Union[int, float, str]) -> Union[int, float, str]:
        if isinstance(value, str) and not value.strip():
            raise ValueError("duration must not be blank")
        if not isinstance(value, str) and value <= 0:
            raise ValueError("duration must be positive")
        return value


class Schedule(BaseModel):
    model_config = ConfigDict(extra="allow")

    blocks: List[ScheduleBlock]
    # Passed through as the model wrote them
    summary: Any = None
    recommendations: Any = Field(default_factory=list)


class ScheduleRequest(BaseModel):
    topics: List[StudyTopic] = Field(..., min_length=1)
    scheduleType: Literal["weekly", "monthly"]
