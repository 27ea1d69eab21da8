from pydantic import BaseModel, Field, StrictStr

from utils.config import AppConfig


class SummarizeRequest(BaseModel):
    text: StrictStr = Field(..., min_length=1, max_length=AppConfig.SUMMARIZER_MAX_TEXT_LENGTH)


class SummaryResponse(BaseModel):
    summary: str
