import datetime as dt
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictBool

from tagform.constants.utils import QUESTION_TYPE

# 9999-12-31T23:59:59.999Z, the last instant datetime can represent
MAX_EPOCH_MS = 253402300799999


class StartSubmissionRequest(BaseModel):
    email: EmailStr


class ResponseItem(BaseModel):
    questionId: str
    data: Dict[str, Any]


class CompleteSubmissionRequest(BaseModel):
    responses: List[ResponseItem]
    startTime: Optional[int] = Field(None, ge=0, le=MAX_EPOCH_MS, description="Client start time, epoch milliseconds")
    completionTime: Optional[int] = Field(None, ge=0, description="Seconds spent on the form")


# Answer payloads, one shape per question type

class _Answer(BaseModel):
    model_config = ConfigDict(extra="forbid")


class TextAnswer(_Answer):
    text: str


class EmailAnswer(_Answer):
    text: EmailStr


class SingleChoiceAnswer(_Answer):
    choiceId: str


class MultiChoiceAnswer(_Answer):
    choiceIds: List[str]


class BooleanAnswer(_Answer):
    value: StrictBool


class DateAnswer(_Answer):
    date: dt.date


ANSWER_MODELS = {
    QUESTION_TYPE.MULTIPLE_CHOICE: SingleChoiceAnswer,
    QUESTION_TYPE.DROPDOWN: SingleChoiceAnswer,
    QUESTION_TYPE.CHECKBOX: MultiChoiceAnswer,
    QUESTION_TYPE.YES_NO: BooleanAnswer,
    QUESTION_TYPE.SHORT_TEXT: TextAnswer,
    QUESTION_TYPE.LONG_TEXT: TextAnswer,
    QUESTION_TYPE.EMAIL: EmailAnswer,
    QUESTION_TYPE.PHONE: TextAnswer,
    QUESTION_TYPE.ADDRESS: TextAnswer,
    QUESTION_TYPE.WEBSITE: TextAnswer,
    QUESTION_TYPE.DATE: DateAnswer,
}
