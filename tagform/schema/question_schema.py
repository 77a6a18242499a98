from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class QuestionCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    type: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    description: Optional[str] = None
    is_required: bool = False
    max_chars: Optional[int] = Field(None, gt=0)
    parent_id: Optional[str] = None
    choices: Optional[List[str]] = None


class QuestionUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    text: str = Field(..., min_length=1)
    description: Optional[str] = None
    is_required: Optional[bool] = None
    max_chars: Optional[int] = Field(None, gt=0)
    choices: Optional[List[str]] = None


class QuestionOrderItem(BaseModel):
    id: str
    parentId: Optional[str] = None
    order: Optional[int] = None


class ReorderQuestionsRequest(BaseModel):
    questionIds: List[QuestionOrderItem] = Field(..., min_length=1)


class MoveQuestionRequest(BaseModel):
    parentId: Optional[str] = None


class ChoiceCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    text: str = Field(..., min_length=1)


class ReorderChoicesRequest(BaseModel):
    choiceIds: List[str] = Field(..., min_length=1)
