from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class FormCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = ""
    is_private: bool = False


class FormUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_private: Optional[bool] = None


class FormSettingsUpdate(BaseModel):
    landing_page_title: Optional[str] = Field(None, min_length=1)
    landing_page_description: Optional[str] = None
    landing_page_button_text: Optional[str] = Field(None, min_length=1)
    show_progress_bar: Optional[bool] = None
    ending_page_title: Optional[str] = Field(None, min_length=1)
    ending_page_description: Optional[str] = None
    ending_page_button_text: Optional[str] = Field(None, min_length=1)
    redirect_url: Optional[HttpUrl] = None
