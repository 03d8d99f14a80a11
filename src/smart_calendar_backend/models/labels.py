'''
Label API Models
'''
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class CustomTab(BaseModel):
    """A user-created note tab living inside a label."""
    id: str
    title: str
    content: str = ""

    model_config = ConfigDict(frozen=True)


class Label(BaseModel):
    """
    A named, colored category painted onto the grid.
    Notes are opaque rich-text markup; nothing here parses them.
    """
    id: str
    name: str
    color: str
    notes: str = ""
    open_tabs: list[str] = Field(default_factory=list)
    trashed_tabs: list[str] = Field(default_factory=list)
    custom_tabs: dict[str, CustomTab] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True, frozen=True)


class LabelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    color: str = Field(..., min_length=1, max_length=64)


class LabelUpdate(BaseModel):
    """
    All fields are optional to allow for partial updates (PATCH).
    """
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    color: Optional[str] = Field(None, min_length=1, max_length=64)
    notes: Optional[str] = None


class TabContentUpdate(BaseModel):
    content: str


class TabOrderUpdate(BaseModel):
    open_tabs: list[str]
