# model/document.py
from datetime import datetime
from typing import List
from pydantic import BaseModel, Field


class DocumentWrite(BaseModel):
    name: str = Field(min_length=1)
    references: List[str] = Field(default_factory=list)


class Document(BaseModel):
    id: str
    workspace: str
    name: str
    references: List[str] = Field(default_factory=list)
    createdAt: datetime
    updatedAt: datetime
