# model/api.py
from pydantic import BaseModel, Field


class SuccessData(BaseModel):
    success: bool = True


class SuccessResponse(BaseModel):
    code: int = 200
    data: SuccessData = Field(default_factory=SuccessData)


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    message: str
