from typing import Any, Literal, Optional

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    status: Literal["success"] = "success"
    message: str


class LoginResponse(BaseModel):
    status: Literal["success"] = "success"
    user_id: str
    role: str
    redirect: str


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    message: str
    error_code: Optional[str] = None
    details: Optional[Any] = None
