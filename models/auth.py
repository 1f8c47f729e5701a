from typing import Literal, Optional

from pydantic import BaseModel

Role = Literal["master", "athlete"]
ROLES = ("master", "athlete")
# least-privileged role, used whenever the real one cannot be determined
DEFAULT_ROLE: Role = "athlete"


class AuthSession(BaseModel):
    user_id: str
    email: Optional[str] = None
    access_token: str
    refresh_token: Optional[str] = None


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
    role: Role = DEFAULT_ROLE

    @property
    def is_master(self) -> bool:
        return self.role == "master"


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    email: str
    password: str
    full_name: Optional[str] = None
