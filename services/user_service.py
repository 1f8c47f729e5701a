"""
User Service - athlete and master profiles (master only)
"""

from typing import List, Optional

from app.errors import NotFoundError, ValidationError
from models.analytics import Profile
from models.auth import ROLES

from .auth_service import AuthService
from .base_service import BaseService


def filter_profiles(profiles: List[Profile], search: Optional[str]) -> List[Profile]:
    """Case-insensitive match on name, email or role."""
    term = (search or "").strip().lower()
    if not term:
        return profiles
    return [
        p
        for p in profiles
        if term in (p.full_name or "").lower()
        or term in p.email.lower()
        or term in p.role.lower()
    ]


class UserService(BaseService):
    table_name = "profiles"
    resource = "profile"

    def __init__(self, client, auth: Optional[AuthService] = None):
        super().__init__(client)
        self.auth = auth

    def list_profiles(self, search: Optional[str] = None) -> List[Profile]:
        query = self.table.select("id, email, role, created_at, full_name").order(
            "created_at", desc=True
        )
        rows = self._execute(query, "fetch").data or []
        return filter_profiles([Profile.model_validate(row) for row in rows], search)

    def change_role(self, user_id: str, role: str) -> Profile:
        if role not in ROLES:
            raise ValidationError(f"Unknown role: {role}", field="role")
        query = self.table.update({"role": role}).eq("id", user_id)
        rows = self._execute(query, "update", user_id).data
        if not rows:
            raise NotFoundError("Profile", user_id)
        if self.auth:
            self.auth.invalidate_role(user_id)
        self.logger.info("Role of user %s changed to %s", user_id, role)
        return Profile.model_validate(rows[0])

    def delete_profile(self, user_id: str) -> None:
        """Remove the profile row. The auth account itself stays with the provider."""
        rows = self._execute(self.table.delete().eq("id", user_id), "delete", user_id).data
        if not rows:
            raise NotFoundError("Profile", user_id)
        if self.auth:
            self.auth.invalidate_role(user_id)
        self.logger.info("Profile %s deleted", user_id)
