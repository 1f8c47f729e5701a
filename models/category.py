from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class Category(BaseModel):
    value: str
    label: str
    color: str
    is_default: bool = False
    # only custom categories have a row id
    id: Optional[str] = None
    created_at: Optional[datetime] = None


class CategoryCreate(BaseModel):
    value: str
    label: str
    color: str = "bg-gray-500"
