from datetime import date as date_type
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Block(BaseModel):
    # letter and title are shown together as "A) Warm-up"
    id: str = ""
    letter: str
    title: str
    description: str = ""
    notes: str = ""
    category: Optional[str] = None
    enable_rm_calculator: bool = False


class BlockInput(BaseModel):
    id: Optional[str] = None
    letter: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    enable_rm_calculator: bool = False


class Workout(BaseModel):
    id: str
    date: date_type
    blocks: List[Block] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class WorkoutCreate(BaseModel):
    date: Optional[date_type] = None
    blocks: List[BlockInput] = Field(default_factory=list)


class WorkoutUpdate(BaseModel):
    blocks: List[BlockInput]
    date: Optional[date_type] = None


class CategoryStats(BaseModel):
    category: str
    count: int
    label: str
    color: str
