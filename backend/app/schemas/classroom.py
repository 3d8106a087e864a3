"""
Schémas Pydantic pour les classes d'un enseignant.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from app.schemas.contest import ContestResponse


class ClassroomCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom de la classe ne peut pas être vide.")
        return v.strip()


class ClassroomUpdate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom de la classe ne peut pas être vide.")
        return v.strip()


class ClassroomResponse(BaseModel):
    id: uuid.UUID
    name: str
    nb_contests: int
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class ClassroomDetail(ClassroomResponse):
    """Classe avec la liste de ses concours (du plus récent au plus ancien)."""
    contests: List[ContestResponse] = []
