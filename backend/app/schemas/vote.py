"""
Schémas Pydantic pour les votes.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, field_validator


class VoteCreate(BaseModel):
    """Corps de requête pour voter : identité du participant + soumission choisie."""
    participant_id: uuid.UUID
    session_id: str
    submission_id: uuid.UUID

    @field_validator("session_id")
    @classmethod
    def session_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le session_id est obligatoire.")
        return v.strip()


class VoteResponse(BaseModel):
    id: uuid.UUID
    participant_id: uuid.UUID
    submission_id: uuid.UUID
    contest_id: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}
