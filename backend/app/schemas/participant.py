"""
Schémas Pydantic pour l'admission des participants.
"""

import uuid

from pydantic import BaseModel, field_validator

MAX_NICKNAME_LENGTH = 50


class JoinRequest(BaseModel):
    """Corps de requête pour rejoindre un concours avec son code."""
    join_code: str
    nickname: str

    @field_validator("join_code")
    @classmethod
    def join_code_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le code du concours est obligatoire.")
        return v.strip().upper()

    @field_validator("nickname")
    @classmethod
    def nickname_valid(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le pseudo est obligatoire.")
        if len(v.strip()) > MAX_NICKNAME_LENGTH:
            raise ValueError(f"Le pseudo ne peut pas dépasser {MAX_NICKNAME_LENGTH} caractères.")
        return v.strip()


class JoinResponse(BaseModel):
    """Identifiants à conserver côté client (le session_id sert de jeton porteur)."""
    contest_id: uuid.UUID
    participant_id: uuid.UUID
    session_id: str
    contest_title: str
    status: str
