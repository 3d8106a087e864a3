"""
Schémas Pydantic pour les concours et leurs vues de lecture.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

CONTEST_STATUSES = ("SUBMISSION", "VOTING", "RESULTS", "ENDED")
CONTEST_TYPES = ("STUDENT_UPLOAD", "TEACHER_UPLOAD")


class ContestCreate(BaseModel):
    title: str
    classroom_id: uuid.UUID
    contest_type: str = "STUDENT_UPLOAD"

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le titre du concours ne peut pas être vide.")
        return v.strip()

    @field_validator("contest_type")
    @classmethod
    def valid_contest_type(cls, v: str) -> str:
        if v not in CONTEST_TYPES:
            raise ValueError(f"Type de concours invalide. Valeurs acceptées : {CONTEST_TYPES}")
        return v


class ContestStatusUpdate(BaseModel):
    """Changement de statut libre : aucune contrainte d'ordre entre les phases."""
    status: str

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: str) -> str:
        if v not in CONTEST_STATUSES:
            raise ValueError(f"Statut invalide. Valeurs acceptées : {CONTEST_STATUSES}")
        return v


class ContestResponse(BaseModel):
    id: uuid.UUID
    title: str
    join_code: str
    status: str
    contest_type: str
    classroom_id: uuid.UUID
    classroom_name: Optional[str] = None
    nb_participants: int    # participants réels uniquement
    nb_submissions: int
    created_at: datetime


class SubmissionWithVotes(BaseModel):
    """Soumission telle qu'affichée pendant le vote et les résultats."""
    id: uuid.UUID
    ai_image_url: str
    real_image_url: str
    participant_id: uuid.UUID
    nickname: str
    is_teacher_upload: bool
    votes: int
    created_at: datetime


class ParticipantSummary(BaseModel):
    id: uuid.UUID
    nickname: str
    has_submitted: bool
    has_voted: bool
    created_at: datetime


class ContestDashboard(BaseModel):
    """Vue de gestion enseignant : participants réels + soumissions avec nombre de votes."""
    contest: ContestResponse
    participants: List[ParticipantSummary]
    submissions: List[SubmissionWithVotes]


class ParticipantContestView(BaseModel):
    """Vue d'un participant sur le concours qu'il a rejoint."""
    contest: ContestResponse
    participant_id: uuid.UUID
    nickname: str
    submissions: List[SubmissionWithVotes]
    has_submitted: bool
    has_voted: bool
