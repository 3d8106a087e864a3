"""
Modèle SQLAlchemy pour les votes.
Un participant vote une seule fois, tous concours confondus (participant_id unique).
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Uuid, func

from app.database import Base


class Vote(Base):
    __tablename__ = "votes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    participant_id = Column(Uuid, ForeignKey("participants.id", ondelete="CASCADE"), unique=True, nullable=False)
    submission_id = Column(Uuid, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False)
    contest_id = Column(Uuid, ForeignKey("contests.id", ondelete="CASCADE"), nullable=False)  # = submission.contest_id
    created_at = Column(DateTime, server_default=func.now())
