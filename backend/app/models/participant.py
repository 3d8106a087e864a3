"""
Modèle SQLAlchemy pour les participants d'un concours.

Deux sortes de participants :
- REAL    : élève (ou enseignant) ayant rejoint via le code du concours
- VIRTUAL : participant synthétique créé pour porter une image déposée par l'enseignant

L'unicité du pseudo est garantie par contrainte sur (contest_id, nickname_key),
nickname_key étant le pseudo normalisé (casefold).
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, Uuid, func

from app.database import Base


class Participant(Base):
    __tablename__ = "participants"
    __table_args__ = (
        UniqueConstraint("contest_id", "nickname_key", name="uq_participants_contest_nickname"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    nickname = Column(String(50), nullable=False)
    nickname_key = Column(String(200), nullable=False)  # casefold() peut allonger le pseudo (ß → ss)
    kind = Column(String(10), nullable=False, default="REAL")  # REAL, VIRTUAL
    contest_id = Column(Uuid, ForeignKey("contests.id", ondelete="CASCADE"), nullable=False)
    session_id = Column(String(200), unique=True, nullable=False)  # Jeton porteur stocké côté client
    created_at = Column(DateTime, server_default=func.now())
