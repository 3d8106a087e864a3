"""
Modèle SQLAlchemy pour les soumissions (paire image IA / image réelle).
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid, func

from app.database import Base


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    ai_image_url = Column(String(500), nullable=False)
    real_image_url = Column(String(500), nullable=False)

    # unique=True : une seule soumission par participant, garde-fou contre les requêtes concurrentes
    participant_id = Column(Uuid, ForeignKey("participants.id", ondelete="CASCADE"), unique=True, nullable=False)
    contest_id = Column(Uuid, ForeignKey("contests.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime, server_default=func.now())
