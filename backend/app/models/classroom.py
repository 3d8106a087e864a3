"""
Modèle SQLAlchemy pour les classes d'un enseignant.
La suppression d'une classe supprime ses concours en cascade (et tout ce qui en dépend).
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid, func

from app.database import Base


class Classroom(Base):
    __tablename__ = "classrooms"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    teacher_id = Column(Uuid, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
