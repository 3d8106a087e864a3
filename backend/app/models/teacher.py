"""
Modèle SQLAlchemy pour les enseignants.
La connexion (mot de passe, émission du jeton) est gérée hors de ce service :
seul le jeton porteur `teacher_<id>_<horodatage>` est interprété ici.
"""

import uuid
from sqlalchemy import Column, DateTime, String, Uuid, func

from app.database import Base


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
