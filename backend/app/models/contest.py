"""
Modèle SQLAlchemy pour les concours « IA ou réel ».
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid, func

from app.database import Base


class Contest(Base):
    __tablename__ = "contests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    join_code = Column(String(6), unique=True, nullable=False)     # Ex: "AB12CD", jamais réattribué
    status = Column(String(20), nullable=False, default="SUBMISSION")  # SUBMISSION, VOTING, RESULTS, ENDED
    contest_type = Column(String(20), nullable=False, default="STUDENT_UPLOAD")  # STUDENT_UPLOAD, TEACHER_UPLOAD

    classroom_id = Column(Uuid, ForeignKey("classrooms.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(Uuid, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)  # = classroom.teacher_id

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
