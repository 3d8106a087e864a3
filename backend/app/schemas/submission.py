"""
Schémas Pydantic pour les soumissions d'images.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel


class SubmissionResponse(BaseModel):
    """Réponse après dépôt d'une paire d'images."""
    id: uuid.UUID
    ai_image_url: str
    real_image_url: str
    participant_id: uuid.UUID
    contest_id: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}
