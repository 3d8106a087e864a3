"""
Dépendances FastAPI partagées par les routers : identité enseignant et lecture des images.
"""

import uuid
from typing import Optional

from fastapi import Header, UploadFile

from app.config import settings
from app.exceptions import InvalidInput, Unauthenticated
from app.services.identity_service import parse_teacher_token

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


def get_current_teacher_id(authorization: Optional[str] = Header(None)) -> uuid.UUID:
    """Résout l'en-tête `Authorization: Bearer teacher_<id>_<ts>` en ID enseignant."""
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthenticated("Authentification enseignant requise.")
    return parse_teacher_token(authorization[len("Bearer "):])


def read_image(file: UploadFile, label: str) -> bytes:
    """
    Lit une image envoyée en multipart après contrôle du type et de la taille.
    Lecture synchrone : à appeler uniquement depuis des routes `def` (threadpool).
    """
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidInput(
            f"{label} : format invalide. Formats acceptés : {sorted(ALLOWED_IMAGE_TYPES)}"
        )

    content = file.file.read()
    if not content:
        raise InvalidInput(f"{label} : le fichier est vide.")
    if len(content) > settings.MAX_IMAGE_SIZE_MB * 1024 * 1024:
        raise InvalidInput(f"{label} : fichier trop volumineux. Taille maximale : {settings.MAX_IMAGE_SIZE_MB} Mo.")
    return content
