"""
Porte d'identité : résout un jeton enseignant ou une session participant.

Le jeton enseignant a la forme `teacher_<teacherId>_<horodatage>`. Il n'est PAS
signé : sa lecture est purement syntaxique, il doit donc être traité comme un
jeton de capacité (équivalent d'un cookie de session), pas comme une assertion
vérifiée. L'émission est faite par le fournisseur de connexion, hors de ce service.
"""

import time
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import Unauthenticated
from app.models.participant import Participant

TEACHER_TOKEN_PREFIX = "teacher"


def issue_teacher_token(teacher_id: uuid.UUID, issued_at: Optional[float] = None) -> str:
    """Construit le jeton porteur au format attendu par parse_teacher_token."""
    timestamp = int((issued_at if issued_at is not None else time.time()) * 1000)
    return f"{TEACHER_TOKEN_PREFIX}_{teacher_id}_{timestamp}"


def parse_teacher_token(token: Optional[str]) -> uuid.UUID:
    """
    Extrait l'ID enseignant du jeton porteur.
    Lève Unauthenticated si le préfixe est incorrect ou si le segment ID est vide ou invalide.
    """
    parts = (token or "").split("_")
    if len(parts) < 2 or parts[0] != TEACHER_TOKEN_PREFIX or not parts[1]:
        raise Unauthenticated("Jeton enseignant invalide.")
    try:
        return uuid.UUID(parts[1])
    except ValueError:
        raise Unauthenticated("Jeton enseignant invalide.")


def resolve_participant(
    db: Session,
    contest_id: uuid.UUID,
    session_id: Optional[str],
    participant_id: Optional[uuid.UUID] = None,
) -> Participant:
    """
    Retourne le participant réel correspondant à (session_id, contest_id),
    et à participant_id s'il est fourni.

    Les participants virtuels (dépôts enseignant) ne sont jamais résolus :
    leur session synthétique n'est pas un identifiant utilisable.
    """
    if not session_id:
        raise Unauthenticated("Session participant requise.")

    query = select(Participant).where(
        Participant.session_id == session_id,
        Participant.contest_id == contest_id,
        Participant.kind == "REAL",
    )
    if participant_id is not None:
        query = query.where(Participant.id == participant_id)

    participant = db.execute(query).scalar_one_or_none()
    if participant is None:
        raise Unauthenticated("Participant ou session invalide pour ce concours.")
    return participant
