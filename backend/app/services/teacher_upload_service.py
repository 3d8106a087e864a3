"""
Dépôts d'images par l'enseignant (concours TEACHER_UPLOAD, ou ajout ponctuel).

Chaque soumission doit appartenir à un participant (c'est ce qui rend le vote et
l'interdiction de l'auto-vote uniformes). Pour chaque paire déposée par l'enseignant,
on crée donc un participant VIRTUAL à usage unique, puis sa soumission, dans une
seule transaction. Ces participants n'apparaissent dans aucune liste affichée.

Aucune restriction de phase : l'enseignant peut alimenter un concours à tout moment.
"""

import secrets
import uuid
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.participant import Participant
from app.models.submission import Submission
from app.schemas.submission import SubmissionResponse
from app.services import contest_service
from app.services.blob_store import BlobStore, delete_quietly, upload_pair
from app.services.participant_service import normalize_nickname

logger = logging.getLogger(__name__)


def virtual_nickname() -> str:
    """Pseudo réservé et unique d'un participant virtuel (ex : « Teacher Upload #3F9A1C07 »)."""
    return f"{settings.TEACHER_UPLOAD_NICKNAME_PREFIX} #{uuid.uuid4().hex[:8].upper()}"


def teacher_upload(
    db: Session,
    blob_store: BlobStore,
    teacher_id: uuid.UUID,
    contest_id: uuid.UUID,
    ai_image: bytes,
    real_image: bytes,
) -> SubmissionResponse:
    """
    Ajoute une paire d'images de l'enseignant à son concours.

    Étapes :
    1. Vérifier la propriété du concours (NotFound sinon)
    2. Envoyer les deux images (échec fatal, rien n'est écrit en base)
    3. Créer participant virtuel + soumission, tout ou rien
    """
    contest = contest_service.get_owned_contest(db, teacher_id, contest_id)

    ai_url, real_url = upload_pair(blob_store, contest.id, ai_image, real_image)

    nickname = virtual_nickname()
    participant = Participant(
        nickname=nickname,
        nickname_key=normalize_nickname(nickname),
        kind="VIRTUAL",
        contest_id=contest.id,
        # Session synthétique, jamais remise à un client ; resolve_participant ignore les VIRTUAL
        session_id=f"teacher_{teacher_id}_{contest.id}_{secrets.token_hex(8)}",
    )
    try:
        db.add(participant)
        db.flush()  # Obtenir l'ID du participant avant la soumission

        submission = Submission(
            ai_image_url=ai_url,
            real_image_url=real_url,
            participant_id=participant.id,
            contest_id=contest.id,
        )
        db.add(submission)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        delete_quietly(blob_store, [ai_url, real_url])
        raise
    db.refresh(submission)

    logger.info("Dépôt enseignant %s ajouté au concours %s (statut %s)", submission.id, contest.id, contest.status)
    return SubmissionResponse.model_validate(submission)
