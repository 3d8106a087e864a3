"""
Registre des soumissions : une paire d'images (IA / réelle) par participant.

Dépôt :
1. Session participant valide pour ce concours
2. Concours en statut SUBMISSION
3. Aucune soumission existante pour ce participant (pré-vérification)
4. Envoi des deux images au stockage (échec fatal : aucune ligne créée)
5. INSERT : la contrainte UNIQUE sur submissions.participant_id tranche les courses

Suppression (enseignant) : la soumission, et son participant s'il est virtuel,
partent dans la même transaction ; le nettoyage des images vient après, au mieux.
"""

import uuid
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import AlreadySubmitted, NotFound
from app.models.contest import Contest
from app.models.participant import Participant
from app.models.submission import Submission
from app.schemas.submission import SubmissionResponse
from app.services import contest_service
from app.services.blob_store import BlobStore, delete_quietly, upload_pair
from app.services.identity_service import resolve_participant

logger = logging.getLogger(__name__)


def submit_images(
    db: Session,
    blob_store: BlobStore,
    contest_id: uuid.UUID,
    participant_id: uuid.UUID,
    session_id: str,
    ai_image: bytes,
    real_image: bytes,
) -> SubmissionResponse:
    """
    Enregistre la paire d'images d'un participant.

    Si l'INSERT est rejeté parce qu'une requête concurrente du même participant
    a gagné, les images fraîchement envoyées sont supprimées au mieux et
    AlreadySubmitted est levée.
    """
    participant = resolve_participant(db, contest_id, session_id, participant_id)
    contest = db.get(Contest, contest_id)
    contest_service.ensure_phase(contest, "SUBMISSION", "soumettre des images")

    if _has_submission(db, participant.id):
        raise AlreadySubmitted("Vous avez déjà soumis vos images.")

    ai_url, real_url = upload_pair(blob_store, contest.id, ai_image, real_image)

    submission = Submission(
        ai_image_url=ai_url,
        real_image_url=real_url,
        participant_id=participant.id,
        contest_id=contest.id,
    )
    db.add(submission)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        delete_quietly(blob_store, [ai_url, real_url])
        if _has_submission(db, participant_id):
            raise AlreadySubmitted("Vous avez déjà soumis vos images.")
        raise
    db.refresh(submission)

    logger.info("Soumission %s enregistrée (participant %s, concours %s)", submission.id, participant.id, contest.id)
    return SubmissionResponse.model_validate(submission)


def delete_submission(
    db: Session,
    blob_store: BlobStore,
    teacher_id: uuid.UUID,
    contest_id: uuid.UUID,
    submission_id: uuid.UUID,
) -> None:
    """
    Supprime une soumission d'un concours de l'enseignant.

    - Participant virtuel (dépôt enseignant) : supprimé avec la soumission, même transaction
    - Participant réel : conservé
    - Votes reçus : supprimés en cascade
    Un échec de suppression des images n'empêche jamais la suppression en base.
    """
    contest = contest_service.get_owned_contest(db, teacher_id, contest_id)

    submission = db.execute(
        select(Submission).where(Submission.id == submission_id, Submission.contest_id == contest.id)
    ).scalar_one_or_none()
    if submission is None:
        raise NotFound("Soumission introuvable.")

    participant = db.get(Participant, submission.participant_id)
    is_virtual = participant is not None and participant.kind == "VIRTUAL"
    urls = [submission.ai_image_url, submission.real_image_url]

    db.delete(submission)
    # La soumission doit partir avant son participant : sinon le CASCADE l'aurait déjà supprimée
    db.flush()
    if is_virtual:
        db.delete(participant)
    db.commit()

    logger.info(
        "Soumission %s supprimée du concours %s (participant virtuel supprimé : %s)",
        submission_id, contest_id, is_virtual,
    )
    delete_quietly(blob_store, urls)


def _has_submission(db: Session, participant_id: uuid.UUID) -> bool:
    return db.execute(
        select(Submission.id).where(Submission.participant_id == participant_id)
    ).first() is not None
