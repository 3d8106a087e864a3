"""
Service d'admission des participants et de modération (exclusion).

Admission : code du concours + pseudo → participant lié au concours + session_id.
Vérifications, dans l'ordre (la première qui échoue l'emporte) :
1. Le concours existe (NotFound)
2. Le concours est en statut SUBMISSION (InvalidPhase)
3. Aucun participant du concours n'a ce pseudo, casse ignorée (NicknameTaken)

La contrainte UNIQUE (contest_id, nickname_key) reste le vrai garde-fou :
deux admissions simultanées avec le même pseudo ne peuvent pas réussir toutes les deux.
"""

import secrets
import uuid
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import InvalidInput, NicknameTaken, NotFound
from app.models.contest import Contest
from app.models.participant import Participant
from app.models.submission import Submission
from app.models.vote import Vote
from app.schemas.contest import ParticipantContestView
from app.schemas.participant import JoinRequest, JoinResponse
from app.services import contest_service
from app.services.blob_store import BlobStore, delete_quietly
from app.services.identity_service import resolve_participant

logger = logging.getLogger(__name__)


def normalize_nickname(nickname: str) -> str:
    """Clé de comparaison des pseudos : insensible à la casse et aux espaces de bord."""
    return nickname.strip().casefold()


def generate_session_id() -> str:
    """Jeton porteur opaque remis au participant (non devinable)."""
    return secrets.token_urlsafe(24)


def join_contest(db: Session, data: JoinRequest) -> JoinResponse:
    """
    Fait entrer un participant dans un concours.

    Un échec d'intégrité sur le pseudo (course entre deux admissions) devient
    NicknameTaken ; tout autre échec (ex. collision de session_id) est une erreur
    de configuration et est propagé tel quel.
    """
    contest = db.execute(
        select(Contest).where(Contest.join_code == data.join_code.strip().upper())
    ).scalar_one_or_none()
    if contest is None:
        raise NotFound("Concours introuvable. Vérifiez le code.")

    contest_service.ensure_phase(contest, "SUBMISSION", "rejoindre ce concours")

    nickname_key = normalize_nickname(data.nickname)
    if nickname_key.startswith(normalize_nickname(settings.TEACHER_UPLOAD_NICKNAME_PREFIX)):
        raise InvalidInput("Ce pseudo est réservé, choisissez-en un autre.")

    if _nickname_taken(db, contest.id, nickname_key):
        raise NicknameTaken("Ce pseudo est déjà pris dans ce concours, choisissez-en un autre.")

    participant = Participant(
        nickname=data.nickname,
        nickname_key=nickname_key,
        kind="REAL",
        contest_id=contest.id,
        session_id=generate_session_id(),
    )
    db.add(participant)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if _nickname_taken(db, contest.id, nickname_key):
            raise NicknameTaken("Ce pseudo est déjà pris dans ce concours, choisissez-en un autre.")
        raise
    db.refresh(participant)

    logger.info("Participant %s (%s) a rejoint le concours %s", participant.nickname, participant.id, contest.id)
    return JoinResponse(
        contest_id=contest.id,
        participant_id=participant.id,
        session_id=participant.session_id,
        contest_title=contest.title,
        status=contest.status,
    )


def get_participant_view(db: Session, contest_id: uuid.UUID, session_id: str) -> ParticipantContestView:
    """
    Vue du concours pour le participant authentifié par sa session.
    Un participant ne peut lire que le concours qu'il a rejoint.
    """
    participant = resolve_participant(db, contest_id, session_id)
    contest = db.get(Contest, contest_id)

    has_submitted = db.execute(
        select(Submission.id).where(Submission.participant_id == participant.id)
    ).first() is not None
    has_voted = db.execute(
        select(Vote.id).where(Vote.participant_id == participant.id)
    ).first() is not None

    return ParticipantContestView(
        contest=contest_service.contest_to_response(db, contest),
        participant_id=participant.id,
        nickname=participant.nickname,
        submissions=contest_service.get_submissions_with_votes(db, contest.id),
        has_submitted=has_submitted,
        has_voted=has_voted,
    )


def kick_participant(
    db: Session,
    blob_store: BlobStore,
    teacher_id: uuid.UUID,
    contest_id: uuid.UUID,
    participant_id: uuid.UUID,
) -> None:
    """
    Exclut un participant réel d'un concours de l'enseignant.
    Sa soumission et son vote sont supprimés en cascade ; ses images sont
    ensuite nettoyées au mieux.
    """
    contest = contest_service.get_owned_contest(db, teacher_id, contest_id)

    participant = db.execute(
        select(Participant).where(
            Participant.id == participant_id,
            Participant.contest_id == contest.id,
            Participant.kind == "REAL",
        )
    ).scalar_one_or_none()
    if participant is None:
        raise NotFound("Participant introuvable dans ce concours.")

    urls = []
    submission = db.execute(
        select(Submission).where(Submission.participant_id == participant.id)
    ).scalar_one_or_none()
    if submission is not None:
        urls = [submission.ai_image_url, submission.real_image_url]

    db.delete(participant)
    db.commit()
    logger.info("Participant %s exclu du concours %s", participant_id, contest.id)

    delete_quietly(blob_store, urls)


def _nickname_taken(db: Session, contest_id: uuid.UUID, nickname_key: str) -> bool:
    return db.execute(
        select(Participant.id).where(
            Participant.contest_id == contest_id,
            Participant.nickname_key == nickname_key,
        )
    ).first() is not None
