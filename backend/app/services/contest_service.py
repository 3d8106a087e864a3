"""
Service métier pour les concours : création, cycle de vie et vues de lecture.

Cycle de vie : SUBMISSION → VOTING → RESULTS → ENDED.
Les changements de statut sont toujours explicites (commande enseignant) et libres :
n'importe quel statut peut être posé depuis n'importe quel autre. Les autres services
se contentent de vérifier le statut courant via ensure_phase, sans jamais le modifier.
"""

import uuid
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import InvalidInput, InvalidPhase, JoinCodeExhausted, NotFound
from app.models.classroom import Classroom
from app.models.contest import Contest
from app.models.participant import Participant
from app.models.submission import Submission
from app.models.vote import Vote
from app.schemas.contest import (
    CONTEST_STATUSES,
    ContestCreate,
    ContestDashboard,
    ContestResponse,
    ParticipantSummary,
    SubmissionWithVotes,
)
from app.services.join_code import allocate_join_code

logger = logging.getLogger(__name__)


def get_owned_contest(db: Session, teacher_id: uuid.UUID, contest_id: uuid.UUID) -> Contest:
    """
    Retourne le concours s'il appartient à l'enseignant.
    Lève NotFound sinon (inexistant et « pas à vous » sont volontairement confondus).
    """
    contest = db.execute(
        select(Contest).where(Contest.id == contest_id, Contest.teacher_id == teacher_id)
    ).scalar_one_or_none()
    if contest is None:
        raise NotFound("Concours introuvable.")
    return contest


def ensure_phase(contest: Contest, expected: str, action: str) -> None:
    """Lève InvalidPhase si le concours n'est pas dans le statut requis pour `action`."""
    if contest.status != expected:
        raise InvalidPhase(
            f"Impossible de {action} : le concours est en statut {contest.status}."
        )


def create_contest(db: Session, teacher_id: uuid.UUID, data: ContestCreate) -> ContestResponse:
    """
    Crée un concours en statut SUBMISSION dans une classe de l'enseignant.

    Le code est alloué par allocate_join_code puis inséré. Si l'INSERT est rejeté
    par la contrainte d'unicité parce qu'une requête concurrente a pris le même code,
    on recommence avec un nouveau code. Toute autre erreur d'intégrité est propagée.
    """
    classroom = db.execute(
        select(Classroom).where(Classroom.id == data.classroom_id, Classroom.teacher_id == teacher_id)
    ).scalar_one_or_none()
    if classroom is None:
        raise NotFound("Classe introuvable.")

    for _ in range(settings.JOIN_CODE_MAX_ATTEMPTS):
        join_code = allocate_join_code(lambda code: _join_code_taken(db, code))
        contest = Contest(
            title=data.title,
            join_code=join_code,
            status="SUBMISSION",
            contest_type=data.contest_type,
            classroom_id=classroom.id,
            teacher_id=classroom.teacher_id,
        )
        db.add(contest)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if not _join_code_taken(db, join_code):
                raise
            logger.warning("Collision du code %s à l'insertion, nouvelle allocation", join_code)
            continue

        db.refresh(contest)
        logger.info(
            "Concours créé : %s (%s), code %s, type %s",
            contest.title, contest.id, contest.join_code, contest.contest_type,
        )
        return contest_to_response(db, contest, classroom.name)

    raise JoinCodeExhausted("Impossible de générer un code de concours unique, réessayez.")


def list_contests(db: Session, teacher_id: uuid.UUID) -> list[ContestResponse]:
    """Retourne les concours de l'enseignant, du plus récent au plus ancien."""
    rows = db.execute(
        select(Contest, Classroom.name)
        .join(Classroom, Classroom.id == Contest.classroom_id)
        .where(Contest.teacher_id == teacher_id)
        .order_by(Contest.created_at.desc())
    ).all()
    return [contest_to_response(db, contest, classroom_name) for contest, classroom_name in rows]


def set_contest_status(
    db: Session,
    teacher_id: uuid.UUID,
    contest_id: uuid.UUID,
    status: str,
) -> ContestResponse:
    """
    Change le statut d'un concours (propriétaire uniquement).
    Seule la valeur est validée, pas la transition : un retour en arrière est permis
    mais journalisé, car il rouvre des opérations (ex. soumissions après des votes).
    """
    contest = get_owned_contest(db, teacher_id, contest_id)
    if status not in CONTEST_STATUSES:
        raise InvalidInput(f"Statut invalide. Valeurs acceptées : {CONTEST_STATUSES}")

    previous = contest.status
    contest.status = status
    db.commit()
    db.refresh(contest)

    if CONTEST_STATUSES.index(status) < CONTEST_STATUSES.index(previous):
        logger.warning("Concours %s : retour en arrière %s → %s", contest.id, previous, status)
    else:
        logger.info("Concours %s : statut %s → %s", contest.id, previous, status)
    return contest_to_response(db, contest)


def get_contest_dashboard(
    db: Session,
    teacher_id: uuid.UUID,
    contest_id: uuid.UUID,
) -> ContestDashboard:
    """
    Vue de gestion d'un concours : participants réels (avec soumis/voté)
    et toutes les soumissions avec leur nombre de votes.
    Les participants virtuels des dépôts enseignant sont exclus de la liste.
    """
    contest = get_owned_contest(db, teacher_id, contest_id)

    participants = db.execute(
        select(Participant)
        .where(Participant.contest_id == contest.id, Participant.kind == "REAL")
        .order_by(Participant.created_at, Participant.nickname)
    ).scalars().all()

    submitted = set(db.execute(
        select(Submission.participant_id).where(Submission.contest_id == contest.id)
    ).scalars().all())
    voted = set(db.execute(
        select(Vote.participant_id).where(Vote.contest_id == contest.id)
    ).scalars().all())

    return ContestDashboard(
        contest=contest_to_response(db, contest),
        participants=[
            ParticipantSummary(
                id=p.id,
                nickname=p.nickname,
                has_submitted=p.id in submitted,
                has_voted=p.id in voted,
                created_at=p.created_at,
            )
            for p in participants
        ],
        submissions=get_submissions_with_votes(db, contest.id),
    )


def get_submissions_with_votes(db: Session, contest_id: uuid.UUID) -> list[SubmissionWithVotes]:
    """Soumissions d'un concours avec le pseudo de leur auteur et leur nombre de votes."""
    rows = db.execute(
        select(Submission, Participant, func.count(Vote.id))
        .join(Participant, Participant.id == Submission.participant_id)
        .outerjoin(Vote, Vote.submission_id == Submission.id)
        .where(Submission.contest_id == contest_id)
        .group_by(Submission.id, Participant.id)
        .order_by(Submission.created_at)
    ).all()

    return [
        SubmissionWithVotes(
            id=submission.id,
            ai_image_url=submission.ai_image_url,
            real_image_url=submission.real_image_url,
            participant_id=participant.id,
            nickname=participant.nickname,
            is_teacher_upload=participant.kind == "VIRTUAL",
            votes=votes,
            created_at=submission.created_at,
        )
        for submission, participant, votes in rows
    ]


def contest_to_response(
    db: Session,
    contest: Contest,
    classroom_name: Optional[str] = None,
) -> ContestResponse:
    """Construit le schéma de réponse avec les compteurs participants réels et soumissions."""
    if classroom_name is None:
        classroom_name = db.execute(
            select(Classroom.name).where(Classroom.id == contest.classroom_id)
        ).scalar()

    nb_participants = db.execute(
        select(func.count())
        .select_from(Participant)
        .where(Participant.contest_id == contest.id, Participant.kind == "REAL")
    ).scalar() or 0

    nb_submissions = db.execute(
        select(func.count())
        .select_from(Submission)
        .where(Submission.contest_id == contest.id)
    ).scalar() or 0

    return ContestResponse(
        id=contest.id,
        title=contest.title,
        join_code=contest.join_code,
        status=contest.status,
        contest_type=contest.contest_type,
        classroom_id=contest.classroom_id,
        classroom_name=classroom_name,
        nb_participants=nb_participants,
        nb_submissions=nb_submissions,
        created_at=contest.created_at,
    )


def _join_code_taken(db: Session, code: str) -> bool:
    return db.execute(select(Contest.id).where(Contest.join_code == code)).first() is not None
