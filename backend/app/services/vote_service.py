"""
Registre des votes : un vote par participant, jamais pour sa propre soumission.

Vérifications, dans l'ordre :
1. Session participant valide pour ce concours (Unauthenticated)
2. Concours en statut VOTING (InvalidPhase)
3. Le participant n'a encore jamais voté (AlreadyVoted)
4. La soumission existe et appartient à ce concours (NotFound)
5. La soumission n'est pas la sienne (SelfVote)

La contrainte UNIQUE sur votes.participant_id ferme la course entre deux votes
simultanés du même participant.
"""

import uuid
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import AlreadyVoted, NotFound, SelfVote
from app.models.contest import Contest
from app.models.submission import Submission
from app.models.vote import Vote
from app.schemas.vote import VoteCreate, VoteResponse
from app.services import contest_service
from app.services.identity_service import resolve_participant

logger = logging.getLogger(__name__)


def cast_vote(db: Session, contest_id: uuid.UUID, data: VoteCreate) -> VoteResponse:
    participant = resolve_participant(db, contest_id, data.session_id, data.participant_id)
    contest = db.get(Contest, contest_id)
    contest_service.ensure_phase(contest, "VOTING", "voter")

    if _has_voted(db, participant.id):
        raise AlreadyVoted("Vous avez déjà voté.")

    submission = db.execute(
        select(Submission).where(Submission.id == data.submission_id, Submission.contest_id == contest.id)
    ).scalar_one_or_none()
    if submission is None:
        raise NotFound("Soumission introuvable dans ce concours.")

    if submission.participant_id == participant.id:
        raise SelfVote("Vous ne pouvez pas voter pour votre propre soumission.")

    vote = Vote(
        participant_id=participant.id,
        submission_id=submission.id,
        contest_id=contest.id,
    )
    db.add(vote)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if _has_voted(db, data.participant_id):
            raise AlreadyVoted("Vous avez déjà voté.")
        raise
    db.refresh(vote)

    logger.info("Vote %s : participant %s → soumission %s", vote.id, vote.participant_id, vote.submission_id)
    return VoteResponse.model_validate(vote)


def _has_voted(db: Session, participant_id: uuid.UUID) -> bool:
    return db.execute(
        select(Vote.id).where(Vote.participant_id == participant_id)
    ).first() is not None
