"""
Router côté participants : rejoindre un concours, consulter, soumettre, voter.
L'identité est la session opaque reçue à l'admission (aucun compte).
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Header, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.deps import read_image
from app.schemas.contest import ParticipantContestView
from app.schemas.participant import JoinRequest, JoinResponse
from app.schemas.submission import SubmissionResponse
from app.schemas.vote import VoteCreate, VoteResponse
from app.services import participant_service, submission_service, vote_service
from app.services.blob_store import BlobStore, get_blob_store

router = APIRouter(prefix="/api/v1", tags=["Participants"])


@router.post("/join", response_model=JoinResponse, status_code=201, summary="Rejoindre un concours")
def join_contest(data: JoinRequest, db: Session = Depends(get_db)):
    """
    Rejoint un concours en phase SUBMISSION avec son code et un pseudo
    unique dans le concours (casse ignorée).

    Le session_id retourné doit être conservé par le client : il sert de jeton
    pour toutes les actions suivantes.
    """
    return participant_service.join_contest(db, data)


@router.get(
    "/contests/{contest_id}/participant-view",
    response_model=ParticipantContestView,
    summary="Vue participant d'un concours",
)
def get_participant_view(
    contest_id: uuid.UUID,
    x_session_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    """Concours, soumissions avec nombre de votes, et état soumis/voté du participant."""
    return participant_service.get_participant_view(db, contest_id, x_session_id)


@router.post(
    "/contests/{contest_id}/submit",
    response_model=SubmissionResponse,
    status_code=201,
    summary="Soumettre sa paire d'images",
)
def submit_images(
    contest_id: uuid.UUID,
    participant_id: uuid.UUID = Form(...),
    session_id: str = Form(...),
    ai_image: UploadFile = File(...),
    real_image: UploadFile = File(...),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """Une seule soumission par participant, uniquement en phase SUBMISSION."""
    ai_bytes = read_image(ai_image, "Image IA")
    real_bytes = read_image(real_image, "Image réelle")
    return submission_service.submit_images(
        db, blob_store, contest_id, participant_id, session_id, ai_bytes, real_bytes
    )


@router.post("/contests/{contest_id}/vote", response_model=VoteResponse, status_code=201, summary="Voter")
def cast_vote(contest_id: uuid.UUID, data: VoteCreate, db: Session = Depends(get_db)):
    """Un seul vote par participant, en phase VOTING, jamais pour sa propre soumission."""
    return vote_service.cast_vote(db, contest_id, data)
