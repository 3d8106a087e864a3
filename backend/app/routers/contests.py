"""
Router enseignant pour les concours : création, statut, gestion des soumissions
et des participants, dépôts d'images, QR code d'accès.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.deps import get_current_teacher_id, read_image
from app.schemas.contest import ContestCreate, ContestDashboard, ContestResponse, ContestStatusUpdate
from app.schemas.submission import SubmissionResponse
from app.services import (
    contest_service,
    join_qr_service,
    participant_service,
    submission_service,
    teacher_upload_service,
)
from app.services.blob_store import BlobStore, get_blob_store

router = APIRouter(prefix="/api/v1/contests", tags=["Concours"])


@router.post("", response_model=ContestResponse, status_code=201, summary="Créer un concours")
def create_contest(
    data: ContestCreate,
    teacher_id: uuid.UUID = Depends(get_current_teacher_id),
    db: Session = Depends(get_db),
):
    """
    Crée un concours en phase SUBMISSION dans une classe de l'enseignant.
    Un code d'accès unique de 6 caractères est généré automatiquement.
    """
    return contest_service.create_contest(db, teacher_id, data)


@router.get("", response_model=List[ContestResponse], summary="Lister ses concours")
def list_contests(
    teacher_id: uuid.UUID = Depends(get_current_teacher_id),
    db: Session = Depends(get_db),
):
    return contest_service.list_contests(db, teacher_id)


@router.get("/{contest_id}/manage", response_model=ContestDashboard, summary="Tableau de bord d'un concours")
def get_dashboard(
    contest_id: uuid.UUID,
    teacher_id: uuid.UUID = Depends(get_current_teacher_id),
    db: Session = Depends(get_db),
):
    """Participants (hors dépôts enseignant) et soumissions avec leur nombre de votes."""
    return contest_service.get_contest_dashboard(db, teacher_id, contest_id)


@router.put("/{contest_id}/status", response_model=ContestResponse, summary="Changer la phase du concours")
def set_status(
    contest_id: uuid.UUID,
    data: ContestStatusUpdate,
    teacher_id: uuid.UUID = Depends(get_current_teacher_id),
    db: Session = Depends(get_db),
):
    """
    Passe le concours dans n'importe quelle phase (SUBMISSION, VOTING, RESULTS, ENDED).
    Aucun ordre n'est imposé ; les phases conditionnent ensuite admission, soumission et vote.
    """
    return contest_service.set_contest_status(db, teacher_id, contest_id, data.status)


@router.post(
    "/{contest_id}/teacher-upload",
    response_model=SubmissionResponse,
    status_code=201,
    summary="Déposer une paire d'images (enseignant)",
)
def teacher_upload(
    contest_id: uuid.UUID,
    ai_image: UploadFile = File(...),
    real_image: UploadFile = File(...),
    teacher_id: uuid.UUID = Depends(get_current_teacher_id),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """Autorisé quelle que soit la phase du concours."""
    ai_bytes = read_image(ai_image, "Image IA")
    real_bytes = read_image(real_image, "Image réelle")
    return teacher_upload_service.teacher_upload(db, blob_store, teacher_id, contest_id, ai_bytes, real_bytes)


@router.delete("/{contest_id}/submissions/{submission_id}", status_code=204, summary="Supprimer une soumission")
def delete_submission(
    contest_id: uuid.UUID,
    submission_id: uuid.UUID,
    teacher_id: uuid.UUID = Depends(get_current_teacher_id),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """
    Supprime une soumission et ses votes. Le participant virtuel d'un dépôt enseignant
    est supprimé avec elle ; un participant réel est conservé.
    """
    submission_service.delete_submission(db, blob_store, teacher_id, contest_id, submission_id)


@router.delete("/{contest_id}/participants/{participant_id}", status_code=204, summary="Exclure un participant")
def kick_participant(
    contest_id: uuid.UUID,
    participant_id: uuid.UUID,
    teacher_id: uuid.UUID = Depends(get_current_teacher_id),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """Supprime le participant, sa soumission et son vote."""
    participant_service.kick_participant(db, blob_store, teacher_id, contest_id, participant_id)


@router.get("/{contest_id}/join-qr", summary="QR code d'accès au concours")
def get_join_qr(
    contest_id: uuid.UUID,
    teacher_id: uuid.UUID = Depends(get_current_teacher_id),
    db: Session = Depends(get_db),
):
    png = join_qr_service.generate_join_qr(db, teacher_id, contest_id)
    return Response(content=png, media_type="image/png")
