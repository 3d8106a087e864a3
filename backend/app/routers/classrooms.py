"""
Router pour les classes de l'enseignant.
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.deps import get_current_teacher_id
from app.schemas.classroom import ClassroomCreate, ClassroomDetail, ClassroomResponse, ClassroomUpdate
from app.services import classroom_service
from app.services.blob_store import BlobStore, get_blob_store

router = APIRouter(prefix="/api/v1/classrooms", tags=["Classes"])


@router.post("", response_model=ClassroomResponse, status_code=201, summary="Créer une classe")
def create_classroom(
    data: ClassroomCreate,
    teacher_id: uuid.UUID = Depends(get_current_teacher_id),
    db: Session = Depends(get_db),
):
    return classroom_service.create_classroom(db, teacher_id, data)


@router.get("", response_model=List[ClassroomResponse], summary="Lister ses classes")
def list_classrooms(
    teacher_id: uuid.UUID = Depends(get_current_teacher_id),
    db: Session = Depends(get_db),
):
    """Retourne les classes de l'enseignant avec leur nombre de concours."""
    return classroom_service.list_classrooms(db, teacher_id)


@router.get("/{classroom_id}", response_model=ClassroomDetail, summary="Détail d'une classe")
def get_classroom(
    classroom_id: uuid.UUID,
    teacher_id: uuid.UUID = Depends(get_current_teacher_id),
    db: Session = Depends(get_db),
):
    """Retourne la classe et ses concours (participants et soumissions comptés)."""
    return classroom_service.get_classroom(db, teacher_id, classroom_id)


@router.put("/{classroom_id}", response_model=ClassroomResponse, summary="Renommer une classe")
def rename_classroom(
    classroom_id: uuid.UUID,
    data: ClassroomUpdate,
    teacher_id: uuid.UUID = Depends(get_current_teacher_id),
    db: Session = Depends(get_db),
):
    return classroom_service.rename_classroom(db, teacher_id, classroom_id, data)


@router.delete("/{classroom_id}", status_code=204, summary="Supprimer une classe")
def delete_classroom(
    classroom_id: uuid.UUID,
    teacher_id: uuid.UUID = Depends(get_current_teacher_id),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """
    Supprime définitivement une classe, ses concours et tout leur contenu
    (participants, soumissions, votes).
    """
    classroom_service.delete_classroom(db, blob_store, teacher_id, classroom_id)
