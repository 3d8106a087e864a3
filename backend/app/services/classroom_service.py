"""
Service métier pour les classes d'un enseignant.
Toutes les opérations sont limitées aux classes de l'enseignant authentifié.
"""

import uuid
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.exceptions import NotFound, Unauthenticated
from app.models.classroom import Classroom
from app.models.contest import Contest
from app.models.submission import Submission
from app.models.teacher import Teacher
from app.schemas.classroom import ClassroomCreate, ClassroomDetail, ClassroomResponse, ClassroomUpdate
from app.services import contest_service
from app.services.blob_store import BlobStore, delete_quietly

logger = logging.getLogger(__name__)


def create_classroom(db: Session, teacher_id: uuid.UUID, data: ClassroomCreate) -> ClassroomResponse:
    """
    Crée une classe pour l'enseignant.
    Le jeton n'étant vérifié que syntaxiquement, un enseignant inconnu ou supprimé
    est refusé ici plutôt qu'à l'INSERT (clé étrangère).
    """
    if db.get(Teacher, teacher_id) is None:
        raise Unauthenticated("Enseignant inconnu.")

    classroom = Classroom(name=data.name, teacher_id=teacher_id)
    db.add(classroom)
    db.commit()
    db.refresh(classroom)
    logger.info("Classe créée : %s (%s)", classroom.name, classroom.id)
    return _to_response(db, classroom)


def list_classrooms(db: Session, teacher_id: uuid.UUID) -> list[ClassroomResponse]:
    """Retourne les classes de l'enseignant, de la plus récente à la plus ancienne."""
    classrooms = db.execute(
        select(Classroom)
        .where(Classroom.teacher_id == teacher_id)
        .order_by(Classroom.created_at.desc())
    ).scalars().all()
    return [_to_response(db, c) for c in classrooms]


def get_classroom(db: Session, teacher_id: uuid.UUID, classroom_id: uuid.UUID) -> ClassroomDetail:
    """Retourne une classe avec ses concours et leurs compteurs."""
    classroom = _get_owned_classroom(db, teacher_id, classroom_id)

    contests = db.execute(
        select(Contest)
        .where(Contest.classroom_id == classroom.id)
        .order_by(Contest.created_at.desc())
    ).scalars().all()

    return ClassroomDetail(
        **_to_response(db, classroom).model_dump(),
        contests=[contest_service.contest_to_response(db, c, classroom.name) for c in contests],
    )


def rename_classroom(
    db: Session,
    teacher_id: uuid.UUID,
    classroom_id: uuid.UUID,
    data: ClassroomUpdate,
) -> ClassroomResponse:
    classroom = _get_owned_classroom(db, teacher_id, classroom_id)
    classroom.name = data.name
    db.commit()
    db.refresh(classroom)
    return _to_response(db, classroom)


def delete_classroom(
    db: Session,
    blob_store: BlobStore,
    teacher_id: uuid.UUID,
    classroom_id: uuid.UUID,
) -> None:
    """
    Supprime une classe et, en cascade, ses concours, participants, soumissions et votes.
    Les images des soumissions sont nettoyées au mieux après le commit.
    """
    classroom = _get_owned_classroom(db, teacher_id, classroom_id)

    image_rows = db.execute(
        select(Submission.ai_image_url, Submission.real_image_url)
        .join(Contest, Contest.id == Submission.contest_id)
        .where(Contest.classroom_id == classroom.id)
    ).all()

    db.delete(classroom)
    db.commit()
    logger.info("Classe %s supprimée (%d soumission(s) en cascade)", classroom_id, len(image_rows))

    delete_quietly(blob_store, [url for row in image_rows for url in row])


def _get_owned_classroom(db: Session, teacher_id: uuid.UUID, classroom_id: uuid.UUID) -> Classroom:
    classroom = db.execute(
        select(Classroom).where(Classroom.id == classroom_id, Classroom.teacher_id == teacher_id)
    ).scalar_one_or_none()
    if classroom is None:
        raise NotFound("Classe introuvable.")
    return classroom


def _to_response(db: Session, classroom: Classroom) -> ClassroomResponse:
    """Construit le schéma de réponse avec le nombre de concours."""
    nb_contests = db.execute(
        select(func.count())
        .select_from(Contest)
        .where(Contest.classroom_id == classroom.id)
    ).scalar() or 0

    return ClassroomResponse(
        id=classroom.id,
        name=classroom.name,
        nb_contests=nb_contests,
        created_at=classroom.created_at,
        updated_at=classroom.updated_at,
    )
