"""
Tests des dépôts enseignant et de leurs participants virtuels.
"""

import uuid
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.exceptions import BlobStoreError, NotFound
from app.models.participant import Participant
from app.models.submission import Submission
from app.schemas.contest import ContestCreate
from app.services.contest_service import create_contest, set_contest_status
from app.services.teacher_upload_service import teacher_upload, virtual_nickname


def test_virtual_nickname_unique():
    nicknames = {virtual_nickname() for _ in range(500)}
    assert len(nicknames) == 500
    assert all(n.startswith("Teacher Upload #") for n in nicknames)


def test_teacher_upload_horloge_figee(db, teacher, contest, blob_store):
    """Deux dépôts au même instant d'horloge : deux participants virtuels distincts."""
    with patch("time.time_ns", return_value=1_760_000_000_000_000_000):
        first = teacher_upload(db, blob_store, teacher.id, contest.id, b"ai", b"real")
        second = teacher_upload(db, blob_store, teacher.id, contest.id, b"ai", b"real")

    assert first.participant_id != second.participant_id
    assert db.query(Participant).filter(Participant.kind == "VIRTUAL").count() == 2


@pytest.mark.parametrize("status", ["SUBMISSION", "VOTING", "RESULTS", "ENDED"])
def test_teacher_upload_toutes_phases(db, teacher, classroom, blob_store, status):
    contest = create_contest(
        db, teacher.id, ContestCreate(title="Animaux", classroom_id=classroom.id, contest_type="TEACHER_UPLOAD")
    )
    set_contest_status(db, teacher.id, contest.id, status)

    result = teacher_upload(db, blob_store, teacher.id, contest.id, b"ai", b"real")

    assert result.contest_id == contest.id
    participant = db.get(Participant, result.participant_id)
    assert participant.kind == "VIRTUAL"
    assert participant.nickname.startswith("Teacher Upload #")
    assert participant.session_id.startswith(f"teacher_{teacher.id}_{contest.id}_")


def test_teacher_upload_plusieurs_paires(db, teacher, contest, blob_store):
    results = [teacher_upload(db, blob_store, teacher.id, contest.id, b"ai", b"real") for _ in range(3)]
    assert len({r.participant_id for r in results}) == 3
    assert db.query(Participant).filter(Participant.kind == "VIRTUAL").count() == 3


def test_teacher_upload_autre_enseignant(db, contest, blob_store):
    with pytest.raises(NotFound):
        teacher_upload(db, blob_store, uuid.uuid4(), contest.id, b"ai", b"real")
    assert blob_store.uploads == 0


def test_teacher_upload_echec_envoi(db, teacher, contest, blob_store):
    blob_store.fail_upload_at = 2
    with pytest.raises(BlobStoreError):
        teacher_upload(db, blob_store, teacher.id, contest.id, b"ai", b"real")
    assert db.query(Participant).count() == 0
    assert blob_store.objects == {}


def test_teacher_upload_echec_base_nettoie_les_images(db, teacher, contest, blob_store):
    """Échec à l'écriture : ni participant ni soumission, images supprimées au mieux."""
    with patch.object(db, "commit", side_effect=SQLAlchemyError("base indisponible")):
        with pytest.raises(SQLAlchemyError):
            teacher_upload(db, blob_store, teacher.id, contest.id, b"ai", b"real")

    assert db.query(Participant).count() == 0
    assert db.query(Submission).count() == 0
    assert blob_store.objects == {}
