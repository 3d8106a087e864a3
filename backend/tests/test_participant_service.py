"""
Tests de l'admission des participants et de leur exclusion (base SQLite réelle).
"""

import uuid
from unittest.mock import patch

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from app.exceptions import InvalidInput, InvalidPhase, NicknameTaken, NotFound, Unauthenticated
from app.models.participant import Participant
from app.models.submission import Submission
from app.models.vote import Vote
from app.schemas.contest import ContestCreate
from app.schemas.participant import JoinRequest
from app.schemas.vote import VoteCreate
from app.services.contest_service import create_contest, set_contest_status
from app.services.participant_service import (
    get_participant_view,
    join_contest,
    kick_participant,
    normalize_nickname,
)
from app.services.submission_service import submit_images
from app.services.teacher_upload_service import teacher_upload
from app.services.vote_service import cast_vote


# --- Validation des schémas ---

def test_join_request_normalise_code_et_pseudo():
    req = JoinRequest(join_code="  ab12cd ", nickname="  Alice  ")
    assert req.join_code == "AB12CD"
    assert req.nickname == "Alice"


def test_join_request_pseudo_vide_rejete():
    with pytest.raises(ValidationError):
        JoinRequest(join_code="AB12CD", nickname="   ")


def test_join_request_pseudo_trop_long_rejete():
    with pytest.raises(ValidationError):
        JoinRequest(join_code="AB12CD", nickname="x" * 51)


def test_normalize_nickname():
    assert normalize_nickname("  ÉLODIE ") == "élodie"
    assert normalize_nickname("Straße") == normalize_nickname("STRASSE")


# --- join_contest ---

def test_join_contest_succes(db, contest):
    result = join_contest(db, JoinRequest(join_code=contest.join_code.lower(), nickname="Alice"))

    assert result.contest_id == contest.id
    assert result.contest_title == contest.title
    assert result.status == "SUBMISSION"
    assert len(result.session_id) >= 32

    participant = db.get(Participant, result.participant_id)
    assert participant.kind == "REAL"
    assert participant.session_id == result.session_id


def test_join_contest_code_inconnu(db, contest):
    with pytest.raises(NotFound):
        join_contest(db, JoinRequest(join_code="ZZZZZZ", nickname="Alice"))


@pytest.mark.parametrize("status", ["VOTING", "RESULTS", "ENDED"])
def test_join_contest_hors_phase_submission(db, teacher, contest, status):
    set_contest_status(db, teacher.id, contest.id, status)
    with pytest.raises(InvalidPhase):
        join_contest(db, JoinRequest(join_code=contest.join_code, nickname="Alice"))


def test_join_contest_pseudo_pris_casse_ignoree(db, contest):
    join_contest(db, JoinRequest(join_code=contest.join_code, nickname="Alice"))
    with pytest.raises(NicknameTaken):
        join_contest(db, JoinRequest(join_code=contest.join_code, nickname="ALICE"))
    assert db.query(Participant).count() == 1


def test_join_contest_meme_pseudo_autre_concours(db, teacher, classroom, contest):
    other = create_contest(db, teacher.id, ContestCreate(title="Autre", classroom_id=classroom.id))
    join_contest(db, JoinRequest(join_code=contest.join_code, nickname="Alice"))
    result = join_contest(db, JoinRequest(join_code=other.join_code, nickname="alice"))
    assert result.contest_id == other.id


def test_join_contest_sessions_distinctes(db, contest):
    a = join_contest(db, JoinRequest(join_code=contest.join_code, nickname="Alice"))
    b = join_contest(db, JoinRequest(join_code=contest.join_code, nickname="Bob"))
    assert a.session_id != b.session_id


def test_join_contest_pseudo_reserve_refuse(db, contest):
    with pytest.raises(InvalidInput):
        join_contest(db, JoinRequest(join_code=contest.join_code, nickname="teacher upload #1"))


def test_join_contest_pseudo_allonge_par_casefold(db, contest):
    """« ß » devient « ss » : la clé normalisée peut dépasser la longueur du pseudo."""
    nickname = "ß" * 50
    result = join_contest(db, JoinRequest(join_code=contest.join_code, nickname=nickname))

    participant = db.get(Participant, result.participant_id)
    assert participant.nickname_key == "ss" * 50
    assert Participant.__table__.c.nickname_key.type.length >= len(participant.nickname_key)


def test_nickname_key_assez_large_pour_tout_pseudo_valide():
    """casefold() multiplie au plus par 3 la longueur d'un caractère (ex. « ΐ »)."""
    longest = normalize_nickname("ΐ" * 50)
    assert Participant.__table__.c.nickname_key.type.length >= len(longest)


def test_join_contest_course_sur_le_pseudo(db, contest):
    """
    Deux admissions simultanées : la pré-vérification passe pour les deux,
    la contrainte UNIQUE (contest_id, nickname_key) rejette la seconde.
    """
    join_contest(db, JoinRequest(join_code=contest.join_code, nickname="Alice"))

    with patch("app.services.participant_service._nickname_taken", side_effect=[False, True]):
        with pytest.raises(NicknameTaken):
            join_contest(db, JoinRequest(join_code=contest.join_code, nickname="alice"))

    assert db.query(Participant).count() == 1


def test_join_contest_collision_de_session_propagee(db, contest):
    """Une collision de session_id n'est pas un conflit de pseudo : l'erreur remonte telle quelle."""
    first = join_contest(db, JoinRequest(join_code=contest.join_code, nickname="Alice"))
    with patch("app.services.participant_service.generate_session_id", return_value=first.session_id):
        with pytest.raises(IntegrityError):
            join_contest(db, JoinRequest(join_code=contest.join_code, nickname="Bob"))


# --- get_participant_view ---

def test_participant_view(db, teacher, contest, blob_store):
    alice = join_contest(db, JoinRequest(join_code=contest.join_code, nickname="Alice"))
    submit_images(db, blob_store, contest.id, alice.participant_id, alice.session_id, b"a", b"r")
    teacher_upload(db, blob_store, teacher.id, contest.id, b"a", b"r")

    view = get_participant_view(db, contest.id, alice.session_id)

    assert view.participant_id == alice.participant_id
    assert view.nickname == "Alice"
    assert view.has_submitted is True
    assert view.has_voted is False
    assert len(view.submissions) == 2
    assert view.contest.nb_participants == 1


def test_participant_view_session_invalide(db, contest):
    with pytest.raises(Unauthenticated):
        get_participant_view(db, contest.id, "inconnue")


def test_participant_view_sans_session(db, contest):
    with pytest.raises(Unauthenticated):
        get_participant_view(db, contest.id, None)


# --- kick_participant ---

def test_kick_participant_cascade(db, teacher, contest, blob_store):
    alice = join_contest(db, JoinRequest(join_code=contest.join_code, nickname="Alice"))
    bob = join_contest(db, JoinRequest(join_code=contest.join_code, nickname="Bob"))
    bob_sub = submit_images(db, blob_store, contest.id, bob.participant_id, bob.session_id, b"a", b"r")
    alice_sub = submit_images(db, blob_store, contest.id, alice.participant_id, alice.session_id, b"a", b"r")
    set_contest_status(db, teacher.id, contest.id, "VOTING")
    cast_vote(db, contest.id, VoteCreate(
        participant_id=alice.participant_id, session_id=alice.session_id, submission_id=bob_sub.id,
    ))

    kick_participant(db, blob_store, teacher.id, contest.id, alice.participant_id)

    assert db.get(Participant, alice.participant_id) is None
    assert db.get(Submission, alice_sub.id) is None
    assert db.query(Vote).count() == 0
    assert alice_sub.ai_image_url not in blob_store.objects
    assert bob_sub.ai_image_url in blob_store.objects


def test_kick_participant_echec_stockage_non_bloquant(db, teacher, contest, blob_store):
    alice = join_contest(db, JoinRequest(join_code=contest.join_code, nickname="Alice"))
    submit_images(db, blob_store, contest.id, alice.participant_id, alice.session_id, b"a", b"r")
    blob_store.fail_delete = True

    kick_participant(db, blob_store, teacher.id, contest.id, alice.participant_id)

    assert db.query(Participant).count() == 0
    assert db.query(Submission).count() == 0


def test_kick_participant_autre_enseignant(db, contest, blob_store):
    alice = join_contest(db, JoinRequest(join_code=contest.join_code, nickname="Alice"))
    with pytest.raises(NotFound):
        kick_participant(db, blob_store, uuid.uuid4(), contest.id, alice.participant_id)


def test_kick_participant_virtuel_refuse(db, teacher, contest, blob_store):
    sub = teacher_upload(db, blob_store, teacher.id, contest.id, b"a", b"r")
    with pytest.raises(NotFound):
        kick_participant(db, blob_store, teacher.id, contest.id, sub.participant_id)
