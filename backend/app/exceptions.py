"""
Erreurs métier des concours.

Chaque erreur porte un code stable (renvoyé au client avec le message) et le
statut HTTP associé. Elles dérivent de ValueError : les services lèvent, les
routers ne traduisent rien, main.py se charge du rendu JSON.
"""


class ContestError(ValueError):
    code = "CONTEST_ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(ContestError):
    """Jeton enseignant ou session participant absent ou invalide."""
    code = "UNAUTHENTICATED"
    status_code = 401


class NotFound(ContestError):
    """Ressource inexistante OU appartenant à un autre enseignant (indiscernables)."""
    code = "NOT_FOUND"
    status_code = 404


class InvalidPhase(ContestError):
    """Opération interdite dans le statut actuel du concours."""
    code = "INVALID_PHASE"
    status_code = 400


class Conflict(ContestError):
    code = "CONFLICT"
    status_code = 409


class NicknameTaken(Conflict):
    code = "NICKNAME_TAKEN"


class AlreadySubmitted(Conflict):
    code = "ALREADY_SUBMITTED"


class AlreadyVoted(Conflict):
    code = "ALREADY_VOTED"


class SelfVote(Conflict):
    code = "SELF_VOTE"


class InvalidInput(ContestError):
    """Champ manquant ou mal formé, détecté hors validation Pydantic."""
    code = "VALIDATION_ERROR"
    status_code = 422


class BlobStoreError(ContestError):
    code = "BLOB_STORE_ERROR"
    status_code = 502


class JoinCodeExhausted(ContestError):
    code = "JOIN_CODE_EXHAUSTED"
    status_code = 503
