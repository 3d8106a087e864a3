"""
Allocation des codes de concours (6 caractères [A-Z0-9]).

Boucle optimiste : on génère un candidat, on vérifie qu'aucun concours ne l'utilise,
on recommence sinon. Ce n'est pas une réservation : deux allocations concurrentes
peuvent tirer le même code, c'est la contrainte UNIQUE sur contests.join_code qui
tranche à l'insertion (voir contest_service.create_contest).
"""

import logging
import secrets
import string
from typing import Callable, Optional

from app.config import settings
from app.exceptions import JoinCodeExhausted

logger = logging.getLogger(__name__)

JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_join_code(length: Optional[int] = None) -> str:
    """Tire un code aléatoire de `length` caractères (JOIN_CODE_LENGTH par défaut)."""
    size = length or settings.JOIN_CODE_LENGTH
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(size))


def allocate_join_code(
    exists: Callable[[str], bool],
    generate: Callable[[], str] = generate_join_code,
    max_attempts: Optional[int] = None,
) -> str:
    """
    Retourne un code non utilisé selon `exists`.
    Lève JoinCodeExhausted après max_attempts collisions consécutives.
    """
    attempts = max_attempts or settings.JOIN_CODE_MAX_ATTEMPTS
    for attempt in range(1, attempts + 1):
        candidate = generate()
        if not exists(candidate):
            return candidate
        logger.debug("Code %s déjà utilisé (tentative %d/%d)", candidate, attempt, attempts)

    logger.error("Aucun code de concours libre après %d tentatives", attempts)
    raise JoinCodeExhausted("Impossible de générer un code de concours unique, réessayez.")
