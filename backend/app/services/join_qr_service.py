"""
QR code d'accès à un concours, projeté en classe par l'enseignant.
Le QR encode l'URL de la page « rejoindre » avec le code pré-rempli.
"""

import io
import uuid
from urllib.parse import urlencode

import qrcode
from sqlalchemy.orm import Session

from app.config import settings
from app.services import contest_service


def build_join_url(join_code: str) -> str:
    return f"{settings.JOIN_URL_BASE}?{urlencode({'code': join_code})}"


def generate_qr_image(data: str) -> bytes:
    """Génère une image PNG du QR code encodant `data`."""
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def generate_join_qr(db: Session, teacher_id: uuid.UUID, contest_id: uuid.UUID) -> bytes:
    """QR code PNG du lien d'accès d'un concours de l'enseignant (NotFound sinon)."""
    contest = contest_service.get_owned_contest(db, teacher_id, contest_id)
    return generate_qr_image(build_join_url(contest.join_code))
