"""
Stockage des images soumises (Cloudinary).

Les services métier ne connaissent que l'interface BlobStore :
- upload(data, folder) → URL publique ; un échec est fatal pour l'opération appelante
- delete(url) ; toujours appelé via delete_quietly, un échec est journalisé puis ignoré
  (des images orphelines sont acceptables, des lignes orphelines en base ne le sont pas)
"""

import io
import logging
import os
import re
from functools import lru_cache
from typing import Iterable
from urllib.parse import urlparse

import cloudinary
import cloudinary.uploader

from app.config import settings
from app.exceptions import BlobStoreError

logger = logging.getLogger(__name__)

_VERSION_SEGMENT = re.compile(r"^v\d+$")


class BlobStore:
    """Interface minimale d'un stockage d'images adressé par URL."""

    def upload(self, data: bytes, folder: str) -> str:
        raise NotImplementedError

    def delete(self, url: str) -> None:
        raise NotImplementedError


def public_id_from_url(url: str) -> str:
    """
    Retrouve le public_id Cloudinary à partir de l'URL de livraison.
    Ex : .../image/upload/v1712/ai-vs-real/contest-1/ai/abc.png → ai-vs-real/contest-1/ai/abc
    """
    path = urlparse(url).path
    if "/upload/" not in path:
        raise BlobStoreError(f"URL Cloudinary non reconnue : {url}")

    segments = path.split("/upload/", 1)[1].split("/")
    if segments and _VERSION_SEGMENT.match(segments[0]):
        segments = segments[1:]
    return os.path.splitext("/".join(segments))[0]


class CloudinaryBlobStore(BlobStore):

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, root_folder: str):
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )
        self.root_folder = root_folder

    def upload(self, data: bytes, folder: str) -> str:
        try:
            result = cloudinary.uploader.upload(
                io.BytesIO(data),
                folder=f"{self.root_folder}/{folder}",
                resource_type="image",
            )
        except Exception as exc:
            logger.error("Échec de l'envoi d'image vers Cloudinary : %s", exc)
            raise BlobStoreError("Échec de l'enregistrement de l'image.") from exc
        return result["secure_url"]

    def delete(self, url: str) -> None:
        result = cloudinary.uploader.destroy(public_id_from_url(url), resource_type="image")
        if result.get("result") not in ("ok", "not found"):
            raise BlobStoreError(f"Suppression Cloudinary refusée : {result}")


def delete_quietly(store: BlobStore, urls: Iterable[str]) -> int:
    """
    Supprime les images au mieux. Ne lève jamais : chaque échec est journalisé.
    Retourne le nombre d'images effectivement supprimées.
    """
    deleted = 0
    for url in urls:
        try:
            store.delete(url)
            deleted += 1
        except Exception as exc:
            logger.warning("Image non supprimée (orpheline) %s : %s", url, exc)
    return deleted


def upload_pair(store: BlobStore, contest_id, ai_image: bytes, real_image: bytes) -> tuple[str, str]:
    """
    Envoie la paire d'images d'une soumission.
    Si la seconde échoue, la première est nettoyée au mieux puis l'erreur est propagée.
    """
    ai_url = store.upload(ai_image, f"contest-{contest_id}/ai")
    try:
        real_url = store.upload(real_image, f"contest-{contest_id}/real")
    except Exception:
        delete_quietly(store, [ai_url])
        raise
    return ai_url, real_url


@lru_cache
def get_blob_store() -> BlobStore:
    """Dépendance FastAPI : stockage configuré depuis les variables d'environnement."""
    return CloudinaryBlobStore(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        root_folder=settings.BLOB_ROOT_FOLDER,
    )
