"""Factories de clientes externos: Firestore.

Referência: app/bootstrap é o único lugar que instancia clientes de infra.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from config.settings import get_base_settings, get_firestore_settings

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def create_firestore_client() -> FirestoreClient:
    """Cria cliente Firestore (singleton).

    Usa FIRESTORE_PROJECT_ID e, na falta dele, GCP_PROJECT.

    Returns:
        Cliente Firestore
    """
    from google.cloud import firestore

    project_id = get_firestore_settings().project_id or get_base_settings().gcp_project or None
    client = firestore.Client(project=project_id)
    logger.info("firestore_client_created", extra={"project": project_id})
    return client
