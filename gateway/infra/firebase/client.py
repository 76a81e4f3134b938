import logging

import firebase_admin
from firebase_admin import credentials

from gateway.config import Settings

logger = logging.getLogger("uvicorn.error")

_APP_NAME = "discipleme-gateway"


def get_firebase_app(settings: Settings) -> firebase_admin.App:
    """
    Initialize (once per process) the firebase-admin app used for token
    verification and Firestore.
    - FIREBASE_CREDENTIALS_FILE: service account json; otherwise ADC
    - httpTimeout bounds the public-key fetch done by verify_id_token
    """
    try:
        return firebase_admin.get_app(_APP_NAME)
    except ValueError:
        pass

    if settings.firebase_credentials_file:
        cred = credentials.Certificate(settings.firebase_credentials_file)
    else:
        cred = credentials.ApplicationDefault()

    options: dict = {"httpTimeout": settings.firebase_http_timeout_sec}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id

    logger.info("[firebase] initializing app project=%s", settings.firebase_project_id or "<default>")
    return firebase_admin.initialize_app(cred, options=options, name=_APP_NAME)
