import firebase_admin
from firebase_admin import auth


class FirebaseTokenVerifier:
    """Verifies Firebase ID tokens against Google's public key set."""

    def __init__(self, app: firebase_admin.App, check_revoked: bool = False):
        self._app = app
        self._check_revoked = check_revoked

    def verify(self, token: str) -> dict:
        # Raises InvalidIdTokenError / ExpiredIdTokenError / CertificateFetchError ...
        return auth.verify_id_token(token, app=self._app, check_revoked=self._check_revoked)
