"""
Authentication via Firebase ID tokens.

Clients sign in with Firebase and send the resulting ID token as
``Authorization: Bearer <token>``. The ``require_auth`` decorator verifies
the token with firebase-admin and exposes the caller on ``flask.g``.
"""

import os
import json
import logging
from functools import wraps
from typing import Any, Callable, Dict, Optional

import firebase_admin  # type: ignore[import-untyped]
from firebase_admin import auth as firebase_auth, credentials  # type: ignore[import-untyped]
from flask import current_app, g, request

from .utils.errors import AuthenticationError, AuthorizationError, ServiceUnavailableError

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "inkwell"

# Service-account fields read from FIREBASE_* environment variables
_SERVICE_ACCOUNT_ENV = {
    "project_id": "FIREBASE_PROJECT_ID",
    "private_key_id": "FIREBASE_PRIVATE_KEY_ID",
    "private_key": "FIREBASE_PRIVATE_KEY",
    "client_email": "FIREBASE_CLIENT_EMAIL",
    "client_id": "FIREBASE_CLIENT_ID",
    "client_x509_cert_url": "FIREBASE_CLIENT_CERT_URL",
}


def load_service_account() -> Optional[Dict[str, Any]]:
    """
    Build a Firebase service-account dict from the environment.

    ``FIREBASE_CREDENTIALS_PATH`` (a JSON key file) wins over the individual
    ``FIREBASE_*`` variables. Escaped newlines in the private key are restored.

    Returns:
        Service-account dict, or None if Firebase is not configured
    """
    path = os.getenv("FIREBASE_CREDENTIALS_PATH")
    if path:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    if not os.getenv("FIREBASE_PROJECT_ID") or not os.getenv("FIREBASE_PRIVATE_KEY"):
        return None

    account = {"type": "service_account"}
    for field, env_name in _SERVICE_ACCOUNT_ENV.items():
        account[field] = os.getenv(env_name, "")
    account["private_key"] = account["private_key"].replace("\\n", "\n")
    account["auth_uri"] = "https://accounts.google.com/o/oauth2/auth"
    account["token_uri"] = "https://oauth2.googleapis.com/token"
    account["auth_provider_x509_cert_url"] = "https://www.googleapis.com/oauth2/v1/certs"
    return account


class FirebaseTokenVerifier:
    """Verifies Firebase ID tokens, initializing firebase-admin on first use."""

    def __init__(self, service_account: Optional[Dict[str, Any]] = None):
        self._service_account = service_account
        self._app = None

    def _get_app(self):
        if self._app is not None:
            return self._app
        try:
            self._app = firebase_admin.get_app(FIREBASE_APP_NAME)
            return self._app
        except ValueError:
            pass

        account = self._service_account or load_service_account()
        if not account:
            raise ServiceUnavailableError("auth", "Firebase credentials are not configured")
        self._app = firebase_admin.initialize_app(credentials.Certificate(account), name=FIREBASE_APP_NAME)
        logger.info(f"Initialized Firebase app for project {account.get('project_id')}")
        return self._app

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Verify an ID token.

        Args:
            token: Firebase ID token

        Returns:
            Decoded token claims (always including ``uid``)

        Raises:
            AuthorizationError: If the token is invalid, expired or revoked
        """
        app = self._get_app()
        try:
            return firebase_auth.verify_id_token(token, app=app)
        except (firebase_auth.InvalidIdTokenError, firebase_auth.ExpiredIdTokenError,
                firebase_auth.RevokedIdTokenError, firebase_auth.UserDisabledError, ValueError) as e:
            logger.info(f"Rejected ID token: {e}")
            raise AuthorizationError("Not authorized")
        except firebase_auth.CertificateFetchError as e:
            logger.error(f"Could not fetch Firebase certificates: {e}")
            raise ServiceUnavailableError("auth", "Could not verify credentials right now")


def get_token_verifier():
    """Token verifier for the current app (tests inject one via TOKEN_VERIFIER)."""
    verifier = current_app.config.get("TOKEN_VERIFIER")
    if verifier is None:
        verifier = current_app.extensions["inkwell"]["token_verifier"]
    return verifier


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("No token provided")
    return token.strip()


def require_auth(view: Callable) -> Callable:
    """
    Require a valid Firebase ID token.

    Sets ``g.user`` (decoded claims) and ``g.uid`` before calling the view.

    Raises:
        AuthenticationError: If no bearer token is sent (401)
        AuthorizationError: If the token fails verification (403)
    """
    @wraps(view)
    def wrapper(*args, **kwargs):
        claims = get_token_verifier().verify(_bearer_token())
        uid = claims.get("uid") or claims.get("user_id")
        if not uid:
            raise AuthorizationError("Not authorized")
        g.user = claims
        g.uid = uid
        return view(*args, **kwargs)

    return wrapper


def current_uid() -> str:
    """uid of the authenticated caller."""
    return g.uid
