import base64
import binascii
import json
import logging
import os
from typing import Callable, List, Optional, Tuple

from firebase_admin import credentials

from ..config import Settings
from ..notifications.errors import StartupConfigError

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

SETUP_INSTRUCTIONS = """Firebase setup instructions:
1. Download a service account key from the Firebase Console
2. Provide it through one of:
   - GOOGLE_APPLICATION_CREDENTIALS pointing at the key file
   - FIREBASE_SERVICE_ACCOUNT_BASE64 holding the base64 encoded key
   - FIREBASE_PROJECT_ID, FIREBASE_PRIVATE_KEY and FIREBASE_CLIENT_EMAIL
   - FIREBASE_SERVICE_ACCOUNT holding the key as a JSON string
   - a key file at FIREBASE_SERVICE_ACCOUNT_FILE (default: firebase-service-account.json)"""

CredentialProvider = Callable[[Settings], Optional[credentials.Base]]


def _parse_service_account(raw: str) -> dict:
    cert_dict = json.loads(raw)
    # Secrets managers sometimes hand over the JSON double-encoded
    if isinstance(cert_dict, str):
        cert_dict = json.loads(cert_dict)
    if not isinstance(cert_dict, dict):
        raise ValueError("service account must be a JSON object")
    return cert_dict


def from_application_default(settings: Settings) -> Optional[credentials.Base]:
    if not settings.google_application_credentials:
        return None
    logger.info("Using GOOGLE_APPLICATION_CREDENTIALS")
    return credentials.ApplicationDefault()


def from_base64(settings: Settings) -> Optional[credentials.Base]:
    if not settings.firebase_service_account_base64:
        return None
    logger.info("Using base64 encoded service account")
    try:
        raw = base64.b64decode(settings.firebase_service_account_base64).decode("utf-8")
        return credentials.Certificate(_parse_service_account(raw))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise StartupConfigError(f"FIREBASE_SERVICE_ACCOUNT_BASE64 is not a valid service account: {str(e)}") from e


def from_individual_fields(settings: Settings) -> Optional[credentials.Base]:
    if not (settings.firebase_project_id and settings.firebase_private_key and settings.firebase_client_email):
        return None
    logger.info("Using individual environment variables")
    cert_dict = {
        "type": "service_account",
        "project_id": settings.firebase_project_id,
        "private_key": settings.firebase_private_key.replace("\\n", "\n"),
        "client_email": settings.firebase_client_email,
        "token_uri": GOOGLE_TOKEN_URI,
    }
    try:
        return credentials.Certificate(cert_dict)
    except ValueError as e:
        raise StartupConfigError(f"FIREBASE_* variables do not form a valid service account: {str(e)}") from e


def from_json_string(settings: Settings) -> Optional[credentials.Base]:
    if not settings.firebase_service_account:
        return None
    logger.info("Using JSON string from environment variable")
    try:
        return credentials.Certificate(_parse_service_account(settings.firebase_service_account))
    except ValueError as e:
        raise StartupConfigError(f"FIREBASE_SERVICE_ACCOUNT is not a valid service account: {str(e)}") from e


def from_local_file(settings: Settings) -> Optional[credentials.Base]:
    path = settings.firebase_service_account_file
    if not path or not os.path.isfile(path):
        return None
    logger.info(f"Using local service account file {path}")
    try:
        return credentials.Certificate(path)
    except (IOError, ValueError) as e:
        raise StartupConfigError(f"Service account file {path} could not be loaded: {str(e)}") from e


CREDENTIAL_PROVIDERS: List[Tuple[str, CredentialProvider]] = [
    ("application_default", from_application_default),
    ("base64", from_base64),
    ("individual_fields", from_individual_fields),
    ("json_string", from_json_string),
    ("local_file", from_local_file),
]


def resolve_credential(settings: Settings,
                       providers: List[Tuple[str, CredentialProvider]] = None) -> Tuple[str, credentials.Base]:
    """
    Try each credential provider in order and return the first hit.

    Returns:
        Tuple of (provider name, credential)

    Raises:
        StartupConfigError: No provider produced a credential
    """
    for name, provider in providers or CREDENTIAL_PROVIDERS:
        credential = provider(settings)
        if credential is not None:
            return name, credential
    raise StartupConfigError("No Firebase credentials found. Please set up one of the credential methods.")
