"""Gmail OAuth 2.0 credentials for the triage service.

Credentials live in ``credentials_dir``: ``client_secret.json`` (downloaded
from Google Cloud Console) and ``token.json`` (written after the first
consent). Any failure to end up with valid credentials is reported as an
InitializationError, except a missing client secret, which stays a
FileNotFoundError so the entry point can print setup steps.
"""
import logging
from pathlib import Path

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from inbox_triage.errors import InitializationError

logger = logging.getLogger("inbox_triage.auth")
# gmail.modify covers reading threads, relabeling them and sending replies.
SCOPES = ["https://www.googleapis.com/auth/gmail.modify"]
TOKEN_FILE = "token.json"
CLIENT_SECRET_FILE = "client_secret.json"


def _stored_credentials(token_path: Path) -> Credentials | None:
    if not token_path.exists():
        return None
    try:
        return Credentials.from_authorized_user_file(str(token_path), SCOPES)
    except ValueError as e:
        raise InitializationError(f"{token_path} is not a valid authorized-user token: {e}") from e


def _refresh(creds: Credentials, token_path: Path) -> None:
    logger.info("Refreshing expired Gmail token...")
    try:
        creds.refresh(Request())
    except GoogleAuthError as e:
        raise InitializationError(
            f"Gmail token refresh failed ({e}). The grant was probably revoked; "
            f"delete {token_path} and authorize again."
        ) from e


def _consent(client_secret_path: Path) -> Credentials:
    if not client_secret_path.exists():
        raise FileNotFoundError(
            f"Missing {client_secret_path}. Download the OAuth client "
            f"secret (Desktop app) from Google Cloud Console and save it there."
        )
    logger.info("Starting OAuth flow, a browser window will open...")
    try:
        flow = InstalledAppFlow.from_client_secrets_file(str(client_secret_path), SCOPES)
        return flow.run_local_server(port=0)
    except (OAuth2Error, GoogleAuthError, ValueError) as e:
        raise InitializationError(f"Gmail authorization failed: {e}") from e


def load_credentials(credentials_dir: Path, interactive: bool = True) -> Credentials:
    """Return valid Gmail credentials, refreshing or re-authorizing as needed.

    With ``interactive=False`` (cron runs) no browser consent is attempted;
    missing or unusable credentials raise InitializationError instead.
    """
    credentials_dir.mkdir(parents=True, exist_ok=True)
    token_path = credentials_dir / TOKEN_FILE
    creds = _stored_credentials(token_path)
    if creds and creds.valid:
        return creds

    if creds and creds.expired and creds.refresh_token:
        _refresh(creds, token_path)
    elif interactive:
        creds = _consent(credentials_dir / CLIENT_SECRET_FILE)
    else:
        raise InitializationError(
            f"No usable Gmail token in {credentials_dir}; run once interactively to authorize."
        )
    token_path.write_text(creds.to_json())
    logger.info(f"Token saved to {token_path}")
    return creds


def get_gmail_service(credentials_dir: Path, interactive: bool = True):
    creds = load_credentials(credentials_dir, interactive=interactive)
    return build("gmail", "v1", credentials=creds, cache_discovery=False)
