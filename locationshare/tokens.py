"""Issue Firebase ID tokens for test users.

The protected routes only accept ID tokens, which Firebase hands out to
signed-in clients. For local testing we sign in on the user's behalf:

1. create (or find) a user for a phone number with the Identity Toolkit
   admin API, authorised by the service account,
2. mint a custom token for that uid, signed with the service account key,
3. exchange the custom token for an ID token with the project's Web API key
   (``FIREBASE_API_KEY``).

Nothing in the request path uses this module.
"""
import json
import logging
import re
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

import google.auth.jwt
import requests
from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

log = logging.getLogger(__name__)

PHONE_RE = re.compile(r"^\+[1-9]\d{1,14}$")

IDENTITY_TOOLKIT = "https://identitytoolkit.googleapis.com/v1"
CUSTOM_TOKEN_AUDIENCE = (
    "https://identitytoolkit.googleapis.com/google.identity.identitytoolkit.v1.IdentityToolkit"
)
CUSTOM_TOKEN_LIFETIME = 3600
SCOPES = [
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/identitytoolkit",
]
TIMEOUT = 10


class TokenIssueError(Exception):
    """A step of issuing a test token failed."""


class InvalidPhoneNumber(TokenIssueError):
    pass


def validate_phone_number(phone_number: str) -> None:
    """Raise unless ``phone_number`` is in E.164 format."""
    if not PHONE_RE.match(phone_number or ""):
        raise InvalidPhoneNumber("invalid phone number format")


def _json(response: requests.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError as ex:
        raise TokenIssueError(f"error parsing response: {ex}") from ex
    error = body.get("error") if isinstance(body, dict) else None
    if error:
        message = error.get("message") if isinstance(error, dict) else error
        raise TokenIssueError(f"error from Firebase: {message}")
    return body


class TokenIssuer:
    def __init__(
        self,
        credentials: service_account.Credentials,
        api_key: Optional[str] = None,
        admin_session: Optional[requests.Session] = None,
        http: Optional[requests.Session] = None,
    ):
        self.credentials = credentials
        self.api_key = api_key
        self.project_id = credentials.project_id
        self._admin = admin_session or AuthorizedSession(credentials.with_scopes(SCOPES))
        self._http = http or requests.Session()

    @classmethod
    def from_service_account_file(
        cls, path: Union[str, Path], api_key: Optional[str] = None
    ) -> "TokenIssuer":
        log.info("Loading service account from: %s", path)
        try:
            credentials = service_account.Credentials.from_service_account_file(str(path))
        except (OSError, ValueError) as ex:
            raise TokenIssueError(f"error initializing app: {ex}") from ex
        return cls(credentials, api_key)

    def _admin_post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{IDENTITY_TOOLKIT}/projects/{self.project_id}/{path}"
        try:
            response = self._admin.post(url, json=body, timeout=TIMEOUT)
        except requests.RequestException as ex:
            raise TokenIssueError(f"error calling {path}: {ex}") from ex
        return _json(response)

    def get_or_create_phone_user(self, phone_number: str) -> str:
        try:
            return self._admin_post("accounts", {"phoneNumber": phone_number})["localId"]
        except (TokenIssueError, KeyError) as ex:
            log.info("User creation failed, trying to get existing user: %s", ex)
        users = self._admin_post("accounts:lookup", {"phoneNumber": [phone_number]}).get("users")
        if not users:
            raise TokenIssueError(f"error getting user by phone: no user with {phone_number}")
        return users[0]["localId"]

    def set_custom_claims(self, uid: str, claims: Dict[str, Any]) -> None:
        self._admin_post("accounts:update", {"localId": uid, "customAttributes": json.dumps(claims)})

    def mint_custom_token(self, uid: str, claims: Optional[Dict[str, Any]] = None) -> str:
        """Sign a custom token for ``uid`` with the service account key."""
        now = int(time.time())
        email = self.credentials.signer_email
        payload: Dict[str, Any] = {
            "iss": email,
            "sub": email,
            "aud": CUSTOM_TOKEN_AUDIENCE,
            "iat": now,
            "exp": now + CUSTOM_TOKEN_LIFETIME,
            "uid": uid,
        }
        if claims:
            payload["claims"] = claims
        return google.auth.jwt.encode(self.credentials.signer, payload).decode("utf-8")

    def exchange_custom_token(self, custom_token: str) -> str:
        if not self.api_key:
            raise TokenIssueError("FIREBASE_API_KEY environment variable not set")
        log.info("Exchanging custom token for ID token...")
        try:
            response = self._http.post(
                f"{IDENTITY_TOOLKIT}/accounts:signInWithCustomToken",
                params={"key": self.api_key},
                json={"token": custom_token, "returnSecureToken": True},
                timeout=TIMEOUT,
            )
        except requests.RequestException as ex:
            raise TokenIssueError(f"error exchanging token: {ex}") from ex
        id_token = _json(response).get("idToken")
        if not id_token:
            raise TokenIssueError("no ID token in response")
        return id_token

    def issue_phone_token(self, phone_number: str, code: str) -> str:
        """Sign in as the user owning ``phone_number`` and return an ID token.

        Any non-empty verification code is accepted.
        """
        validate_phone_number(phone_number)
        if not code:
            raise TokenIssueError("verification code is required")
        uid = self.get_or_create_phone_user(phone_number)
        self.set_custom_claims(uid, {"phone_verified": True, "phone_number": phone_number})
        id_token = self.exchange_custom_token(self.mint_custom_token(uid))
        log.info("Successfully generated ID token for %s", uid)
        return id_token
