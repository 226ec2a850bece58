"""Firebase ID token verification.

Tokens are checked against Google's published signing certificates with
google-auth. The certificate fetch goes through a cached ``requests``
session so the keys are only downloaded again when their cache headers
expire. Only the fetch is serialized; signatures are checked outside the
session lock.
"""
import json
import logging
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Dict, Optional, Union

import cachecontrol
import google.auth.exceptions
import google.auth.jwt
import google.auth.transport.requests
import requests
from google.oauth2 import service_account

from .errors import IdentityProviderError, Unauthenticated

log = logging.getLogger(__name__)

CERTS_URL = "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
ISSUER_PREFIX = "https://securetoken.google.com/"
MAX_UID_LENGTH = 128


class IdentityVerifier:
    """Resolve a Firebase ID token to the uid of its subject."""

    def __init__(self, project_id: str, session: Optional[requests.Session] = None):
        self.project_id = project_id
        self._session = session or cachecontrol.CacheControl(requests.session())
        self._lock = RLock()

    @classmethod
    def from_service_account_file(
        cls, path: Union[str, Path], project_id: Optional[str] = None
    ) -> "IdentityVerifier":
        try:
            credentials = service_account.Credentials.from_service_account_file(str(path))
        except (OSError, ValueError) as ex:
            raise IdentityProviderError(f"error initializing firebase app: {ex}") from ex
        project_id = project_id or credentials.project_id
        if not project_id:
            raise IdentityProviderError(f"no project id in {path}")
        log.info("Firebase token verification ready for project %s", project_id)
        return cls(project_id)

    @contextmanager
    def locked_session(self):
        # requests sessions are not documented as thread safe
        with self._lock:
            yield self._session

    def fetch_certs(self) -> Dict[str, str]:
        """Return the current key id to certificate mapping."""
        with self.locked_session() as session:
            request = google.auth.transport.requests.Request(session=session)
            response = request(CERTS_URL, method="GET")
        if response.status != 200:
            raise google.auth.exceptions.TransportError(
                f"could not fetch certificates at {CERTS_URL}: HTTP {response.status}"
            )
        return json.loads(response.data)

    def verify(self, token: str) -> str:
        if not token:
            raise Unauthenticated("empty token")
        try:
            certs = self.fetch_certs()
            claims = google.auth.jwt.decode(token, certs=certs, audience=self.project_id)
        except (ValueError, google.auth.exceptions.GoogleAuthError) as ex:
            log.debug("verify(): token rejected: %s", ex)
            raise Unauthenticated(str(ex)) from ex

        if not claims:
            raise Unauthenticated("no claims in token")
        issuer = ISSUER_PREFIX + self.project_id
        if claims.get("iss") != issuer:
            raise Unauthenticated(f"token has incorrect issuer {claims.get('iss')!r}, expected {issuer!r}")
        uid = claims.get("sub")
        if not isinstance(uid, str) or not uid:
            raise Unauthenticated("token has no subject")
        if len(uid) > MAX_UID_LENGTH:
            raise Unauthenticated("token subject is longer than 128 characters")
        return uid
