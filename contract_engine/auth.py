"""
Authentication Service

Operators sign in with a bare username; it is mapped to an e-mail under the
organization's login domain before reaching the backend.
"""

import logging

from .exceptions import AuthenticationFailed, ExternalFailure, InvalidInput

logger = logging.getLogger(__name__)

BAD_CREDENTIALS_MARKER = "Invalid login credentials"


class AuthService:
    """Sign-in, sign-up, sign-out and current-user queries."""

    def __init__(self, client, login_domain: str = "contratos.gov"):
        self.client = client
        self.login_domain = login_domain

    def normalize_identifier(self, identifier: str) -> str:
        """'joao.silva' -> 'joao.silva@contratos.gov'; e-mails pass through."""
        identifier = (identifier or "").strip()
        if not identifier:
            raise InvalidInput("username is required")
        if "@" in identifier:
            return identifier
        return f"{identifier}@{self.login_domain}"

    def sign_in(self, identifier: str, password: str) -> dict:
        """
        Returns the backend session. Bad credentials raise AuthenticationFailed
        with a fixed operator-facing message; other failures keep the backend
        message.
        """
        email = self.normalize_identifier(identifier)
        logger.info(f"Sign-in attempt for {email}")
        try:
            return self.client.sign_in_with_password(email, password)
        except ExternalFailure as e:
            if BAD_CREDENTIALS_MARKER in e.message:
                raise AuthenticationFailed(e.status_code) from e
            raise

    def sign_up(self, email: str, password: str) -> dict:
        if "@" not in (email or ""):
            raise InvalidInput("A valid e-mail is required to sign up")
        return self.client.sign_up(email, password)

    def sign_out(self, access_token: str) -> None:
        self.client.sign_out(access_token)

    def current_user(self, access_token: str) -> dict:
        return self.client.get_user(access_token)
