"""Optional bearer-token gate for protected endpoints."""
import logging
from typing import Any, Callable, Dict, Optional

import jwt

TokenVerifier = Callable[[str], Dict[str, Any]]


class AuthError(Exception):
    """Raised when a request carries no valid bearer token."""
    pass


class Auth0TokenVerifier:
    """Validates RS256 access tokens issued by an Auth0 tenant."""

    def __init__(self, domain: str, audience: str):
        self.domain = domain
        self.audience = audience
        self.issuer = f"https://{domain}/"
        self._jwks_client = jwt.PyJWKClient(f"https://{domain}/.well-known/jwks.json", cache_keys=True)

    def __call__(self, token: str) -> Dict[str, Any]:
        try:
            signing_key = self._jwks_client.get_signing_key_from_jwt(token)
            return jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self.audience,
                issuer=self.issuer,
            )
        except jwt.PyJWTError as exc:
            raise AuthError(f"Invalid token: {exc}") from exc


class BearerAuthorizer:
    """Extracts the bearer token from an Authorization header and verifies it."""

    def __init__(self, verifier: TokenVerifier):
        self.verifier = verifier

    def authorize(self, header: Optional[str]) -> Dict[str, Any]:
        """
        Returns:
            The verified token claims

        Raises:
            AuthError: If the header is missing, malformed, or the token fails
                verification
        """
        if not header:
            raise AuthError("Missing Authorization header")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise AuthError("Authorization header must be 'Bearer <token>'")
        claims = self.verifier(token.strip())
        logging.debug("Authorized request for subject %s", claims.get("sub"))
        return claims


def build_authorizer(domain: Optional[str], audience: Optional[str]) -> Optional[BearerAuthorizer]:
    """Gate enabled only when both the Auth0 domain and audience are configured."""
    if domain and audience:
        logging.info("JWT validation enabled for domain %s", domain)
        return BearerAuthorizer(Auth0TokenVerifier(domain, audience))
    logging.warning("AUTH0_DOMAIN/AUTH0_AUDIENCE not set, comfort index endpoint is unauthenticated")
    return None
