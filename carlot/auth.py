# carlot/auth.py
"""Bearer-token checks against the external identity provider.

Tokens are issued elsewhere; here they are only parsed and verified, either
against the provider's JWKS (RS256) or a shared secret (HS256) for local runs.
"""
from typing import Any, Dict, Optional, Tuple

import jwt

from . import config
from .errors import AuthError
from .utils import logger

_jwks_client = None


def parse_auth_header(auth_header: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    if not auth_header:
        return None, None
    parts = auth_header.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1], "bearer"
    return None, None


def _get_jwks_client():
    global _jwks_client
    if _jwks_client is None:
        _jwks_client = jwt.PyJWKClient(config.AUTH_JWKS_URL)
    return _jwks_client


def _decode_options() -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {}
    if config.AUTH_AUDIENCE:
        kwargs["audience"] = config.AUTH_AUDIENCE
    else:
        kwargs["options"] = {"verify_aud": False}
    if config.AUTH_ISSUER:
        kwargs["issuer"] = config.AUTH_ISSUER
    return kwargs


def verify_token(token: str) -> Dict[str, Any]:
    try:
        if config.AUTH_JWKS_URL:
            key = _get_jwks_client().get_signing_key_from_jwt(token).key
            return jwt.decode(token, key, algorithms=["RS256"], **_decode_options())
        if config.AUTH_JWT_SECRET:
            return jwt.decode(token, config.AUTH_JWT_SECRET, algorithms=["HS256"], **_decode_options())
    except jwt.PyJWTError as e:
        logger.warning("Token verification failed: %s", e)
        raise AuthError("Unauthorized: Invalid token.", status_code=403) from e
    raise AuthError("Identity provider is not configured.", status_code=403)


def authenticate(auth_header: Optional[str]) -> Dict[str, Any]:
    token, _scheme = parse_auth_header(auth_header)
    if not token:
        raise AuthError("Unauthorized: Missing or invalid token.", status_code=401)
    return verify_token(token)
