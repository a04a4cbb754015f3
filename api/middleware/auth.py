"""
Authentication for the Nester property chat API.

Agent-facing routes identify the calling agent either from a JWT bearer
token (`sub` claim) or, for trusted server-to-server callers holding the
API key, from the X-Agent-Id header.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader, HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from config.settings import get_settings

logger = logging.getLogger(__name__)

# ── Security schemes ───────────────────────────────────────────────
API_KEY_HEADER = "X-API-Key"
AGENT_ID_HEADER = "X-Agent-Id"

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)
agent_id_header = APIKeyHeader(name=AGENT_ID_HEADER, auto_error=False)
bearer_scheme = HTTPBearer(auto_error=False)


# ── JWT ────────────────────────────────────────────────────────────

def create_jwt_token(agent_id: str, **claims: Any) -> Tuple[str, int]:
    """
    Create a JWT token for an agent.

    Returns:
        Tuple of (token_string, expires_in_seconds)
    """
    s = get_settings()
    expires = datetime.utcnow() + timedelta(minutes=s.jwt_expire_minutes)
    payload = {**claims, "sub": agent_id, "exp": expires}
    token = jwt.encode(payload, s.jwt_secret_key, algorithm=s.jwt_algorithm)
    return token, s.jwt_expire_minutes * 60


def decode_jwt_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token."""
    s = get_settings()
    try:
        return jwt.decode(token, s.jwt_secret_key, algorithms=[s.jwt_algorithm])
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {e}",
        )


# ── Dependencies ──────────────────────────────────────────────────

async def get_current_agent(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    header_key: Optional[str] = Security(api_key_header),
    agent_id: Optional[str] = Security(agent_id_header),
) -> str:
    """
    Resolve the calling agent's id.

    Order: JWT bearer token, then API key + X-Agent-Id. With no API key
    configured (development mode) X-Agent-Id alone is trusted.
    """
    if credentials and credentials.credentials:
        payload = decode_jwt_token(credentials.credentials)
        sub = payload.get("sub")
        if not sub:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has no subject",
            )
        return sub

    expected_key = get_settings().nester_api_key
    if expected_key and header_key != expected_key:
        if header_key:
            logger.warning("Invalid API key attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not agent_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    if not expected_key:
        logger.debug("API key authentication disabled - trusting X-Agent-Id")
    return agent_id
