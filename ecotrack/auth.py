import secrets
from typing import Optional
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from ecotrack.constants import USER_ID_HEADER, VERIFIER_API_KEY, VERIFIER_KEY_HEADER
from ecotrack.database import get_db
from ecotrack.repositories.user_repository import UserRepository

# Caller identity is passed in a header by the mobile client
user_id_header = APIKeyHeader(name=USER_ID_HEADER, auto_error=False)

# Only the action verification service holds this key
verifier_key_header = APIKeyHeader(name=VERIFIER_KEY_HEADER, auto_error=False)


def _parse_user_id(raw: str) -> int:
    try:
        user_id = int(raw)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {USER_ID_HEADER} header"
        )
    if user_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {USER_ID_HEADER} header"
        )
    return user_id


async def get_optional_user_id(raw_user_id: Optional[str] = Security(user_id_header)) -> Optional[int]:
    """User id from the header, or None when the header is absent"""
    if not raw_user_id:
        return None
    return _parse_user_id(raw_user_id)


async def get_current_user_id(
    raw_user_id: Optional[str] = Security(user_id_header),
    db: Session = Depends(get_db)
) -> int:
    """Verify the header names an existing user"""
    if not raw_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {USER_ID_HEADER} header"
        )
    user_id = _parse_user_id(raw_user_id)
    if not UserRepository.get_by_id(db, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No user found")
    return user_id


async def verify_reviewer_key(api_key: Optional[str] = Security(verifier_key_header)):
    """Verify the API key of the action verification service"""
    if not VERIFIER_API_KEY or not api_key or not secrets.compare_digest(api_key, VERIFIER_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API Key"
        )
    return api_key
