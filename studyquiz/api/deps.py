"""
Shared FastAPI dependencies
"""
from fastapi import Header, HTTPException

from studyquiz.services.gemini_service import gemini_service


async def get_current_user_id(x_user_id: str = Header(None, alias="X-User-Id")) -> str:
    """
    Caller identity forwarded by the authenticating gateway

    Raises:
        HTTPException: 401 when the header is missing
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="User not authenticated")
    return x_user_id.strip()


def get_generator():
    """Quiz generation collaborator"""
    return gemini_service
