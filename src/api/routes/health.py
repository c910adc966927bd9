"""
Health check API route
"""

from datetime import datetime
from fastapi import APIRouter, HTTPException, Depends
from services.users_service import UsersService, StorageUnavailableError, get_users_service

router = APIRouter()

@router.get("")
async def health_check(users_service: UsersService = Depends(get_users_service)):
    """Health check - reports whether the database answers"""
    try:
        await users_service.ping()
    except StorageUnavailableError as e:
        raise HTTPException(status_code=503, detail=f"Health check failed: {str(e)}")

    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "database": "connected"
    }
