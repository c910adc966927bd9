"""
User API routes
Each handler runs one storage call and maps service errors to HTTP status codes.
"""

import logging
from typing import List
from fastapi import APIRouter, HTTPException, Depends, Path, Request

from config.settings import MISSING_AGE_REJECT
from models.user import User, UserCreateRequest
from services.users_service import (
    UsersService,
    UserNotFoundError,
    ConstraintViolationError,
    StorageUnavailableError,
    get_users_service,
)

router = APIRouter()
logger = logging.getLogger(__name__)

# ids outside the INT identity column are malformed rather than unknown
USER_ID_MIN = -2**31
USER_ID_MAX = 2**31 - 1


@router.get("", response_model=List[User], status_code=202)
async def list_users(users_service: UsersService = Depends(get_users_service)):
    """List every user"""
    try:
        return await users_service.list_users()
    except StorageUnavailableError as e:
        logger.error(f"Failed to list users: {e}")
        raise HTTPException(status_code=500, detail="Storage error")


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: int = Path(..., ge=USER_ID_MIN, le=USER_ID_MAX),
    users_service: UsersService = Depends(get_users_service)
):
    """Get a user by id"""
    try:
        return await users_service.get_user(user_id)
    except (UserNotFoundError, ConstraintViolationError):
        raise HTTPException(status_code=404, detail="User not found")
    except StorageUnavailableError as e:
        logger.error(f"Failed to get user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Storage error")


@router.post("", response_model=User, status_code=201)
async def create_user(
    request: Request,
    body: UserCreateRequest,
    users_service: UsersService = Depends(get_users_service)
):
    """Create a new user"""
    if body.age is None and request.app.state.settings.missing_age_policy == MISSING_AGE_REJECT:
        raise HTTPException(status_code=400, detail="Field 'age' is required")

    try:
        return await users_service.create_user(name=body.name, age=body.age)
    except ConstraintViolationError as e:
        raise HTTPException(status_code=422, detail=f"User rejected by storage constraint: {e}")
    except StorageUnavailableError as e:
        logger.error(f"Failed to create user: {e}")
        raise HTTPException(status_code=500, detail="Storage error")


@router.delete("/{user_id}", response_model=User)
async def delete_user(
    user_id: int = Path(..., ge=USER_ID_MIN, le=USER_ID_MAX),
    users_service: UsersService = Depends(get_users_service)
):
    """Delete a user and return the deleted record"""
    try:
        return await users_service.delete_user(user_id)
    except (UserNotFoundError, ConstraintViolationError):
        raise HTTPException(status_code=404, detail="User not found")
    except StorageUnavailableError as e:
        logger.error(f"Failed to delete user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Storage error")
