"""
User management API routes
All database access goes through the users service layer.
"""

import logging
from typing import List
from fastapi import APIRouter, HTTPException, Depends, Response
from fastapi.responses import JSONResponse

from models.user import User, UserCreateRequest, UserUpdateRequest, MessageResponse
from services.users_service import UsersService, get_users_service

router = APIRouter()
logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"
USER_DELETED = "User deleted successfully"


def _not_found_message() -> JSONResponse:
    return JSONResponse(status_code=404, content={"message": USER_NOT_FOUND})


@router.get("", response_model=List[User])
async def list_users(users_service: UsersService = Depends(get_users_service)):
    """List all users"""
    try:
        result = await users_service.list_users()

        if not result.success:
            raise HTTPException(status_code=500, detail=result.error)

        return [User(**row) for row in result.data]

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to list users: {e}")
        raise HTTPException(status_code=500, detail=f"Service error: {str(e)}")

@router.post("", response_model=User)
async def create_user(
    request: UserCreateRequest,
    users_service: UsersService = Depends(get_users_service)
):
    """Create a new user"""
    try:
        result = await users_service.create_user(name=request.name, email=request.email)

        if not result.success:
            raise HTTPException(status_code=500, detail=result.error)

        return User(**result.data[0])

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create user: {e}")
        raise HTTPException(status_code=500, detail=f"Service error: {str(e)}")

@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    users_service: UsersService = Depends(get_users_service)
):
    """Get user details; 404 with an empty body when the user does not exist"""
    try:
        result = await users_service.get_user(user_id)

        if not result.success:
            if result.error_type == "RESOURCE_NOT_FOUND":
                return Response(status_code=404)
            raise HTTPException(status_code=500, detail=result.error)

        return User(**result.data[0])

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get user: {e}")
        raise HTTPException(status_code=500, detail=f"Service error: {str(e)}")

@router.put("/{user_id}", response_model=User)
async def update_user(
    user_id: str,
    request: UserUpdateRequest,
    users_service: UsersService = Depends(get_users_service)
):
    """Update name and email of a user"""
    try:
        result = await users_service.update_user(user_id, name=request.name, email=request.email)

        if not result.success:
            if result.error_type == "RESOURCE_NOT_FOUND":
                return _not_found_message()
            raise HTTPException(status_code=500, detail=result.error)

        return User(**result.data[0])

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update user: {e}")
        raise HTTPException(status_code=500, detail=f"Service error: {str(e)}")

@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    users_service: UsersService = Depends(get_users_service)
):
    """Delete a user"""
    try:
        result = await users_service.delete_user(user_id)

        if not result.success:
            if result.error_type == "RESOURCE_NOT_FOUND":
                return _not_found_message()
            raise HTTPException(status_code=500, detail=result.error)

        return MessageResponse(message=USER_DELETED)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete user: {e}")
        raise HTTPException(status_code=500, detail=f"Service error: {str(e)}")
