"""
User list and detail routes for the userdir application
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from userdir.client import DirectoryClient, DirectoryError, UserNotFoundError
from userdir.models import PagedUsers, User
from userdir.search import NOT_FOUND_MESSAGE
from userdir.services import get_directory

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/users", response_model=PagedUsers, tags=["Users"])
async def list_users(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    directory: DirectoryClient = Depends(get_directory),
):
    """
    List one page of the user directory

    - **page**: Page number, starting at 1
    """
    try:
        return await directory.fetch_users(page)
    except DirectoryError as e:
        logger.warning(f"Error loading users page {page}: {e}")
        raise HTTPException(
            status_code=502,
            detail="Failed to load users. Please try again."
        )


@router.get("/users/{user_id}", response_model=User, tags=["Users"])
async def get_user(
    user_id: int = Path(..., ge=0, description="User ID"),
    directory: DirectoryClient = Depends(get_directory),
):
    """
    Get details for a single user

    - **user_id**: The directory user id
    """
    try:
        return await directory.fetch_user_by_id(user_id)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)
    except DirectoryError as e:
        logger.warning(f"Error loading user {user_id}: {e}")
        raise HTTPException(
            status_code=502,
            detail="Failed to load user details. Please try again."
        )
