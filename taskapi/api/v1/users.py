from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from taskapi.database import get_db
from taskapi.dependencies import get_current_user, get_user_service
from taskapi.models.user import User
from taskapi.schemas.user import UserUpdateRequest, UserTasksType
from taskapi.schemas.common import success_response, paginated_response
from taskapi.services.user_service import UserService

router = APIRouter(prefix="/users")


# GET /users
@router.get("", status_code=status.HTTP_200_OK, summary="List all users (paginated)")
def list_users(
    page:   int           = Query(1,    ge=1),
    limit:  int           = Query(20,   ge=1, le=100),
    search: Optional[str] = Query(None, description="Search by name or email"),
    db:     Session       = Depends(get_db),
    _:      User          = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    data, total = user_service.list_users(db, page, limit, search)
    return paginated_response("Users retrieved successfully", data, total, page, limit)


# GET /users/profile — the caller's own profile
@router.get("/profile", status_code=status.HTTP_200_OK, summary="Get current user profile")
def get_profile(
    db:           Session = Depends(get_db),
    current_user: User    = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    data = user_service.get_user(db, current_user.id)
    return success_response("Profile retrieved", data)


# GET /users/{id}
@router.get("/{user_id}", status_code=status.HTTP_200_OK, summary="Get user by ID")
def get_user(
    user_id: UUID,
    db:      Session = Depends(get_db),
    _:       User    = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    data = user_service.get_user(db, str(user_id))
    return success_response("User retrieved", data)


# GET /users/{id}/tasks?type=authored|assigned
@router.get("/{user_id}/tasks", status_code=status.HTTP_200_OK, summary="List tasks of a user")
def get_user_tasks(
    user_id: UUID,
    type:    Optional[UserTasksType] = Query(None, description="authored | assigned"),
    db:      Session = Depends(get_db),
    _:       User    = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    data = user_service.get_user_tasks(db, str(user_id), type.value if type else None)
    return success_response("User tasks retrieved", data)


# PUT /users/{id} — owner only
@router.put("/{user_id}", status_code=status.HTTP_200_OK, summary="Update user")
def update_user(
    user_id: UUID,
    body:    UserUpdateRequest,
    db:      Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    data = user_service.update_user(db, str(user_id), body, current_user.id)
    return success_response("User updated successfully", data)


# DELETE /users/{id} — owner only
@router.delete("/{user_id}", status_code=status.HTTP_200_OK, summary="Delete user")
def delete_user(
    user_id: UUID,
    db:      Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    user_service.delete_user(db, str(user_id), current_user.id)
    return success_response("User deleted successfully", None)
