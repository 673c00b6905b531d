"""User management routes."""

from typing import List

from fastapi import APIRouter, Depends, status

from . import schemas
from .coordinator import RefreshCoordinator, get_coordinator

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=List[schemas.UserOut])
def list_users(coordinator: RefreshCoordinator = Depends(get_coordinator)):
    """
    Retrieve every user in insertion order.

    Args:
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        list[UserOut]: All users.
    """
    return coordinator.list_users()


@router.get("/{user_id}", response_model=schemas.UserOut)
def get_user(user_id: int, coordinator: RefreshCoordinator = Depends(get_coordinator)):
    """
    Retrieve a single user by ID.

    Args:
        user_id (int): User identifier.
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        UserOut: User data.
    """
    return coordinator.get_user(user_id)


@router.post("/", response_model=schemas.UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: schemas.UserCreate,
    coordinator: RefreshCoordinator = Depends(get_coordinator),
):
    """
    Create a new user.

    Args:
        user_in (UserCreate): User input data.
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        UserOut: Created user with its assigned ID.
    """
    return coordinator.add_user(user_in.to_entity())


@router.put("/{user_id}", response_model=schemas.UserOut)
def replace_user(
    user_id: int,
    user_in: schemas.UserUpdate,
    coordinator: RefreshCoordinator = Depends(get_coordinator),
):
    """
    Replace the name and email of an existing user.

    Args:
        user_id (int): User identifier.
        user_in (UserUpdate): New user data.
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        UserOut: Updated user.
    """
    return coordinator.update_user(user_in.to_entity(user_id))


@router.delete("/{user_id}", response_model=schemas.DeleteResult)
def remove_user(user_id: int, coordinator: RefreshCoordinator = Depends(get_coordinator)):
    """
    Delete a user together with all of its properties.

    Args:
        user_id (int): User identifier.
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        DeleteResult: Number of users removed.
    """
    return {"deleted": coordinator.delete_user(user_id)}
