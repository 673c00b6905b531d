"""Property management routes."""

from typing import List

from fastapi import APIRouter, Depends, status

from . import schemas
from .coordinator import RefreshCoordinator, get_coordinator

router = APIRouter(prefix="/properties", tags=["properties"])


@router.get("/", response_model=List[schemas.PropertyOut])
def list_properties(coordinator: RefreshCoordinator = Depends(get_coordinator)):
    """
    Retrieve every property with its owner's name and email.

    Args:
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        list[PropertyOut]: All properties.
    """
    return coordinator.list_properties()


@router.get("/{property_id}", response_model=schemas.PropertyOut)
def get_property(
    property_id: int, coordinator: RefreshCoordinator = Depends(get_coordinator)
):
    """
    Retrieve one property by ID.

    Args:
        property_id (int): Property identifier.
        coordinator (RefreshCoordinator): Application coordinator.

    Raises:
        NotFoundError: If the property does not exist (404).

    Returns:
        PropertyOut: The property with its owner details.
    """
    return coordinator.get_property(property_id)


@router.post("/", response_model=schemas.PropertyOut, status_code=status.HTTP_201_CREATED)
def create_property(
    property_in: schemas.PropertyCreate,
    coordinator: RefreshCoordinator = Depends(get_coordinator),
):
    """
    Create a new property for an existing owner.

    Args:
        property_in (PropertyCreate): Property input data.
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        PropertyOut: Created property.
    """
    return coordinator.add_property(property_in.to_entity())


@router.put("/{property_id}", response_model=schemas.PropertyOut)
def replace_property(
    property_id: int,
    property_in: schemas.PropertyUpdate,
    coordinator: RefreshCoordinator = Depends(get_coordinator),
):
    """
    Replace every field of an existing property.

    Args:
        property_id (int): Property identifier.
        property_in (PropertyUpdate): New property data.
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        PropertyOut: Updated property.
    """
    return coordinator.update_property(property_in.to_entity(property_id))


@router.delete("/{property_id}", response_model=schemas.DeleteResult)
def remove_property(
    property_id: int, coordinator: RefreshCoordinator = Depends(get_coordinator)
):
    """
    Delete a property. Deleting an unknown ID reports zero rows.

    Args:
        property_id (int): Property identifier.
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        DeleteResult: Number of properties removed.
    """
    return {"deleted": coordinator.delete_property(property_id)}
