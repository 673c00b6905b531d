"""Routes exposing the filtered, sorted and paginated property view."""

from fastapi import APIRouter, Depends, Query

from . import schemas
from .coordinator import RefreshCoordinator, get_coordinator
from .query_view import FilterDimension

router = APIRouter(prefix="/view", tags=["view"])


@router.get("/", response_model=schemas.PageOut)
def read_page(
    page: int | None = Query(None, ge=0),
    coordinator: RefreshCoordinator = Depends(get_coordinator),
):
    """
    Return a page of the view.

    Without ``page`` the currently selected page is returned.

    Args:
        page (int | None): Page index to select (0-based).
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        PageOut: Rows of the page and the view state.
    """
    if page is None:
        return schemas.PageOut.from_page(coordinator.current_page())
    return schemas.PageOut.from_page(coordinator.get_page(page))


@router.put("/filters/{dimension}", response_model=schemas.PageOut)
def set_filter(
    dimension: FilterDimension,
    filter_in: schemas.FilterValue,
    coordinator: RefreshCoordinator = Depends(get_coordinator),
):
    """
    Change one filter input. The view returns to its first page.

    Args:
        dimension (FilterDimension): Filter to change.
        filter_in (FilterValue): New raw filter text.
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        PageOut: First page of the refiltered view.
    """
    return schemas.PageOut.from_page(coordinator.set_filter(dimension, filter_in.value))


@router.delete("/filters", response_model=schemas.PageOut)
def clear_filters(coordinator: RefreshCoordinator = Depends(get_coordinator)):
    """
    Reset every filter input. The view returns to its first page.

    Args:
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        PageOut: First page of the unfiltered view.
    """
    return schemas.PageOut.from_page(coordinator.clear_filters())


@router.put("/sort", response_model=schemas.PageOut)
def set_sort(
    sort_in: schemas.SortRequest,
    coordinator: RefreshCoordinator = Depends(get_coordinator),
):
    """
    Replace the sort order. The view returns to its first page.

    Args:
        sort_in (SortRequest): Sort keys, most significant first.
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        PageOut: First page of the resorted view.
    """
    return schemas.PageOut.from_page(coordinator.set_sort(sort_in.to_keys()))


@router.post("/refresh", response_model=schemas.PageOut)
def refresh(coordinator: RefreshCoordinator = Depends(get_coordinator)):
    """
    Reload users and properties from the store.

    Args:
        coordinator (RefreshCoordinator): Application coordinator.

    Returns:
        PageOut: First page of the reloaded view.
    """
    return schemas.PageOut.from_page(coordinator.refresh_all())
