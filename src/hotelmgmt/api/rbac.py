"""Role checks for customers, hotel staff and administrators.

Provides:
- Roles: customer, hotel_admin (scoped to users.hotel_id), admin (all hotels)
- can_manage_hotel(): whether a user may act on a hotel's reservations
- require_hotel_staff(): FastAPI dependency for hotel-scoped staff endpoints
- get_current_guest(): FastAPI dependency resolving the caller's guest profile
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from fastapi import Depends, HTTPException, Path

from hotelmgmt.api.auth import (
    ROLE_ADMIN,
    ROLE_CUSTOMER,
    ROLE_HOTEL_ADMIN,
    CurrentUser,
    get_current_user,
)


@dataclass
class HotelStaffContext:
    """Context returned by require_hotel_staff."""

    user: CurrentUser
    hotel_id: int


@dataclass
class GuestContext:
    """Context returned by get_current_guest."""

    user: CurrentUser
    guest_id: int


def can_manage_hotel(user: CurrentUser, hotel_ids: Iterable[int]) -> bool:
    """Admins manage every hotel; hotel admins only their own."""
    if user.role == ROLE_ADMIN:
        return True
    if user.role == ROLE_HOTEL_ADMIN and user.hotel_id is not None:
        return user.hotel_id in set(hotel_ids)
    return False


def require_hotel_staff(
    hotel_id: int = Path(..., description="Hotel ID"),
    user: CurrentUser = Depends(get_current_user),
) -> HotelStaffContext:
    """FastAPI dependency: caller must administer the hotel in the path.

    Usage:
        @router.get("/hotels/{hotel_id}/something")
        def endpoint(ctx: HotelStaffContext = Depends(require_hotel_staff)):
            ...
    """
    if user.role not in (ROLE_ADMIN, ROLE_HOTEL_ADMIN):
        raise HTTPException(status_code=403, detail="Insufficient role")

    if not can_manage_hotel(user, [hotel_id]):
        raise HTTPException(status_code=403, detail="No access to hotel")

    return HotelStaffContext(user=user, hotel_id=hotel_id)


def _get_guest_id_for_user(user_id: str) -> int | None:
    from hotelmgmt.infra.db import txn
    from hotelmgmt.infra.repositories.guests_repository import get_guest_id_for_user

    with txn() as cur:
        return get_guest_id_for_user(cur, user_id)


def resolve_guest_id(user: CurrentUser) -> int | None:
    """Guest profile of a customer; None for staff or customers without one."""
    if user.role != ROLE_CUSTOMER:
        return None
    return _get_guest_id_for_user(user.id)


def get_current_guest(user: CurrentUser = Depends(get_current_user)) -> GuestContext:
    """FastAPI dependency: caller must be a customer with a guest profile.

    Raises:
        HTTPException: 403 if the user is not a customer or has no guest profile.
    """
    if user.role != ROLE_CUSTOMER:
        raise HTTPException(status_code=403, detail="Insufficient role")

    guest_id = resolve_guest_id(user)
    if guest_id is None:
        raise HTTPException(status_code=403, detail="Guest profile not found")

    return GuestContext(user=user, guest_id=guest_id)
