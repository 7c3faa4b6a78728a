"""Common API dependencies: device services, logged-in user, selected family."""

from fastapi import Depends, HTTPException, Request, status

from cleanquest.device import Device
from cleanquest.schemas.auth import SessionUser
from cleanquest.schemas.family import FamilyProfile


def get_device(request: Request) -> Device:
    """The services of the device this process represents."""
    return request.app.state.device


def get_current_user(device: Device = Depends(get_device)) -> SessionUser:
    """Require a logged-in user on this device."""
    user = device.session.current_user()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Login required",
        )
    return user


def get_selected_family(
    user: SessionUser = Depends(get_current_user),
    device: Device = Depends(get_device),
) -> FamilyProfile:
    """Require a selected family for the logged-in user."""
    family = device.session.selected_family()
    if not family:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No family selected",
        )
    return family
