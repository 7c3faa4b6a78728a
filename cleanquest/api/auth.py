"""Account & session API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from cleanquest.api.deps import get_device
from cleanquest.device import Device
from cleanquest.schemas.auth import (
    AccountRegisterRequest,
    AccountRegisterResponse,
    LoginRequest,
    SessionResponse,
)
from cleanquest.services.account_service import AccountError

router = APIRouter(tags=["auth"])


@router.post("/accounts/register", response_model=AccountRegisterResponse)
def register_account(request: AccountRegisterRequest, device: Device = Depends(get_device)):
    """Create a local account on this device."""
    try:
        account = device.accounts.register(
            request.username, request.password, request.password_confirm
        )
    except AccountError as e:
        status_code = (
            status.HTTP_409_CONFLICT if e.kind == "UsernameTaken" else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(
            status_code=status_code,
            detail={"error": e.kind, "message": e.message},
        )
    return AccountRegisterResponse(
        username=account.username,
        message="Account created. You can log in now.",
    )


@router.post("/accounts/login", response_model=SessionResponse)
def login(request: LoginRequest, device: Device = Depends(get_device)):
    """Check credentials and start a session."""
    if not request.username.strip() or not request.password.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "CredentialsRequired", "message": "Username and password are required"},
        )
    try:
        user = device.accounts.authenticate(request.username, request.password)
    except AccountError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": e.kind, "message": e.message},
        )
    device.session.set_current_user(user)
    return SessionResponse(logged_in=True, user=user)


@router.post("/accounts/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(device: Device = Depends(get_device)):
    device.session.logout()


@router.get("/session", response_model=SessionResponse)
def get_session_state(device: Device = Depends(get_device)):
    """Session as restored from the local store."""
    user, family = device.session.restore()
    return SessionResponse(logged_in=user is not None, user=user, family=family)
