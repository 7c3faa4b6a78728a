"""Family chat API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from cleanquest.api.deps import get_current_user, get_device, get_selected_family
from cleanquest.device import Device
from cleanquest.schemas.auth import SessionUser
from cleanquest.schemas.chat import ChatLogResponse, ChatSendRequest, ChatSendResponse
from cleanquest.schemas.family import FamilyProfile
from cleanquest.services.chat_service import MessageTooLong

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("", response_model=ChatLogResponse)
def get_chat(
    family: FamilyProfile = Depends(get_selected_family),
    device: Device = Depends(get_device),
):
    """Chat of the selected family, in the order this device appended it."""
    return ChatLogResponse(family_id=family.id, messages=device.chats.list_messages(family.id))


@router.post("", response_model=ChatSendResponse)
async def send_message(
    request: ChatSendRequest,
    user: SessionUser = Depends(get_current_user),
    family: FamilyProfile = Depends(get_selected_family),
    device: Device = Depends(get_device),
):
    """Send a message. Blank messages are ignored."""
    try:
        message = await device.chats.append(family, user.username, request.text)
    except MessageTooLong as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ChatSendResponse(sent=message is not None, message=message)


@router.post("/refresh", response_model=ChatLogResponse)
async def refresh_chat(
    family: FamilyProfile = Depends(get_selected_family),
    device: Device = Depends(get_device),
):
    """Reload the chat from the remote registry, sorted by timestamp."""
    messages = await device.chats.load_remote(family)
    return ChatLogResponse(family_id=family.id, messages=messages)
