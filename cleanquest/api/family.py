"""Family, join & questionnaire API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from cleanquest.api.deps import get_current_user, get_device
from cleanquest.device import Device
from cleanquest.schemas.auth import SessionUser
from cleanquest.schemas.family import (
    DAYS,
    TIME_BLOCKS,
    FamilyCreateRequest,
    FamilyCreateResponse,
    FamilyJoinRequest,
    FamilyProfile,
    LaunchLinkResponse,
    MemberAttachRequest,
    QuestionnaireDefaults,
)
from cleanquest.services.family_service import FamilyNameRequired
from cleanquest.services.membership_service import default_availability, default_strengths
from cleanquest.utils.security import normalize_code

router = APIRouter(tags=["family"])

NOT_FOUND_MESSAGE = "Family code not found. Please check the code."


@router.post("/families", response_model=FamilyCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_family(
    request: FamilyCreateRequest,
    user: SessionUser = Depends(get_current_user),
    device: Device = Depends(get_device),
):
    """Create a family and show its join code and share link."""
    try:
        family, link = await device.families.create(request.name)
    except FamilyNameRequired as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    device.session.select_family(family)
    return FamilyCreateResponse(family=family, share_link=link)


@router.get("/families", response_model=list[FamilyProfile])
def list_local_families(device: Device = Depends(get_device)):
    """Families cached on this device."""
    return device.families.local_families()


@router.get("/families/launch", response_model=LaunchLinkResponse)
async def resolve_launch_link(
    url: str = Query(..., description="Launch URL or query string carrying ?join=<CODE>"),
    device: Device = Depends(get_device),
):
    """Pre-fill the join flow from a share link, if its code resolves."""
    code, family = await device.families.resolve_launch_link(url)
    return LaunchLinkResponse(code=code if family else None, family=family)


@router.get("/families/{code}", response_model=FamilyProfile)
async def lookup_family(code: str, device: Device = Depends(get_device)):
    family = await device.families.lookup(code)
    if not family:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    return family


@router.post("/families/join", response_model=FamilyProfile)
async def join_family(
    request: FamilyJoinRequest,
    user: SessionUser = Depends(get_current_user),
    device: Device = Depends(get_device),
):
    """Resolve a join code and select the family. Membership comes with the questionnaire."""
    if not request.code.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Family code is required")
    family = await device.families.join(request.code)
    if not family:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    device.session.select_family(family)
    return family


@router.post("/families/{code}/members", response_model=FamilyProfile)
async def complete_questionnaire(
    code: str,
    request: MemberAttachRequest,
    user: SessionUser = Depends(get_current_user),
    device: Device = Depends(get_device),
):
    """Attach the logged-in user to a family with their availability and strengths.

    Works on the copy of the family this device selected when joining, the
    same way the app does; a member attached meanwhile on another device is
    overwritten.
    """
    code = normalize_code(code)
    family = device.session.selected_family()
    if not family or family.code != code:
        family = await device.families.lookup(code)
    if not family:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)

    member_user = user.model_copy(update={"age": request.age})
    updated = await device.members.attach(
        family,
        member_user,
        request.availability or default_availability(),
        request.strengths,
    )
    device.session.set_current_user(member_user)
    device.session.select_family(updated)
    return updated


@router.get("/questionnaire/defaults", response_model=QuestionnaireDefaults)
def questionnaire_defaults():
    return QuestionnaireDefaults(
        days=list(DAYS),
        time_blocks=list(TIME_BLOCKS),
        availability=default_availability(),
        strengths=default_strengths(),
    )
