"""Membership: attaching a user's questionnaire profile to a family."""

import logging

from cleanquest.schemas.auth import SessionUser
from cleanquest.schemas.family import DAYS, DayAvailability, FamilyProfile, Member, Strength
from cleanquest.services.chat_service import ChatLogService
from cleanquest.services.family_service import FamilyRegistryService

logger = logging.getLogger(__name__)

DEFAULT_STRENGTHS = ("Cleaning", "Cooking", "Laundry", "Shopping", "Repairs", "Garden")


def default_availability() -> list[DayAvailability]:
    return [DayAvailability(day=day) for day in DAYS]


def default_strengths() -> list[Strength]:
    return [Strength(id=str(i), name=name) for i, name in enumerate(DEFAULT_STRENGTHS, start=1)]


def normalize_availability(availability: list[DayAvailability]) -> list[DayAvailability]:
    """Exactly one entry per day, Monday first. Repeated days merge their hours."""
    hours: dict[str, set[str]] = {day: set() for day in DAYS}
    for entry in availability:
        hours[entry.day].update(entry.hours)
    return [DayAvailability(day=day, hours=sorted(hours[day])) for day in DAYS]


class MembershipAggregator:
    def __init__(self, families: FamilyRegistryService, chats: ChatLogService):
        self.families = families
        self.chats = chats

    async def attach(
        self,
        family: FamilyProfile,
        user: SessionUser,
        availability: list[DayAvailability],
        strengths: list[Strength],
    ) -> FamilyProfile:
        """Append the user as a new member and write the whole record.

        The first member becomes admin. Not idempotent: attaching the same
        user twice adds two members.
        """
        member = Member(
            id=user.id,
            username=user.username,
            age=user.age,
            availability=normalize_availability(availability),
            strengths=list(strengths),
        )
        updated = family.model_copy(update={"members": [*family.members, member]})
        if not family.members:
            updated.admin = member.id

        saved = await self.families.save(updated)
        self.chats.ensure_log(saved.id)
        logger.info(
            "Member %s attached to family %s (%d members, admin=%s)",
            member.id, saved.code, len(saved.members), saved.admin,
        )
        return saved
