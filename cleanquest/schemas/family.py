"""Family, member and questionnaire schemas."""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
TIME_BLOCKS = ("06-12", "12-18", "18-24")

Day = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

# legacy records carry German day names
GERMAN_DAYS = {
    "montag": "monday",
    "dienstag": "tuesday",
    "mittwoch": "wednesday",
    "donnerstag": "thursday",
    "freitag": "friday",
    "samstag": "saturday",
    "sonntag": "sunday",
}


class DayAvailability(BaseModel):
    day: Day
    hours: list[str] = Field(default_factory=list)

    @field_validator("day", mode="before")
    @classmethod
    def _english_day(cls, day):
        if isinstance(day, str):
            day = day.strip().lower()
            return GERMAN_DAYS.get(day, day)
        return day

    @field_validator("hours")
    @classmethod
    def _known_blocks(cls, hours: list[str]) -> list[str]:
        unknown = [h for h in hours if h not in TIME_BLOCKS]
        if unknown:
            raise ValueError(f"Unknown time block(s): {', '.join(unknown)}")
        # set semantics, kept in block order
        return [b for b in TIME_BLOCKS if b in hours]


class Strength(BaseModel):
    id: str
    name: str
    rating: int = Field(default=0, ge=0, le=5)  # 0 = unrated


class Member(BaseModel):
    id: str
    username: str
    age: int = 0
    availability: list[DayAvailability]
    strengths: list[Strength] = Field(default_factory=list)

    @model_validator(mode="after")
    def _one_entry_per_day(self) -> "Member":
        if tuple(a.day for a in self.availability) != DAYS:
            raise ValueError("availability must have exactly one entry per day, Monday to Sunday")
        return self


class FamilyProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    code: str = Field(pattern=r"^[A-Z0-9]{6}$")
    admin: str = ""  # member id, empty until the first member joins
    members: list[Member] = Field(default_factory=list)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="createdAt"
    )


# --- API payloads ---

class FamilyCreateRequest(BaseModel):
    name: str


class FamilyCreateResponse(BaseModel):
    family: FamilyProfile
    share_link: str


class FamilyJoinRequest(BaseModel):
    code: str


class MemberAttachRequest(BaseModel):
    age: int = Field(default=0, ge=0)
    availability: list[DayAvailability] = Field(default_factory=list)
    strengths: list[Strength] = Field(default_factory=list)


class QuestionnaireDefaults(BaseModel):
    days: list[str]
    time_blocks: list[str]
    availability: list[DayAvailability]
    strengths: list[Strength]


class LaunchLinkResponse(BaseModel):
    code: Optional[str]
    family: Optional[FamilyProfile]
