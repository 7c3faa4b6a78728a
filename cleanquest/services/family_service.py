"""Family registry business logic.

Creates family records, resolves join codes, and reconciles the device's
cached family directory with the remote registry.

Every whole-record write goes through FamilyRegistryService.save(). The
default strategy is last-writer-wins: two devices that read the same record,
append independently and write back will lose the first writer's change.
"""

import logging
from typing import Any

from pydantic import ValidationError

from cleanquest.schemas.family import FamilyProfile
from cleanquest.stores.local_store import FAMILIES_KEY, LocalStore
from cleanquest.stores.remote_registry import RemoteGateway, RemoteUnavailable
from cleanquest.utils.links import build_share_link, parse_join_code
from cleanquest.utils.security import generate_family_code, new_record_id, normalize_code

logger = logging.getLogger(__name__)

LAST_WRITER_WINS = "last_writer_wins"
UNION_MEMBERS = "union_members"
MERGE_STRATEGIES = (LAST_WRITER_WINS, UNION_MEMBERS)


class FamilyNameRequired(ValueError):
    kind = "FamilyNameRequired"


def family_path(code: str) -> str:
    return f"families/{code}"


def dump_family(family: FamilyProfile) -> dict:
    return family.model_dump(mode="json", by_alias=True)


def parse_family(raw: Any) -> FamilyProfile | None:
    """Deserialize a stored family record. Malformed records read as missing."""
    if raw is None:
        return None
    try:
        return FamilyProfile.model_validate(raw)
    except ValidationError as e:
        logger.warning("Discarding malformed family record: %s", e.errors()[:3])
        return None


def union_members(current: FamilyProfile, incoming: FamilyProfile) -> FamilyProfile:
    """Merge two copies of a record: members unioned by id, remote order first."""
    seen = {m.id for m in current.members}
    members = list(current.members) + [m for m in incoming.members if m.id not in seen]
    admin = current.admin or incoming.admin or (members[0].id if members else "")
    return incoming.model_copy(update={"members": members, "admin": admin})


class FamilyRegistryService:
    def __init__(
        self,
        local: LocalStore,
        remote: RemoteGateway,
        merge_strategy: str = LAST_WRITER_WINS,
        app_origin: str | None = None,
    ):
        if merge_strategy not in MERGE_STRATEGIES:
            raise ValueError(f"Unknown merge strategy: {merge_strategy}")
        self.local = local
        self.remote = remote
        self.merge_strategy = merge_strategy
        self.app_origin = app_origin

    # --- Local directory ---

    def _directory(self) -> dict:
        data = self.local.get_json(FAMILIES_KEY, {})
        return data if isinstance(data, dict) else {}

    def _cache(self, family: FamilyProfile) -> None:
        directory = self._directory()
        directory[family.code] = dump_family(family)
        self.local.set_json(FAMILIES_KEY, directory)

    def local_families(self) -> list[FamilyProfile]:
        """Families cached on this device, skipping unreadable entries."""
        families = []
        for raw in self._directory().values():
            family = parse_family(raw)
            if family:
                families.append(family)
        return families

    def local_lookup(self, code: str) -> FamilyProfile | None:
        return parse_family(self._directory().get(normalize_code(code)))

    # --- Operations ---

    async def create(self, name: str) -> tuple[FamilyProfile, str]:
        """Create a family and publish it. Never fails because of the remote."""
        name = name.strip()
        if not name:
            raise FamilyNameRequired("Family name is required")

        family = FamilyProfile(
            id=new_record_id("fam"),
            name=name,
            code=generate_family_code(),
        )
        published = await self.remote.write(family_path(family.code), dump_family(family))
        self._cache(family)
        logger.info("Family %s created with code %s (published=%s)", family.id, family.code, published)
        return family, self.share_link(family.code)

    async def lookup(self, code: str) -> FamilyProfile | None:
        """Resolve a join code: remote first, then the local directory."""
        code = normalize_code(code)
        if not code:
            return None

        try:
            family = parse_family(await self.remote.read(family_path(code)))
        except RemoteUnavailable as e:
            logger.info("Lookup %s: remote unavailable (%s), using local directory", code, e)
            family = None
        else:
            if family:
                self._cache(family)
                return family

        return self.local_lookup(code)

    async def join(self, code: str) -> FamilyProfile | None:
        """Resolve a code and keep the family in the local directory."""
        family = await self.lookup(code)
        if not family:
            logger.info("Join failed: code %s not found", normalize_code(code))
            return None
        self._cache(family)
        return family

    async def save(self, family: FamilyProfile) -> FamilyProfile:
        """Write a whole family record to both stores.

        With `union_members` the current remote copy is re-read and merged
        first; otherwise the record overwrites whatever is there.
        """
        if self.merge_strategy == UNION_MEMBERS:
            try:
                current = parse_family(await self.remote.read(family_path(family.code)))
            except RemoteUnavailable:
                current = None
            if current:
                family = union_members(current, family)

        self._cache(family)
        await self.remote.write(family_path(family.code), dump_family(family))
        return family

    # --- Links ---

    def share_link(self, code: str) -> str:
        return build_share_link(code, self.app_origin)

    async def resolve_launch_link(self, url: str) -> tuple[str | None, FamilyProfile | None]:
        """Parse a launch URL's `join` parameter and resolve it, if present."""
        code = parse_join_code(url)
        if not code:
            return None, None
        return code, await self.lookup(code)
