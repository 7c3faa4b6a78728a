"""Device session: who is logged in and which family is selected."""

import logging

from pydantic import ValidationError

from cleanquest.schemas.auth import SessionUser
from cleanquest.schemas.family import FamilyProfile
from cleanquest.services.family_service import dump_family, parse_family
from cleanquest.stores.local_store import CURRENT_USER_KEY, SELECTED_FAMILY_KEY, LocalStore

logger = logging.getLogger(__name__)


class SessionService:
    def __init__(self, local: LocalStore):
        self.local = local

    def current_user(self) -> SessionUser | None:
        raw = self.local.get_json(CURRENT_USER_KEY)
        if raw is None:
            return None
        try:
            return SessionUser.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding unreadable session user")
            return None

    def set_current_user(self, user: SessionUser) -> None:
        self.local.set_json(CURRENT_USER_KEY, user.model_dump(mode="json"))

    def selected_family(self) -> FamilyProfile | None:
        return parse_family(self.local.get_json(SELECTED_FAMILY_KEY))

    def select_family(self, family: FamilyProfile) -> None:
        self.local.set_json(SELECTED_FAMILY_KEY, dump_family(family))

    def logout(self) -> None:
        self.local.set_json(CURRENT_USER_KEY, None)
        self.local.set_json(SELECTED_FAMILY_KEY, None)

    def restore(self) -> tuple[SessionUser | None, FamilyProfile | None]:
        """Session as found at startup. A family without a user is ignored."""
        user = self.current_user()
        if not user:
            return None, None
        return user, self.selected_family()
