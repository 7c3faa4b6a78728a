"""Wiring of one device: its local store, remote gateway and services."""

from dataclasses import dataclass

from sqlalchemy.engine import Engine

from cleanquest.config import Settings
from cleanquest.services.account_service import AccountRegistry
from cleanquest.services.chat_service import ChatLogService
from cleanquest.services.family_service import FamilyRegistryService
from cleanquest.services.membership_service import MembershipAggregator
from cleanquest.services.session_service import SessionService
from cleanquest.stores.local_store import LocalStore
from cleanquest.stores.remote_registry import RemoteGateway, RemoteRegistry


@dataclass
class Device:
    local: LocalStore
    remote: RemoteGateway
    families: FamilyRegistryService
    members: MembershipAggregator
    chats: ChatLogService
    accounts: AccountRegistry
    session: SessionService

    @classmethod
    def build(cls, engine: Engine, registry: RemoteRegistry, settings: Settings) -> "Device":
        """Hydrate services from the local store behind `engine`."""
        local = LocalStore(engine)
        remote = RemoteGateway(registry, timeout=settings.remote_timeout_seconds)
        families = FamilyRegistryService(
            local,
            remote,
            merge_strategy=settings.merge_strategy,
            app_origin=settings.app_origin,
        )
        chats = ChatLogService(local, remote, max_length=settings.chat_max_length)
        return cls(
            local=local,
            remote=remote,
            families=families,
            members=MembershipAggregator(families, chats),
            chats=chats,
            accounts=AccountRegistry(
                local,
                username_min_length=settings.username_min_length,
                password_min_length=settings.password_min_length,
            ),
            session=SessionService(local),
        )
