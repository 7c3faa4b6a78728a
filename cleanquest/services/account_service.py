"""Local account registration and login.

Accounts live only in this device's local store; they are never published
to the remote registry.
"""

import logging

from pydantic import ValidationError

from cleanquest.schemas.auth import Account, SessionUser
from cleanquest.stores.local_store import ACCOUNTS_KEY, LocalStore
from cleanquest.utils.security import hash_password, new_record_id, verify_password

logger = logging.getLogger(__name__)


class AccountError(ValueError):
    """Registration or login failure with a user-facing message."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class AccountRegistry:
    def __init__(self, local: LocalStore, username_min_length: int = 3, password_min_length: int = 4):
        self.local = local
        self.username_min_length = username_min_length
        self.password_min_length = password_min_length

    def _accounts(self) -> dict:
        data = self.local.get_json(ACCOUNTS_KEY, {})
        return data if isinstance(data, dict) else {}

    def _get(self, username: str) -> Account | None:
        raw = self._accounts().get(username)
        if raw is None:
            return None
        try:
            return Account.model_validate({"username": username, **raw})
        except (ValidationError, TypeError) as e:
            logger.warning("Unreadable account record for %r: %s", username, e)
            return None

    def register(self, username: str, password: str, password_confirm: str) -> Account:
        """Create an account. Raises AccountError with the first failed check."""
        username = username.strip()
        if not username:
            raise AccountError("UsernameRequired", "Username is required")
        if len(username) < self.username_min_length:
            raise AccountError(
                "UsernameTooShort",
                f"Username must be at least {self.username_min_length} characters",
            )
        if not password.strip():
            raise AccountError("PasswordRequired", "Password is required")
        if len(password) < self.password_min_length:
            raise AccountError(
                "PasswordTooShort",
                f"Password must be at least {self.password_min_length} characters",
            )
        if password != password_confirm:
            raise AccountError("PasswordMismatch", "Passwords do not match")

        accounts = self._accounts()
        if username in accounts:
            raise AccountError("UsernameTaken", "This username already exists")

        account = Account(username=username, password_hash=hash_password(password))
        accounts[username] = account.model_dump(mode="json", by_alias=True, exclude={"username"})
        self.local.set_json(ACCOUNTS_KEY, accounts)
        logger.info("Account registered: %s", username)
        return account

    def authenticate(self, username: str, password: str) -> SessionUser:
        """Check credentials and mint a session user.

        Unknown usernames and wrong passwords fail the same way.
        """
        username = username.strip()
        account = self._get(username)
        if not account or not verify_password(password, account.password_hash):
            raise AccountError("InvalidCredentials", "Wrong username or password")
        return SessionUser(id=new_record_id("usr"), username=account.username)
