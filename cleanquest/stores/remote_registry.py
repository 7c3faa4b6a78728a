"""Remote registry: optional shared key/value service keyed by family join code.

Paths:
    families/{code}              whole FamilyProfile
    chats/{code}/{messageId}     single ChatMessage
    chats/{code}                 every message of a family, as an unordered map

Unavailability never escapes the services: adapters raise RemoteUnavailable,
RemoteGateway bounds every call with a timeout, and callers fall back to the
local store.
"""

import asyncio
import copy
import http.client
import json
import logging
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote, urlencode

logger = logging.getLogger(__name__)


class RemoteUnavailable(Exception):
    """The remote registry could not be reached (absent, offline, failed or timed out)."""


class RemoteRegistry(ABC):
    """Interface for a shared registry backend."""

    name = "remote"

    @abstractmethod
    def available(self) -> bool: ...

    @abstractmethod
    async def read(self, path: str) -> Any | None:
        """Return the value stored at path, or None when nothing is there."""

    @abstractmethod
    async def write(self, path: str, value: Any) -> None:
        """Store value at path, replacing what was there."""


class NullRegistry(RemoteRegistry):
    """No remote configured. Always unavailable."""

    name = "none"

    def available(self) -> bool:
        return False

    async def read(self, path: str) -> Any | None:
        raise RemoteUnavailable("no remote registry configured")

    async def write(self, path: str, value: Any) -> None:
        raise RemoteUnavailable("no remote registry configured")


class InMemoryRegistry(RemoteRegistry):
    """Process-local registry shared by every device holding a reference to it.

    Values are copied in and out, so devices never share mutable state.
    Set `online = False` to simulate an outage, or `latency` to simulate a
    slow transport.
    """

    name = "memory"

    def __init__(self, latency: float = 0.0):
        self._tree: dict[str, Any] = {}
        self.online = True
        self.latency = latency
        self.writes = 0

    def available(self) -> bool:
        return self.online

    async def _transport(self) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)
        if not self.online:
            raise RemoteUnavailable("in-memory registry is offline")

    async def read(self, path: str) -> Any | None:
        await self._transport()
        node: Any = self._tree
        for part in _split(path):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    async def write(self, path: str, value: Any) -> None:
        await self._transport()
        parts = _split(path)
        node = self._tree
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[parts[-1]] = copy.deepcopy(value)
        self.writes += 1


class FirebaseRegistry(RemoteRegistry):
    """Firebase Realtime Database over its REST API (`{url}/{path}.json`)."""

    name = "firebase"

    def __init__(self, database_url: str, auth_token: str = "", timeout: float = 5.0):
        self.database_url = database_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout

    def available(self) -> bool:
        return bool(self.database_url)

    def _url(self, path: str) -> str:
        url = f"{self.database_url}/{quote('/'.join(_split(path)))}.json"
        if self.auth_token:
            url += "?" + urlencode({"auth": self.auth_token})
        return url

    def _request(self, method: str, path: str, body: Any = None) -> Any:
        data = None
        headers = {"Accept": "application/json"}
        if body is not None:
            data = json.dumps(body, ensure_ascii=False).encode("utf-8")
            headers["Content-Type"] = "application/json"
        req = urllib.request.Request(self._url(path), data=data, headers=headers, method=method)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                payload = resp.read()
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            raise RemoteUnavailable(f"{method} {path} failed: {e}") from e
        if not payload:
            return None
        try:
            return json.loads(payload)
        except json.JSONDecodeError as e:
            raise RemoteUnavailable(f"{method} {path} returned invalid JSON") from e

    async def read(self, path: str) -> Any | None:
        return await asyncio.to_thread(self._request, "GET", path)

    async def write(self, path: str, value: Any) -> None:
        await asyncio.to_thread(self._request, "PUT", path, value)


class RemoteGateway:
    """Guards every remote call: availability check first, then a timeout.

    Expiry, transport errors and any other backend failure are reported as
    RemoteUnavailable, the same as an absent registry.
    """

    def __init__(self, registry: RemoteRegistry, timeout: float):
        self.registry = registry
        self.timeout = timeout

    def available(self) -> bool:
        try:
            return self.registry.available()
        except Exception as e:
            logger.warning("Remote availability check failed: %s", e)
            return False

    async def read(self, path: str) -> Any | None:
        """Read a path. Raises RemoteUnavailable; a miss returns None."""
        if not self.available():
            raise RemoteUnavailable(f"{self.registry.name} unavailable")
        try:
            return await asyncio.wait_for(self.registry.read(path), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning("Remote read %s timed out after %.1fs", path, self.timeout)
            raise RemoteUnavailable(f"read {path} timed out") from e
        except RemoteUnavailable:
            raise
        except Exception as e:
            logger.warning("Remote read %s failed unexpectedly: %r", path, e)
            raise RemoteUnavailable(f"read {path} failed: {e!r}") from e

    async def write(self, path: str, value: Any) -> bool:
        """Best-effort write. Returns False when the remote could not take it."""
        if not self.available():
            logger.debug("Remote unavailable, skipping write to %s", path)
            return False
        try:
            await asyncio.wait_for(self.registry.write(path, value), timeout=self.timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning("Remote write %s timed out after %.1fs", path, self.timeout)
        except RemoteUnavailable as e:
            logger.warning("Remote write %s failed: %s", path, e)
        except Exception as e:
            logger.warning("Remote write %s failed unexpectedly: %r", path, e)
        return False


def build_registry(database_url: str, auth_token: str = "", timeout: float = 5.0) -> RemoteRegistry:
    if database_url:
        return FirebaseRegistry(database_url, auth_token, timeout)
    return NullRegistry()


def _split(path: str) -> list[str]:
    parts = [p for p in path.split("/") if p]
    if not parts:
        raise ValueError("empty registry path")
    return parts
