import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_BASE_URL = "https://api.jsonbin.io/v3"


@dataclass(frozen=True)
class GatewayResult:
    """Outcome of a store call. Gateways report I/O problems here instead of raising."""
    ok: bool
    value: Any = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, value=None):
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason):
        return cls(ok=False, reason=reason)


# --- Remote document stores ---

class JsonBinStore:
    """
    Shared remote document kept in a JSONBin-style bin.

    Without a bin id or an access key the store is disabled and every call
    short-circuits with a failure, no request is made.
    """

    def __init__(self, bin_id=None, api_key=None, base_url=DEFAULT_REMOTE_BASE_URL,
                 timeout_seconds=30.0, session=None):
        self.bin_id = (bin_id or "").strip() or None
        self.api_key = (api_key or "").strip() or None
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    @property
    def enabled(self):
        return bool(self.bin_id and self.api_key)

    def _headers(self):
        return {
            "Content-Type": "application/json",
            "X-Master-Key": self.api_key,
        }

    def _get_sync(self):
        url = f"{self.base_url}/b/{self.bin_id}/latest"
        try:
            response = self._session.get(url, headers=self._headers(), timeout=self.timeout_seconds)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            return GatewayResult.failure(f"remote read failed: {e}")

        record = payload.get("record") if isinstance(payload, dict) else None
        if not isinstance(record, dict):
            return GatewayResult.failure("remote document is malformed")
        return GatewayResult.success(record)

    def _put_sync(self, document):
        url = f"{self.base_url}/b/{self.bin_id}"
        try:
            response = self._session.put(url, headers=self._headers(), json=document,
                                         timeout=self.timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as e:
            return GatewayResult.failure(f"remote write failed: {e}")
        return GatewayResult.success(document)

    async def get(self):
        if not self.enabled:
            return GatewayResult.failure("remote store not configured")
        return await asyncio.to_thread(self._get_sync)

    async def put(self, document):
        if not self.enabled:
            return GatewayResult.failure("remote store not configured")
        return await asyncio.to_thread(self._put_sync, document)


class InMemoryStore:
    """Remote store stand-in for tests and offline runs."""

    def __init__(self, document=None, enabled=True, fail_reads=False, fail_writes=False):
        self.document = document
        self._enabled = enabled
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.writes = []

    @property
    def enabled(self):
        return self._enabled

    async def get(self):
        if not self.enabled:
            return GatewayResult.failure("remote store not configured")
        if self.fail_reads:
            return GatewayResult.failure("remote read failed: simulated")
        if self.document is None:
            return GatewayResult.success({})
        return GatewayResult.success(json.loads(json.dumps(self.document)))

    async def put(self, document):
        if not self.enabled:
            return GatewayResult.failure("remote store not configured")
        if self.fail_writes:
            return GatewayResult.failure("remote write failed: simulated")
        self.document = json.loads(json.dumps(document))
        self.writes.append(self.document)
        return GatewayResult.success(self.document)


# --- Local caches ---

class JsonFileCache:
    """Per-device key/value cache, one JSON file per key."""

    def __init__(self, cache_dir):
        self.cache_dir = Path(cache_dir)

    def _path(self, name):
        return self.cache_dir / f"{name}.json"

    def _get_sync(self, name):
        path = self._path(name)
        if not path.exists():
            return GatewayResult.failure(f"{name} not cached")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return GatewayResult.success(json.load(f))
        except (OSError, ValueError) as e:
            return GatewayResult.failure(f"cache read failed for {name}: {e}")

    def _put_sync(self, name, value):
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with open(self._path(name), 'w', encoding='utf-8') as f:
                json.dump(value, f, indent=4, ensure_ascii=False)
        except OSError as e:
            return GatewayResult.failure(f"cache write failed for {name}: {e}")
        return GatewayResult.success(value)

    async def get(self, name):
        return await asyncio.to_thread(self._get_sync, name)

    async def put(self, name, value):
        return await asyncio.to_thread(self._put_sync, name, value)


class InMemoryCache:
    def __init__(self, values: Optional[Dict[str, Any]] = None, fail_writes=False):
        self.values = dict(values or {})
        self.fail_writes = fail_writes

    async def get(self, name):
        if name not in self.values:
            return GatewayResult.failure(f"{name} not cached")
        return GatewayResult.success(json.loads(json.dumps(self.values[name])))

    async def put(self, name, value):
        if self.fail_writes:
            return GatewayResult.failure(f"cache write failed for {name}: simulated")
        self.values[name] = json.loads(json.dumps(value))
        return GatewayResult.success(value)
