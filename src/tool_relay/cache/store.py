"""File-backed response cache.

One JSON record per fingerprint at ``<cache_dir>/<fingerprint>.json``. Records
are written to a temporary file in the same directory and moved into place
with ``os.replace``, so a reader sees either the old record, the new one, or
none at all. There is no expiry and no size bound.
"""

import asyncio
import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass
class CacheEntry:
    """A cached exchange.

    Attributes:
        fingerprint: The request fingerprint (also the file name)
        request: Request body that was sent
        response: Full response body that came back
        time: ISO 8601 UTC timestamp of the write
    """

    fingerprint: str
    request: dict[str, Any]
    response: dict[str, Any]
    time: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "fingerprint": self.fingerprint,
            "request": self.request,
            "response": self.response,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheEntry":
        return cls(
            fingerprint=data["fingerprint"],
            request=data.get("request") or {},
            response=data["response"],
            time=data.get("time", ""),
        )


class ResponseCache:
    """Point-lookup store of chat responses keyed by fingerprint.

    Read failures are treated as misses and write failures are logged and
    swallowed; the cache never fails a conversation.
    """

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = Path(cache_dir)

    def path_for(self, key: str) -> Path:
        """Get the record path for a key.

        Raises:
            ValueError: If the key is not a plain file-name-safe token
        """
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid cache key: {key!r}")
        return self.cache_dir / f"{key}.json"

    async def get(self, key: str) -> CacheEntry | None:
        """Look up a cached response.

        Returns:
            The entry, or None on a miss or an unreadable record
        """
        path = self.path_for(key)
        try:
            raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            logger.warning(f"Ignoring corrupt cache record {path}: {e}")
            return None
        except OSError as e:
            logger.warning(f"Could not read cache record {path}: {e}")
            return None

        try:
            return CacheEntry.from_dict(json.loads(raw))
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring corrupt cache record {path}: {e}")
            return None

    async def put(
        self, key: str, request: dict[str, Any], response: dict[str, Any]
    ) -> CacheEntry | None:
        """Persist a response.

        Returns:
            The stored entry, or None if it could not be written
        """
        entry = CacheEntry(
            fingerprint=key,
            request=request,
            response=response,
            time=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        )
        path = self.path_for(key)
        try:
            await asyncio.to_thread(self._write, path, entry)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write cache record {path}: {e}")
            return None

        logger.debug(f"Cached response {key}")
        return entry

    def _write(self, path: Path, entry: CacheEntry) -> None:
        text = json.dumps(entry.to_dict(), ensure_ascii=False, indent=2)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
