"""
API key access gate.

Keys come from a text file (one per line, ``#`` comments allowed) that is
re-read periodically, or from a single key in the environment. With neither
configured, the gate is open.
"""

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping

from pagefit.shared.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AuthDecision:
    valid: bool
    auth_required: bool
    provided: str | None


def extract_api_key(headers: Mapping[str, str]) -> str | None:
    """Key from ``Authorization: Bearer ...`` or ``X-API-Key``."""
    auth_header = headers.get("authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    x_key = headers.get("x-api-key")
    if x_key:
        return x_key.strip() or None
    return None


class ApiKeyStore:
    """
    Validates presented API keys against the file or environment key.

    ``validate`` never touches the disk. ``refresh`` re-reads the file off the
    event loop, on first use and whenever the reload interval has passed.
    """

    def __init__(
        self,
        keys_file: Path,
        env_key: str | None = None,
        reload_interval_ms: int = 30_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.keys_file = Path(keys_file)
        self.env_key = env_key or None
        self.reload_interval = reload_interval_ms / 1000
        self._clock = clock
        self._keys: frozenset[str] = frozenset()
        self._file_in_use = False
        self._loaded_at: float | None = None

    @property
    def file_in_use(self) -> bool:
        return self._file_in_use

    @property
    def auth_enabled(self) -> bool:
        return bool(self._file_in_use and self._keys) or bool(self.env_key)

    @property
    def reload_due(self) -> bool:
        return self._loaded_at is None or self._clock() - self._loaded_at >= self.reload_interval

    async def refresh(self) -> None:
        """Re-read the key file in a worker thread if the interval has passed."""
        if not self.reload_due:
            return
        # Stamp first so concurrent requests don't all start a reload.
        self._loaded_at = self._clock()
        self._file_in_use, self._keys = await asyncio.to_thread(self._read_file)

    def _read_file(self) -> tuple[bool, frozenset[str]]:
        try:
            if not self.keys_file.exists():
                return False, frozenset()

            keys = set()
            for raw in self.keys_file.read_text(encoding="utf-8").splitlines():
                line = raw.strip()
                if not line or line.startswith("#"):
                    continue
                keys.add(line)
            logger.debug(f"Loaded {len(keys)} API keys from {self.keys_file}")
            return True, frozenset(keys)
        except OSError as e:
            logger.error(f"Error loading API keys file {self.keys_file}: {e}")
            return False, frozenset()

    def validate(self, provided: str | None) -> AuthDecision:
        """File keys win when present; the env key is the fallback."""
        if self._file_in_use and self._keys:
            return AuthDecision(provided in self._keys, True, provided)
        if self.env_key:
            return AuthDecision(provided == self.env_key, True, provided)
        return AuthDecision(True, False, provided)


def mask_key(key: str) -> str:
    """Loggable form of an API key."""
    return f"{key[:4]}***" if len(key) > 4 else "***"
