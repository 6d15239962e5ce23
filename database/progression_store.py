"""
============================================================================
PROGRESSION STORE
============================================================================
In-memory ledger of per-user, per-server leveling records, mirrored to a
single JSON snapshot on disk after every mutation.

Features:
- Get-or-create record access (one record per guild/user pair)
- Full-snapshot write-through persistence
- Atomic file replacement (temp file + rename)
- Loads the legacy bare-mapping format of the old JS bot

Usage:
    store = ProgressionStore('data/user-levels.json')
    await store.initialize()
    record = store.get_or_create('123', '456')
    record.total_xp += 10
    await store.persist()
"""

import asyncio
import json
import logging
import math
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

import config

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


# ============================================================================
# ERRORS
# ============================================================================

class ProgressionStoreError(Exception):
    """Base error for snapshot I/O problems."""


class SnapshotLoadError(ProgressionStoreError):
    """Snapshot exists but could not be read or parsed."""


class SnapshotSaveError(ProgressionStoreError):
    """Snapshot could not be written to disk."""


# ============================================================================
# RECORDS
# ============================================================================

def _whole_number(data: Dict, name: str) -> int:
    """Integer field of a snapshot entry, 0 when absent."""
    value = data.get(name, 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{name} must be a number, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{name} must be a whole number, got {value!r}")
    return int(value)


@dataclass
class Booster:
    """Temporary XP multiplier bonus."""

    multiplier: float
    expires_at: int
    added_at: int

    def to_dict(self) -> Dict:
        return {
            'multiplier': self.multiplier,
            'expiresAt': self.expires_at,
            'addedAt': self.added_at,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Booster':
        multiplier = data['multiplier']
        if isinstance(multiplier, bool) or not isinstance(multiplier, (int, float)):
            raise TypeError(f"multiplier must be a number, got {multiplier!r}")
        if not math.isfinite(multiplier) or multiplier <= 0:
            raise ValueError(f"multiplier must be positive, got {multiplier!r}")
        if 'expiresAt' not in data:
            raise KeyError('expiresAt')
        return cls(
            multiplier=float(multiplier),
            expires_at=_whole_number(data, 'expiresAt'),
            added_at=_whole_number(data, 'addedAt'),
        )


@dataclass
class ProgressionRecord:
    """
    Leveling state for one user in one guild.

    `level` and `xp` are derived from `total_xp` by the level curve and are
    rewritten by the leveling engine after every change to `total_xp`.
    """

    user_id: str
    guild_id: str
    xp: int = 0
    level: int = 0
    total_xp: int = 0
    messages: int = 0
    last_xp_gain: int = 0
    last_daily_login: int = 0
    weekly_xp: int = 0
    prestige: int = 0
    active_boosters: List[Booster] = field(default_factory=list)
    voice_minutes: int = 0

    def to_dict(self) -> Dict:
        """Serialize using the document's camelCase keys."""
        return {
            'userId': self.user_id,
            'guildId': self.guild_id,
            'xp': self.xp,
            'level': self.level,
            'totalXp': self.total_xp,
            'messages': self.messages,
            'lastXpGain': self.last_xp_gain,
            'lastDailyLogin': self.last_daily_login,
            'weeklyXp': self.weekly_xp,
            'prestige': self.prestige,
            'activeBoosters': [b.to_dict() for b in self.active_boosters],
            'voiceMinutes': self.voice_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'ProgressionRecord':
        """Build a record from a snapshot entry. Missing counters default to 0."""
        boosters = data.get('activeBoosters', [])
        if not isinstance(boosters, list):
            raise TypeError(f"activeBoosters must be a list, got {boosters!r}")
        return cls(
            user_id=str(data['userId']),
            guild_id=str(data['guildId']),
            xp=_whole_number(data, 'xp'),
            level=_whole_number(data, 'level'),
            total_xp=_whole_number(data, 'totalXp'),
            messages=_whole_number(data, 'messages'),
            last_xp_gain=_whole_number(data, 'lastXpGain'),
            last_daily_login=_whole_number(data, 'lastDailyLogin'),
            weekly_xp=_whole_number(data, 'weeklyXp'),
            prestige=_whole_number(data, 'prestige'),
            active_boosters=[Booster.from_dict(b) for b in boosters],
            voice_minutes=_whole_number(data, 'voiceMinutes'),
        )


def make_key(user_id: str, guild_id: str) -> str:
    """Composite snapshot key for a guild/user pair."""
    return f"{guild_id}-{user_id}"


# ============================================================================
# STORE
# ============================================================================

class ProgressionStore:
    """
    Owner of every ProgressionRecord and sole writer of the snapshot file.

    Construct once at startup and hand the same instance to everything that
    reads or mutates leveling data.
    """

    def __init__(self, path: str = None, clock: Optional[Callable[[], int]] = None):
        """
        Args:
            path: Snapshot file (defaults to config.LEVELS_FILE)
            clock: Returns epoch milliseconds (defaults to wall clock)
        """
        self.path = Path(path or config.LEVELS_FILE)
        self.clock = clock or now_ms
        self.last_weekly_reset = 0
        self._records: Dict[str, ProgressionRecord] = {}
        self._lock = asyncio.Lock()
        self.loaded = False

    def __len__(self) -> int:
        return len(self._records)

    # ========================================================================
    # RECORD ACCESS
    # ========================================================================

    def get_or_create(self, user_id: str, guild_id: str) -> ProgressionRecord:
        """
        Return the record for this user in this guild, creating a zeroed
        one first if none exists. The returned object is owned by the store;
        mutate it and then call persist().
        """
        key = make_key(user_id, guild_id)
        record = self._records.get(key)
        if record is None:
            record = ProgressionRecord(user_id=str(user_id), guild_id=str(guild_id))
            self._records[key] = record
        return record

    def find(self, user_id: str, guild_id: str) -> Optional[ProgressionRecord]:
        """Look up a record without creating it."""
        return self._records.get(make_key(user_id, guild_id))

    def records(self, guild_id: str = None) -> List[ProgressionRecord]:
        """All records in insertion order, optionally limited to one guild."""
        if guild_id is None:
            return list(self._records.values())
        return [r for r in self._records.values() if r.guild_id == str(guild_id)]

    # ========================================================================
    # PERSISTENCE
    # ========================================================================

    async def initialize(self):
        """
        Load the snapshot into memory. Creates an empty snapshot when the
        file does not exist yet.

        Raises:
            SnapshotLoadError: file unreadable or not a valid snapshot
        """
        try:
            raw = await asyncio.to_thread(self.path.read_text, encoding='utf-8')
        except FileNotFoundError:
            logger.info(f"No snapshot at {self.path}, creating an empty one")
            self._records = {}
            await self.persist()
            self.loaded = True
            return
        except OSError as e:
            raise SnapshotLoadError(f"Cannot read {self.path}: {e}") from e

        try:
            self._load_document(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            raise SnapshotLoadError(f"Corrupt snapshot {self.path}: {e}") from e

        self.loaded = True
        logger.info(f"Loaded {len(self._records)} progression records from {self.path}")

    def _load_document(self, document: Dict):
        if not isinstance(document, dict):
            raise TypeError("snapshot root must be an object")

        if 'records' in document and 'version' in document:
            entries = document['records']
            last_weekly_reset = _whole_number(document, 'lastWeeklyReset')
        else:
            # Bare key -> record mapping written by the old bot
            entries = document
            last_weekly_reset = 0

        if not isinstance(entries, dict):
            raise TypeError("snapshot records must be an object")

        # Stored keys are not trusted; records are re-keyed by their own ids
        records = {}
        for data in entries.values():
            if not isinstance(data, dict):
                raise TypeError(f"snapshot record must be an object, got {data!r}")
            record = ProgressionRecord.from_dict(data)
            key = make_key(record.user_id, record.guild_id)
            if key in records:
                raise ValueError(f"duplicate record for {key}")
            records[key] = record
        self._records = records
        self.last_weekly_reset = last_weekly_reset

    def to_document(self) -> Dict:
        """Full snapshot as a JSON-ready dict."""
        return {
            'version': SNAPSHOT_VERSION,
            'lastWeeklyReset': self.last_weekly_reset,
            'records': {key: record.to_dict() for key, record in self._records.items()},
        }

    async def persist(self):
        """
        Write the full record set to disk, replacing the previous snapshot.

        Raises:
            SnapshotSaveError: the file could not be written
        """
        async with self._lock:
            # Serialize before awaiting so no record is read mid-mutation
            payload = json.dumps(self.to_document(), indent=2, ensure_ascii=False)
            try:
                await asyncio.to_thread(self._write, payload)
            except OSError as e:
                logger.error(f"Failed to save progression snapshot to {self.path}: {e}")
                raise SnapshotSaveError(f"Cannot write {self.path}: {e}") from e

    def _write(self, payload: str):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            f.write(payload)
        os.replace(tmp_path, self.path)
