"""
Persistence port for serialized game states.

The engine only ever hands storage an opaque text blob (see
game.serialize_game_state). Two adapters are provided:

- MemoryStorage: a dict with per-entry expiry, for tests and single-process hosts
- SqlStorage: one row per game through SQLAlchemy 2.0

Both treat an expired entry as missing and drop it on the next read.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Protocol, Tuple

from sqlalchemy import DateTime, String, Text, create_engine, delete
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from monopoly_engine.settings import EngineSettings, StorageBackend

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


class GameStorage(Protocol):
    """Where process_action loads and saves game states."""

    def load_game_state(self, game_id: str) -> Optional[str]: ...

    def save_game_state(self, game_id: str, blob: str) -> None: ...

    def delete_game_state(self, game_id: str) -> None: ...


class MemoryStorage:
    """In-process storage keyed by game id."""

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}

    def load_game_state(self, game_id: str) -> Optional[str]:
        entry = self._entries.get(game_id)
        if entry is None:
            return None
        blob, expires_at = entry
        if self._clock() >= expires_at:
            logger.debug("Game %s expired", game_id)
            del self._entries[game_id]
            return None
        return blob

    def save_game_state(self, game_id: str, blob: str) -> None:
        self._entries[game_id] = (blob, self._clock() + self.ttl_seconds)
        logger.debug("Saved game %s (%d bytes)", game_id, len(blob))

    def delete_game_state(self, game_id: str) -> None:
        if self._entries.pop(game_id, None) is not None:
            logger.debug("Deleted game %s", game_id)

    def __len__(self) -> int:
        return len(self._entries)


# === SQL adapter ===


class Base(DeclarativeBase):
    """Base class for storage models."""

    pass


def utc_now() -> datetime:
    """Generate timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


class GameStateRecord(Base):
    """Latest serialized state of one game."""

    __tablename__ = "game_states"

    game_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    blob: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<GameStateRecord(game_id='{self.game_id}', expires_at={self.expires_at})>"


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlStorage:
    """Game states in a relational database, one row per game."""

    def __init__(self, url: str, ttl_seconds: int = DEFAULT_TTL_SECONDS, clock: Callable[[], datetime] = utc_now):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self.engine = create_engine(url)
        Base.metadata.create_all(self.engine)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def load_game_state(self, game_id: str) -> Optional[str]:
        with self._session_factory() as session:
            record = session.get(GameStateRecord, game_id)
            if record is None:
                return None
            if _as_utc(record.expires_at) <= self._clock():
                logger.debug("Game %s expired", game_id)
                session.delete(record)
                session.commit()
                return None
            return record.blob

    def save_game_state(self, game_id: str, blob: str) -> None:
        now = self._clock()
        expires_at = now + timedelta(seconds=self.ttl_seconds)
        with self._session_factory() as session:
            record = session.get(GameStateRecord, game_id)
            if record is None:
                session.add(GameStateRecord(game_id=game_id, blob=blob, updated_at=now, expires_at=expires_at))
            else:
                record.blob = blob
                record.updated_at = now
                record.expires_at = expires_at
            session.commit()
        logger.debug("Saved game %s (%d bytes)", game_id, len(blob))

    def delete_game_state(self, game_id: str) -> None:
        with self._session_factory() as session:
            result = session.execute(delete(GameStateRecord).where(GameStateRecord.game_id == game_id))
            session.commit()
        if result.rowcount:
            logger.debug("Deleted game %s", game_id)

    def purge_expired(self) -> int:
        """Delete every expired row. Returns the number removed."""
        with self._session_factory() as session:
            result = session.execute(delete(GameStateRecord).where(GameStateRecord.expires_at <= self._clock()))
            session.commit()
        if result.rowcount:
            logger.debug("Purged %d expired games", result.rowcount)
        return result.rowcount

    def close(self) -> None:
        self.engine.dispose()


def create_storage(settings: EngineSettings) -> GameStorage:
    """Build the storage adapter named by the settings."""
    if settings.storage_backend == StorageBackend.SQL:
        return SqlStorage(settings.database_url, settings.state_ttl_seconds)
    return MemoryStorage(settings.state_ttl_seconds)
