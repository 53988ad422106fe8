# mplus/repositories/state_repos.py
"""
Storage for guild signup state.

Every operation works on one guild: load its state, change it in memory, save
it back. Stores hold an asyncio.Lock per guild around that cycle, which makes
it atomic for callers in the same process. Several worker processes sharing
one store are not coordinated.
"""
import asyncio
import json
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from mplus.domain.models import GuildState, StateDocument, now_ms, to_document
from mplus.infrastructure.db.session import create_tables, make_engine, make_session_factory
from mplus.infrastructure.models import GuildStateRecord

logger = logging.getLogger(__name__)


def migrate_document(raw: Dict, now: Optional[int] = None) -> Dict:
    """
    Bring a state document read from disk into the current shape.

    Older files were flat: `{"sessions": {"g:<guildId>": session}}` with one
    session per guild. Those are rewritten to
    `{"guilds": {guildId: {"currentSessionId": ..., "sessions": {...}}}}`.
    Documents that already have `guilds` are returned unchanged.
    """
    if "guilds" in raw:
        return raw

    now = now_ms() if now is None else now
    migrated: Dict = {"guilds": {}}
    for key, session in (raw.get("sessions") or {}).items():
        guild_id = key[2:] if key.startswith("g:") else key
        session = dict(session or {})
        session_id = session.get("id") or f"s-{guild_id}-{now}"

        migrated["guilds"][guild_id] = {
            "currentSessionId": session_id,
            "sessions": {
                session_id: {
                    **session,
                    "id": session_id,
                    "createdAt": session.get("createdAt") or now,
                    "signups": session.get("signups") or {},
                    "lastDraft": session.get("lastDraft"),
                }
            },
        }

    logger.info("Migrated legacy state document (%d guilds)", len(migrated["guilds"]))
    return migrated


class StateStore:
    def __init__(self):
        self._guild_locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, guild_id: str) -> asyncio.Lock:
        return self._guild_locks.setdefault(guild_id, asyncio.Lock())

    async def startup(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass

    async def load_guild(self, guild_id: str) -> GuildState:
        raise NotImplementedError

    async def save_guild(self, guild_id: str, guild_state: GuildState) -> None:
        raise NotImplementedError

    @asynccontextmanager
    async def transaction(self, guild_id: str) -> AsyncIterator[GuildState]:
        """
        Load the guild state, hand it to the caller, save it afterwards.

        Nothing is saved when the body raises, so a rejected operation never
        leaves a half-applied change behind.
        """
        async with self._lock_for(guild_id):
            guild_state = await self.load_guild(guild_id)
            yield guild_state
            await self.save_guild(guild_id, guild_state)

    async def read(self, guild_id: str) -> GuildState:
        async with self._lock_for(guild_id):
            return await self.load_guild(guild_id)


class JsonFileStateStore(StateStore):
    """All guilds in one JSON file."""

    def __init__(self, path):
        super().__init__()
        self.path = Path(path)
        self._io_lock = asyncio.Lock()

    def _read_document(self) -> StateDocument:
        if not self.path.exists():
            return StateDocument()
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        return StateDocument.model_validate(migrate_document(raw))

    def _write_document(self, document: StateDocument) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(to_document(document), indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    async def load(self) -> StateDocument:
        async with self._io_lock:
            return await asyncio.to_thread(self._read_document)

    async def load_guild(self, guild_id: str) -> GuildState:
        document = await self.load()
        return document.guilds.get(guild_id) or GuildState()

    async def save_guild(self, guild_id: str, guild_state: GuildState) -> None:
        async with self._io_lock:
            # other guilds may have been saved since this one was loaded
            document = await asyncio.to_thread(self._read_document)
            document.guilds[guild_id] = guild_state
            await asyncio.to_thread(self._write_document, document)


class SqlStateStore(StateStore):
    """One row per guild holding its state document."""

    def __init__(self, session_factory: async_sessionmaker, engine: Optional[AsyncEngine] = None):
        super().__init__()
        self.session_factory = session_factory
        self.engine = engine

    @classmethod
    def from_url(cls, url: str) -> "SqlStateStore":
        engine = make_engine(url)
        return cls(make_session_factory(engine), engine=engine)

    async def startup(self) -> None:
        if self.engine is not None:
            await create_tables(self.engine)

    async def shutdown(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()

    async def load_guild(self, guild_id: str) -> GuildState:
        async with self.session_factory() as db:
            record = await db.get(GuildStateRecord, guild_id)
            if record is None:
                return GuildState()
            return GuildState.model_validate(record.document)

    async def save_guild(self, guild_id: str, guild_state: GuildState) -> None:
        document = to_document(guild_state)
        async with self.session_factory() as db:
            record = await db.get(GuildStateRecord, guild_id)
            if record is None:
                db.add(GuildStateRecord(guild_id=guild_id, document=document))
            else:
                record.document = document
            await db.commit()


def build_store(config) -> StateStore:
    backend = config.STORAGE_BACKEND.lower()
    if backend == "json":
        return JsonFileStateStore(config.STATE_FILE)
    if backend == "sql":
        return SqlStateStore.from_url(config.DATABASE_URL)
    raise ValueError(f"Unknown storage backend: {config.STORAGE_BACKEND}")
