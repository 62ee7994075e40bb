"""In-memory session store: one assembly engine per conversation.

WHY: Every conversation drives its own surface, so every conversation
needs its own active component set. Instructions for one session must
never interleave mid-application, while different sessions proceed
independently. An in-memory store is enough: snapshots are derived,
and persistence is explicitly out of scope.

HOW: Three pieces work together:
  Session      - dataclass holding an engine, an asyncio.Lock that
                 serializes instructions, and activity timestamps
  SessionStore - thread-safe dict-based store with create/get/list/
                 delete, idle-TTL cleanup, and a shared mapper
  handle_intent / apply - the per-session pipeline (map → apply →
                 reorganize so positions fit the whole surface)

RULES:
- Store mutations are protected by threading.Lock
- Engine calls for one session are serialized by that session's asyncio.Lock
- Session IDs are UUID4 hex strings generated at creation time
- Idle sessions expire after ttl_seconds without activity
- The rule list and registry contents are fixed when the store is built
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from ui_assembly.animation import create_executor
from ui_assembly.config import (
    ANIMATION_EXECUTOR,
    ANIMATION_TIMEOUT_S,
    MAX_SESSIONS,
    SESSION_TTL_S,
)
from ui_assembly.core.engine import AssemblyEngine
from ui_assembly.core.ir import AssemblyInstruction, AssemblyState, Intent
from ui_assembly.core.registry import ComponentRegistry
from ui_assembly.mapping.catalog import DEFAULT_RULES, register_defaults
from ui_assembly.mapping.mapper import IntentMapper

logger = logging.getLogger(__name__)


class SessionLimitError(ValueError):
    """Raised when the store already holds max_sessions sessions."""


@dataclass
class Session:
    """One conversation's engine and bookkeeping.

    RULES:
    - id: UUID4 hex, immutable after creation
    - lock: held for the whole of every engine call
    - updated_at: bumped on every applied instruction
    """

    id: str
    engine: AssemblyEngine
    mapper: IntentMapper
    created_at: float
    updated_at: float
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def apply(self, instruction: AssemblyInstruction) -> AssemblyState:
        async with self.lock:
            state = await self.engine.apply(instruction)
        self.updated_at = time.time()
        return state

    async def handle_intent(self, intent: Intent) -> Tuple[AssemblyInstruction, AssemblyState]:
        """Map an intent and apply the result to this session's surface.

        WHY: Mapped positions are numbered within one instruction. Added
        next to earlier turns' components they would share orders and
        keep areas from another layout.

        HOW: Maps the intent, then runs AssemblyEngine.assemble(), which
        applies the add and re-solves every position under the
        instruction's layout.

        RULES:
        - The add and its reorganize happen under one lock acquisition
        - Subscribers see one notification per engine call
        """
        instruction = self.mapper.map_to_instruction(intent)
        async with self.lock:
            state = await self.engine.assemble(instruction)
        self.updated_at = time.time()
        return instruction, state


class SessionStore:
    """Thread-safe in-memory store for assembly sessions.

    Args:
        executor_key: Animation executor name for new sessions.
        ttl_seconds: Idle time after which a session expires.
        max_sessions: Upper bound on concurrently held sessions.
        registry_factory: Builds the registry each new session gets.
    """

    def __init__(
        self,
        executor_key: str = ANIMATION_EXECUTOR,
        ttl_seconds: int = SESSION_TTL_S,
        max_sessions: int = MAX_SESSIONS,
        registry_factory: Optional[Callable[[], ComponentRegistry]] = None,
    ) -> None:
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self.executor_key = executor_key
        self._registry_factory = registry_factory or (lambda: register_defaults(ComponentRegistry()))
        self.registry = self._registry_factory()
        self.mapper = IntentMapper(DEFAULT_RULES, registry=self.registry)

    def create_session(self) -> Session:
        """Create a session with a fresh engine.

        Raises:
            SessionLimitError: If max_sessions is already reached.
        """
        engine = AssemblyEngine(
            registry=self._registry_factory(),
            executor=create_executor(self.executor_key),
            animation_timeout_s=ANIMATION_TIMEOUT_S,
        )
        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                raise SessionLimitError(
                    "Maximum number of concurrent sessions ({}) reached".format(self.max_sessions)
                )
            now = time.time()
            session = Session(
                id=uuid.uuid4().hex,
                engine=engine,
                mapper=self.mapper,
                created_at=now,
                updated_at=now,
            )
            self._sessions[session.id] = session

        logger.info("Created session %s (%s animations)", session.id, self.executor_key)
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(session_id)

    def list_sessions(self) -> List[Session]:
        """All sessions, oldest first."""
        with self._lock:
            return sorted(self._sessions.values(), key=lambda s: s.created_at)

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.info("Deleted session %s", session_id)
        return True

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def cleanup_expired(self) -> int:
        """Remove sessions idle for longer than the TTL; returns the count."""
        now = time.time()
        with self._lock:
            expired = [
                sid for sid, s in self._sessions.items()
                if now - s.updated_at > self._ttl_seconds
            ]
            for sid in expired:
                del self._sessions[sid]

        for sid in expired:
            logger.info("Expired idle session %s", sid)
        return len(expired)
