"""LedgerEngine — single-writer executor over the RiskPool aggregate.

Every mutation runs under one asyncio.Lock against a deep copy of the live
aggregate. The copy is checked for global invariants, flushed to the
database when a session is given, committed, and only then swapped in.
Any exception discards the copy, so a failed operation has no effect.

Reads go straight to the live aggregate; between swaps it is never
partially mutated.

Each write copies the whole aggregate, so its cost grows with the number
of accounts, events and policies held in memory. That is acceptable for a
single pool of modest size; a larger deployment needs per-component
copy-on-write or an undo log in place of deepcopy.
"""

import asyncio
import copy
import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from src.rp_common.errors import InvariantViolationError
from src.rp_engine.domain.invariants import verify_global_invariants
from src.rp_engine.domain.repository import StateRepositoryProtocol
from src.rp_engine.domain.risk_pool import RiskPool

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LedgerEngine:
    def __init__(
        self,
        pool: RiskPool | None = None,
        repo: StateRepositoryProtocol | None = None,
        check_invariants: bool = True,
    ) -> None:
        self._pool = pool or RiskPool()
        self._repo = repo
        self._check_invariants = check_invariants
        self._lock = asyncio.Lock()

    @property
    def pool(self) -> RiskPool:
        """Live aggregate, for reads only."""
        return self._pool

    async def load(self, db: AsyncSession) -> None:
        """Replace the live aggregate with the persisted state."""
        if self._repo is None:
            return
        async with self._lock:
            fresh = RiskPool(self._pool.config)
            self._pool = await self._repo.load(db, fresh)

    async def execute(
        self, operation: Callable[[RiskPool], T], db: AsyncSession | None = None
    ) -> T:
        """Apply `operation` atomically and return its result.

        `operation` runs on a deep copy of the live pool; see the module
        docstring for what that costs.
        """
        async with self._lock:
            working = copy.deepcopy(self._pool)
            result = operation(working)

            if self._check_invariants:
                violations = verify_global_invariants(working)
                if violations:
                    logger.critical("mutation rejected, %d invariant violations", len(violations))
                    raise InvariantViolationError(violations[0])

            if db is not None and self._repo is not None:
                try:
                    await self._repo.flush(self._pool, working, db)
                    await db.commit()
                except Exception:
                    await db.rollback()
                    raise

            self._pool = working
            return result
