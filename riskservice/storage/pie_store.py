"""
Pie Store
=========

PostgreSQL-backed pie storage with an in-memory backend.

Every published risk assessment references one stored pie. Pies are
scoped by patient reference and plugin method so a recalculation can
replace exactly the pies it produced last time.

Author: Risk Service Team
Version: 1.0.0
"""

import json
import logging
from typing import Dict, Iterable, List, Optional, Tuple

import asyncpg

from shared.schemas.fhir import Coding
from riskservice.plugins.pie import Pie, Slice

logger = logging.getLogger(__name__)


def _method_key(method: Coding) -> Tuple[str, str]:
    return (method.system or "", method.code or "")


class PieStore:
    """
    Pie storage with a PostgreSQL backend.

    Uses an in-memory backend when no DSN is configured.

    Usage:
        store = PieStore(dsn="postgresql://...")
        await store.initialize()
        await store.insert_many(pies, method_coding)
        pie = await store.get(pie_id)
    """

    CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS pies (
        id VARCHAR(64) PRIMARY KEY,
        patient VARCHAR(1024) NOT NULL,
        method_system VARCHAR(512) NOT NULL,
        method_code VARCHAR(128) NOT NULL,
        created TIMESTAMPTZ NOT NULL,
        slices JSONB NOT NULL DEFAULT '[]'
    );
    CREATE INDEX IF NOT EXISTS idx_pies_scope
        ON pies (patient, method_system, method_code);
    """

    def __init__(self, dsn: Optional[str] = None):
        self._dsn = dsn
        self._pool: Optional[asyncpg.Pool] = None
        self._use_pg = False
        # In-memory backend: {pie_id -> (method key, Pie)}
        self._memory: Dict[str, Tuple[Tuple[str, str], Pie]] = {}

    async def initialize(self) -> None:
        """Connect to PostgreSQL and create tables if needed."""
        if not self._dsn:
            logger.info("No PostgreSQL DSN, using in-memory pie store")
            return

        self._pool = await asyncpg.create_pool(self._dsn, min_size=1, max_size=5)
        async with self._pool.acquire() as conn:
            await conn.execute(self.CREATE_TABLE_SQL)
        self._use_pg = True
        logger.info("Pie store connected to PostgreSQL")

    async def close(self) -> None:
        if self._pool:
            await self._pool.close()

    # =========================================================================
    # Write
    # =========================================================================

    async def insert_many(self, pies: Iterable[Pie], method: Coding) -> None:
        """Store pies under the given plugin method."""
        pies = list(pies)
        if self._use_pg:
            await self._pg_insert(pies, method)
        else:
            key = _method_key(method)
            for pie in pies:
                self._memory[pie.id] = (key, pie.clone(False))

    async def _pg_insert(self, pies: List[Pie], method: Coding) -> None:
        system, code = _method_key(method)
        async with self._pool.acquire() as conn:
            await conn.executemany(
                """
                INSERT INTO pies (id, patient, method_system, method_code, created, slices)
                VALUES ($1, $2, $3, $4, $5, $6)
                """,
                [
                    (
                        pie.id,
                        pie.patient,
                        system,
                        code,
                        pie.created,
                        json.dumps([s.to_dict() for s in pie.slices]),
                    )
                    for pie in pies
                ],
            )

    async def remove_ids(self, ids: Iterable[str]) -> int:
        """Remove pies by id. Returns the number removed."""
        ids = list(ids)
        if not ids:
            return 0
        if self._use_pg:
            async with self._pool.acquire() as conn:
                status = await conn.execute(
                    "DELETE FROM pies WHERE id = ANY($1::varchar[])", ids
                )
            return int(status.split()[-1])
        removed = 0
        for pie_id in ids:
            if self._memory.pop(pie_id, None) is not None:
                removed += 1
        return removed

    async def remove_scope(
        self,
        patient: str,
        method: Coding,
        exclude_ids: Iterable[str] = (),
    ) -> int:
        """
        Remove every pie for a patient and plugin method.

        Args:
            patient: Patient reference stored on the pies
            method: Plugin method coding
            exclude_ids: Pies to keep even though they are in scope

        Returns:
            Number of pies removed
        """
        exclude = list(exclude_ids)
        if self._use_pg:
            system, code = _method_key(method)
            async with self._pool.acquire() as conn:
                status = await conn.execute(
                    """
                    DELETE FROM pies
                    WHERE patient = $1 AND method_system = $2 AND method_code = $3
                      AND NOT (id = ANY($4::varchar[]))
                    """,
                    patient, system, code, exclude,
                )
            return int(status.split()[-1])

        key = _method_key(method)
        keep = set(exclude)
        doomed = [
            pie_id
            for pie_id, (pie_key, pie) in self._memory.items()
            if pie_key == key and pie.patient == patient and pie_id not in keep
        ]
        for pie_id in doomed:
            del self._memory[pie_id]
        return len(doomed)

    # =========================================================================
    # Read
    # =========================================================================

    async def get(self, pie_id: str) -> Optional[Pie]:
        """Fetch a pie by id."""
        if self._use_pg:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT id, patient, created, slices FROM pies WHERE id = $1",
                    pie_id,
                )
            return self._row_to_pie(row) if row else None

        entry = self._memory.get(pie_id)
        return entry[1].clone(False) if entry else None

    async def list_scope(self, patient: str, method: Coding) -> List[Pie]:
        """All pies for a patient and plugin method, in no particular order."""
        if self._use_pg:
            system, code = _method_key(method)
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT id, patient, created, slices FROM pies
                    WHERE patient = $1 AND method_system = $2 AND method_code = $3
                    """,
                    patient, system, code,
                )
            return [self._row_to_pie(r) for r in rows]

        key = _method_key(method)
        return [
            pie.clone(False)
            for pie_key, pie in self._memory.values()
            if pie_key == key and pie.patient == patient
        ]

    @staticmethod
    def _row_to_pie(row) -> Pie:
        slices = row["slices"]
        if isinstance(slices, str):
            slices = json.loads(slices)
        return Pie(
            id=row["id"],
            patient=row["patient"],
            created=row["created"],
            slices=[Slice.from_dict(s) for s in slices],
        )
