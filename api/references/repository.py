"""
Reference persistence (raw SQL).
"""

from __future__ import annotations

from core.db import Database


class ReferenceRepository:
    def __init__(self, database: Database) -> None:
        self._db = database

    async def list_all(self) -> list[dict]:
        return await self._db.fetch_all(
            """
            SELECT id, nombre, titulo, correo, carta, fecha,
                   TO_CHAR(fecha, 'DD/MM/YYYY HH24:MI') AS fecha_formateada
            FROM referencias
            ORDER BY fecha DESC
            """
        )

    async def get_by_id(self, reference_id: int) -> dict | None:
        return await self._db.fetch_one(
            """
            SELECT id, nombre, titulo, correo, carta, fecha,
                   TO_CHAR(fecha, 'DD/MM/YYYY HH24:MI') AS fecha_formateada
            FROM referencias
            WHERE id = $1
            """,
            reference_id,
        )

    async def create(self, *, nombre: str, titulo: str, correo: str, carta: str) -> dict:
        row = await self._db.fetch_one(
            """
            INSERT INTO referencias (nombre, titulo, correo, carta)
            VALUES ($1, $2, $3, $4)
            RETURNING id, nombre, titulo, correo, carta, fecha,
                      TO_CHAR(fecha, 'DD/MM/YYYY HH24:MI') AS fecha_formateada
            """,
            nombre,
            titulo,
            correo,
            carta,
        )
        if row is None:
            raise RuntimeError("Failed to create reference.")
        return row
