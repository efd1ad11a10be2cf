"""
Comment persistence (raw SQL).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from core.db import Database


@dataclass(frozen=True)
class CommentPage:
    comments: list[dict]
    total_pages: int
    current_page: int
    total_comments: int


class CommentRepository:
    def __init__(self, database: Database) -> None:
        self._db = database

    async def list_page(self, page: int = 1, limit: int = 6) -> CommentPage:
        """
        One page of comments, newest first, plus totals for the pager.
        """
        offset = (page - 1) * limit
        total = int(await self._db.fetch_val("SELECT COUNT(*) FROM comentarios") or 0)
        rows: list[dict] = []
        # Pages past the end are empty without a row query.
        if offset < total:
            rows = await self._db.fetch_all(
                """
                SELECT id, nombre, comentario,
                       TO_CHAR(fecha, 'DD/MM/YYYY HH24:MI') AS fecha_formateada,
                       fecha AS fecha_original
                FROM comentarios
                ORDER BY fecha DESC
                LIMIT $1 OFFSET $2
                """,
                limit,
                offset,
            )
        return CommentPage(
            comments=rows,
            total_pages=math.ceil(total / limit),
            current_page=page,
            total_comments=total,
        )

    async def get_by_id(self, comment_id: int) -> dict | None:
        return await self._db.fetch_one(
            """
            SELECT id, nombre, comentario, fecha,
                   TO_CHAR(fecha, 'DD/MM/YYYY HH24:MI') AS fecha_formateada
            FROM comentarios
            WHERE id = $1
            """,
            comment_id,
        )

    async def create(self, *, nombre: str, comentario: str) -> dict:
        row = await self._db.fetch_one(
            """
            INSERT INTO comentarios (nombre, comentario)
            VALUES ($1, $2)
            RETURNING id, nombre, comentario, fecha,
                      TO_CHAR(fecha, 'DD/MM/YYYY HH24:MI') AS fecha_formateada
            """,
            nombre,
            comentario,
        )
        if row is None:
            raise RuntimeError("Failed to create comment.")
        return row

    async def delete_by_id(self, comment_id: int) -> dict | None:
        return await self._db.fetch_one(
            """
            DELETE FROM comentarios
            WHERE id = $1
            RETURNING id, nombre, comentario, fecha
            """,
            comment_id,
        )

    async def get_stats(self) -> dict:
        # MIN/MAX are NULL on an empty table, so both dates come back as None.
        row = await self._db.fetch_one(
            """
            SELECT COUNT(*) AS total,
                   TO_CHAR(MIN(fecha), 'DD/MM/YYYY') AS primer_comentario,
                   TO_CHAR(MAX(fecha), 'DD/MM/YYYY') AS ultimo_comentario
            FROM comentarios
            """
        )
        if row is None:
            return {"total": 0, "primer_comentario": None, "ultimo_comentario": None}
        return {
            "total": int(row["total"] or 0),
            "primer_comentario": row["primer_comentario"],
            "ultimo_comentario": row["ultimo_comentario"],
        }
