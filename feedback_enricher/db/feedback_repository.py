"""Persistence helpers for enriched feedback.

Updates:
    v0.1.0 - 2026-09-14 - Insert and list enriched feedback.
    v0.2.0 - 2026-09-30 - Rating filters and analytics aggregates.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from ..core.models import EnrichedFeedback
from .sqlite_client import SQLiteClient

RECENT_WINDOW = timedelta(days=1)


def utc_timestamp(moment: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp with second precision and ``Z`` suffix."""

    moment = moment or datetime.now(timezone.utc)
    return (
        moment.astimezone(timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )


class FeedbackRepository:
    """Provides storage and aggregate queries for feedback records."""

    def __init__(self, sqlite_client: SQLiteClient) -> None:
        self._sqlite = sqlite_client

    def insert(self, enriched: EnrichedFeedback, *, created_at: str) -> int:
        record = enriched.as_record()
        with self._sqlite.connection as conn:
            cursor = conn.execute(
                """
                INSERT INTO feedback (rating, review, ai_response, ai_summary, ai_actions, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    record["rating"],
                    record["review"],
                    record["ai_response"],
                    record["ai_summary"],
                    record["ai_actions"],
                    created_at,
                ),
            )
            return int(cursor.lastrowid)

    def fetch(
        self,
        *,
        rating: Optional[int] = None,
        limit: Optional[int] = None,
        sort: str = "desc",
    ) -> list[dict[str, Any]]:
        """Return stored feedback, newest first unless ``sort`` is ``"asc"``.

        Args:
            rating (int | None): Only return feedback with this rating.
            limit (int | None): Maximum number of rows; ``None`` or ``0`` returns all.
            sort (str): ``"asc"`` or ``"desc"``; other values sort descending.

        Returns:
            list[dict[str, Any]]: Feedback rows as dictionaries.
        """

        query = "SELECT * FROM feedback"
        params: list[Any] = []
        if rating is not None:
            query += " WHERE rating = ?"
            params.append(rating)
        direction = "ASC" if str(sort).lower() == "asc" else "DESC"
        query += f" ORDER BY datetime(created_at) {direction}, id {direction}"
        if limit:
            query += " LIMIT ?"
            params.append(limit)

        with self._sqlite.connection as conn:
            cursor = conn.execute(query, params)
            return [dict(row) for row in cursor.fetchall()]

    def analytics(
        self,
        *,
        rating: Optional[int] = None,
        recent_since: datetime | None = None,
    ) -> dict[str, Any]:
        """Aggregate totals, average rating, distribution and recent volume.

        Args:
            rating (int | None): Restrict total, average and recent count to one rating.
                The distribution always covers every rating.
            recent_since (datetime | None): Lower bound for the recent count; defaults
                to 24 hours ago.

        Returns:
            dict[str, Any]: ``total``, ``avg_rating``, ``by_rating`` and ``recent``.
        """

        where = ""
        params: list[Any] = []
        if rating is not None:
            where = " WHERE rating = ?"
            params.append(rating)

        since = recent_since or (datetime.now(timezone.utc) - RECENT_WINDOW)
        recent_clause = " AND" if where else " WHERE"

        with self._sqlite.connection as conn:
            totals = conn.execute(
                f"SELECT COUNT(*) AS count, AVG(rating) AS avg FROM feedback{where}",
                params,
            ).fetchone()
            distribution = conn.execute(
                "SELECT rating, COUNT(*) AS count FROM feedback GROUP BY rating ORDER BY rating DESC"
            ).fetchall()
            recent = conn.execute(
                f"SELECT COUNT(*) AS count FROM feedback{where}"
                f"{recent_clause} datetime(created_at) > datetime(?)",
                [*params, utc_timestamp(since)],
            ).fetchone()

        average = totals["avg"]
        return {
            "total": totals["count"],
            "avg_rating": round(average, 2) if average is not None else 0,
            "by_rating": [dict(row) for row in distribution],
            "recent": recent["count"],
        }

    def delete_all(self) -> None:
        with self._sqlite.connection as conn:
            conn.execute("DELETE FROM feedback")
