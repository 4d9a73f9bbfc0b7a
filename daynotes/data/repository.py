import logging
import sqlite3
from collections.abc import Callable, Iterable
from datetime import date
from pathlib import Path
from typing import TypedDict, TypeVar

from daynotes.data.database import connect
from daynotes.data.errors import ErrorKind, StorageError
from daynotes.data.schema import DAILY_FOLDER, DAY_NOTE_TYPE, NOW_SQL
from daynotes.days import recent_days

logger = logging.getLogger(__name__)

T = TypeVar("T")

# created_at is left alone on conflict so the first-save time survives edits.
# The WHERE clause keeps the upsert from touching rows of another note type.
_UPSERT_SQL = f"""
INSERT INTO notes (id, body_markdown, note_type, folder_id, updated_at)
VALUES (?, ?, '{DAY_NOTE_TYPE}', '{DAILY_FOLDER}', {NOW_SQL})
ON CONFLICT(id) DO UPDATE SET
    body_markdown = excluded.body_markdown,
    folder_id = excluded.folder_id,
    updated_at = excluded.updated_at
WHERE notes.note_type = '{DAY_NOTE_TYPE}'
"""

_DAY_COLUMNS = "id AS day, body_markdown AS content, updated_at"

# Stays well under SQLITE_MAX_VARIABLE_NUMBER (999 on older builds),
# leaving one slot for the note_type parameter.
_MAX_IDS_PER_QUERY = 500


class DayNote(TypedDict):
    day: str
    content: str
    updated_at: str


class NoteRepository:
    """Day-note persistence over a single SQLite file.

    Every operation opens its own connection and closes it before returning,
    so an instance holds no connection state and may be shared freely.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = str(db_path)

    @property
    def db_path(self) -> str:
        return self._db_path

    def _run(self, operation: str, fn: Callable[[sqlite3.Connection], T]) -> T:
        try:
            with connect(self._db_path) as conn:
                return fn(conn)
        except sqlite3.Error as exc:
            error = StorageError.from_sqlite(exc)
            logger.warning("%s failed (%s): %s", operation, error.kind, exc)
            raise error from exc

    def save_note(self, day: str, content: str) -> None:
        def op(conn: sqlite3.Connection) -> int:
            cur = conn.execute(_UPSERT_SQL, (day, content))
            conn.commit()
            return cur.rowcount

        changed = self._run("save_note", op)
        if changed == 0:
            raise StorageError(
                ErrorKind.CONSTRAINT_VIOLATION,
                f"Note id '{day}' is already used by a note that is not a day note",
            )
        logger.debug("Saved day note %s (%d chars)", day, len(content))

    def load_note(self, day: str) -> DayNote | None:
        def op(conn: sqlite3.Connection) -> sqlite3.Row | None:
            cur = conn.execute(
                f"SELECT {_DAY_COLUMNS} FROM notes WHERE id = ? AND note_type = ?",
                (day, DAY_NOTE_TYPE),
            )
            return cur.fetchone()

        row = self._run("load_note", op)
        return _day_note(row) if row else None

    def load_notes_for_days(self, days: Iterable[str]) -> list[DayNote]:
        ids = list(dict.fromkeys(days))
        if not ids:
            return []

        # Long id lists are split so no statement exceeds SQLite's
        # bound-variable limit.
        batches = [
            ids[start : start + _MAX_IDS_PER_QUERY]
            for start in range(0, len(ids), _MAX_IDS_PER_QUERY)
        ]

        def op(conn: sqlite3.Connection) -> list[sqlite3.Row]:
            rows: list[sqlite3.Row] = []
            for batch in batches:
                placeholders = ",".join(["?"] * len(batch))
                query = f"""
                    SELECT {_DAY_COLUMNS}
                    FROM notes
                    WHERE id IN ({placeholders}) AND note_type = ?
                    ORDER BY id DESC
                """
                rows.extend(conn.execute(query, (*batch, DAY_NOTE_TYPE)).fetchall())
            return rows

        rows = self._run("load_notes_for_days", op)
        if len(batches) > 1:
            rows.sort(key=lambda row: row["day"], reverse=True)
        return [_day_note(row) for row in rows]

    def list_notes(self) -> list[DayNote]:
        def op(conn: sqlite3.Connection) -> list[sqlite3.Row]:
            cur = conn.execute(
                f"SELECT {_DAY_COLUMNS} FROM notes WHERE note_type = ? ORDER BY id DESC",
                (DAY_NOTE_TYPE,),
            )
            return cur.fetchall()

        return [_day_note(row) for row in self._run("list_notes", op)]

    def delete_note(self, day: str) -> None:
        def op(conn: sqlite3.Connection) -> int:
            cur = conn.execute(
                "DELETE FROM notes WHERE id = ? AND note_type = ?",
                (day, DAY_NOTE_TYPE),
            )
            conn.commit()
            return cur.rowcount

        deleted = self._run("delete_note", op)
        logger.debug("Deleted day note %s (rows=%d)", day, deleted)

    def load_recent_notes(self, count: int, today: date | None = None) -> list[DayNote]:
        """Load the notes of the last *count* days ending at *today*."""
        return self.load_notes_for_days(recent_days(count, today))


def _day_note(row: sqlite3.Row) -> DayNote:
    return {
        "day": str(row["day"]),
        "content": str(row["content"]),
        "updated_at": str(row["updated_at"]),
    }
