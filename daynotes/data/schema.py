DAY_NOTE_TYPE = "day"
DAILY_FOLDER = "daily"

# ISO-8601 with milliseconds, UTC
NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

NOTES_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS notes (
    id TEXT PRIMARY KEY,
    body_markdown TEXT NOT NULL DEFAULT '',
    body_json TEXT NOT NULL DEFAULT '',
    folder_id TEXT,
    note_type TEXT NOT NULL DEFAULT '{DAY_NOTE_TYPE}',
    is_archived INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT ({NOW_SQL}),
    updated_at TEXT NOT NULL DEFAULT ({NOW_SQL})
)
"""

NOTES_INDEX_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_notes_folder ON notes(folder_id)",
    "CREATE INDEX IF NOT EXISTS idx_notes_type ON notes(note_type)",
    "CREATE INDEX IF NOT EXISTS idx_notes_updated ON notes(updated_at)",
    "CREATE INDEX IF NOT EXISTS idx_notes_day_type ON notes(id, note_type)",
]

SCHEMA_STATEMENTS = [NOTES_TABLE_SQL, *NOTES_INDEX_SQL]
