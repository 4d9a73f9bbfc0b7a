from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from daynotes.config import Config
from daynotes.data.database import init_database_from_config
from daynotes.data.errors import ErrorKind, StorageError
from daynotes.data.repository import NoteRepository
from daynotes.days import note_stats, recent_days

logger = logging.getLogger(__name__)


class DayNoteOut(BaseModel):
    day: str
    content: str
    updated_at: str


class NoteSave(BaseModel):
    content: str = Field(default="")


class DaysQuery(BaseModel):
    days: List[str] = Field(default_factory=list)


class RecentDayOut(BaseModel):
    day: str
    note: Optional[DayNoteOut]


class NoteStatsOut(BaseModel):
    day: str
    characters: int
    words: int


class SaveNoteArgs(BaseModel):
    id: str
    content: str = ""


class NoteIdArgs(BaseModel):
    id: str


class NoArgs(BaseModel):
    pass


_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONSTRAINT_VIOLATION: 409,
}

_OK = {"status": "ok"}


def _commands(repo: NoteRepository) -> dict[str, tuple[type[BaseModel], Callable[[Any], Any]]]:
    """Named remote calls accepted by ``POST /invoke/{command}``."""

    def save(args: SaveNoteArgs) -> dict:
        repo.save_note(args.id, args.content)
        return _OK

    def delete(args: NoteIdArgs) -> dict:
        repo.delete_note(args.id)
        return _OK

    return {
        "save_note": (SaveNoteArgs, save),
        "load_note": (NoteIdArgs, lambda args: repo.load_note(args.id)),
        "load_notes_for_days": (
            DaysQuery,
            lambda args: repo.load_notes_for_days(args.days),
        ),
        "list_notes": (NoArgs, lambda _args: repo.list_notes()),
        "delete_note": (NoteIdArgs, delete),
    }


def create_app(
    repo: NoteRepository | None = None,
    config: Config | None = None,
) -> FastAPI:
    """Build the bridge app.

    Without *repo* the database is initialized from *config* (or the default
    configuration) when the app starts, before any command is served.
    """
    cfg = config or Config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "repo", None) is None:
            app.state.repo = NoteRepository(init_database_from_config(cfg))
        yield

    app = FastAPI(title="WT Notes API", lifespan=lifespan)
    app.state.repo = repo

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorageError)
    async def storage_error_handler(_request: Request, exc: StorageError) -> JSONResponse:
        return JSONResponse(
            status_code=_STATUS_BY_KIND.get(exc.kind, 500),
            content={"detail": str(exc), "kind": exc.kind.value},
        )

    def _repo() -> NoteRepository:
        return app.state.repo

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/notes", response_model=list[DayNoteOut])
    def list_notes() -> list[DayNoteOut]:
        return [DayNoteOut(**note) for note in _repo().list_notes()]

    @app.post("/notes/days", response_model=list[DayNoteOut])
    def load_notes_for_days(payload: DaysQuery) -> list[DayNoteOut]:
        notes = _repo().load_notes_for_days(payload.days)
        return [DayNoteOut(**note) for note in notes]

    @app.get("/notes/{day}", response_model=Optional[DayNoteOut])
    def load_note(day: str) -> Optional[DayNoteOut]:
        note = _repo().load_note(day)
        return DayNoteOut(**note) if note else None

    @app.put("/notes/{day}")
    def save_note(day: str, payload: NoteSave) -> dict:
        _repo().save_note(day, payload.content)
        return _OK

    @app.delete("/notes/{day}")
    def delete_note(day: str) -> dict:
        _repo().delete_note(day)
        return _OK

    @app.get("/notes/{day}/stats", response_model=NoteStatsOut)
    def get_note_stats(day: str) -> NoteStatsOut:
        note = _repo().load_note(day)
        stats = note_stats(note["content"] if note else "")
        return NoteStatsOut(day=day, **stats)

    @app.get("/days/recent", response_model=list[RecentDayOut])
    def list_recent_days(
        count: Optional[int] = Query(default=None, ge=1, le=366),
    ) -> list[RecentDayOut]:
        window = count or cfg.recent_days
        today = date.today()
        notes = _repo().load_recent_notes(window, today)
        by_day = {note["day"]: note for note in notes}
        day_ids = recent_days(window, today)
        return [
            RecentDayOut(
                day=day,
                note=DayNoteOut(**by_day[day]) if day in by_day else None,
            )
            for day in day_ids
        ]

    @app.post("/invoke/{command}")
    def invoke(command: str, payload: Optional[dict[str, Any]] = None) -> Any:
        handlers = _commands(_repo())
        if command not in handlers:
            raise HTTPException(status_code=404, detail=f"Unknown command '{command}'")
        args_model, handler = handlers[command]
        try:
            args = args_model(**(payload or {}))
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=exc.errors()) from exc
        logger.debug("Invoking %s", command)
        return handler(args)

    return app
