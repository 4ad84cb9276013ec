import logging
from pathlib import Path

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ValidationError

from clubscore.db import open_store
from clubscore.importer import (
    EventNotFoundError,
    ImportSession,
    event_team_aggregate,
    is_match_play,
)
from clubscore.layout import ScorecardParseError
from clubscore.persistence import save_manual_score, score_entry_progress
from clubscore.resolver import guest, member
from clubscore.settings import TOKEN_MODES, load_settings
from clubscore.strokeplay import order_leaderboard

logger = logging.getLogger(__name__)

app = FastAPI()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))
settings = load_settings()


def _store():
    return open_store(settings.database_url)


def _load_event(store, event_id: int) -> dict:
    event = store.fetch_event(event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _resolve_mode(mode: str | None) -> str:
    normalized = (mode or "").strip().lower()
    return normalized if normalized in TOKEN_MODES else settings.token_mode


def _event_board(store, event: dict) -> dict:
    if is_match_play(event):
        return {"mode": "match_play", "team_aggregate": event_team_aggregate(store, event)}
    return {
        "mode": "stroke_play",
        "leaderboard": order_leaderboard(store.fetch_event_scores(event["id"])),
    }


@app.on_event("startup")
def startup() -> None:
    _store().ensure_schema()


@app.get("/", response_class=RedirectResponse)
async def index():
    return RedirectResponse(url="/events")


@app.get("/events", response_class=HTMLResponse)
async def events_page(request: Request):
    store = _store()
    events = [
        {**event, "progress": score_entry_progress(store, event["id"])}
        for event in store.fetch_events()
    ]
    return templates.TemplateResponse(request, "events.html", {"events": events})


@app.get("/events/{event_id}", response_class=HTMLResponse)
async def event_page(request: Request, event_id: int):
    store = _store()
    event = _load_event(store, event_id)
    return templates.TemplateResponse(
        request,
        "event_board.html",
        {"event": event, "board": _event_board(store, event)},
    )


@app.post("/api/events/{event_id}/scorecard/preview")
async def api_scorecard_preview(
    event_id: int,
    file: UploadFile = File(...),
    pin: str = Form(...),
    mode: str = Form(""),
):
    if pin != settings.scoring_pin:
        return JSONResponse({"error": "Invalid PIN"}, status_code=403)
    try:
        session = ImportSession(_store(), event_id, mode=_resolve_mode(mode))
    except EventNotFoundError as exc:
        return JSONResponse({"error": str(exc)}, status_code=404)
    content = await file.read()
    try:
        session.load(file.filename or "", content)
    except ScorecardParseError as exc:
        logger.info("Rejected scorecard %s for event %s: %s", file.filename, event_id, exc)
        return JSONResponse({"error": str(exc)}, status_code=422)
    return session.preview()


class ScorecardRowPayload(BaseModel):
    name: str
    hole_diffs_raw: list[str]
    total_strokes: int | None = None
    total_from_sheet: bool = True
    net_strokes: float | None = None
    group_number: int | None = None
    team_name: str | None = None
    row_number: int | None = None


class CommitPayload(BaseModel):
    pin: str
    mode: str | None = None
    par: list[int]
    par_source: str = "sheet"
    rows: list[ScorecardRowPayload]
    overrides: dict[str, str | None] = {}


@app.post("/api/events/{event_id}/scorecard/commit")
async def api_scorecard_commit(event_id: int, request: Request):
    try:
        payload = CommitPayload.model_validate(await request.json())
    except ValidationError as exc:
        return JSONResponse({"error": "Invalid payload", "details": exc.errors()}, status_code=422)

    if payload.pin != settings.scoring_pin:
        return JSONResponse({"error": "Invalid PIN"}, status_code=403)

    try:
        session = ImportSession(_store(), event_id, mode=_resolve_mode(payload.mode))
    except EventNotFoundError as exc:
        return JSONResponse({"error": str(exc)}, status_code=404)
    session.overrides = dict(payload.overrides)
    try:
        session.load_edited(
            payload.par,
            payload.par_source,
            [row.model_dump() for row in payload.rows],
        )
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=422)
    return session.commit()


class ManualScorePayload(BaseModel):
    pin: str
    member_id: str | None = None
    guest_name: str | None = None
    total_strokes: int
    net_strokes: float | None = None
    handicap: int | None = None
    rank: int | None = None
    notes: str | None = None
    hole_scores: list[int] | None = None
    group_number: int | None = None
    team_name: str | None = None


@app.post("/api/events/{event_id}/scores")
async def api_manual_score(event_id: int, request: Request):
    try:
        payload = ManualScorePayload.model_validate(await request.json())
    except ValidationError as exc:
        return JSONResponse({"error": "Invalid payload", "details": exc.errors()}, status_code=422)

    if payload.pin != settings.scoring_pin:
        return JSONResponse({"error": "Invalid PIN"}, status_code=403)

    store = _store()
    _load_event(store, event_id)
    if payload.member_id:
        roster = store.fetch_event_roster(event_id)
        name = next(
            (entry["display_name"] for entry in roster if entry["id"] == payload.member_id),
            None,
        )
        if name is None:
            return JSONResponse({"error": "Member is not registered for this event"}, status_code=422)
        participant = member(payload.member_id, name)
    elif (payload.guest_name or "").strip():
        participant = guest(payload.guest_name)
    else:
        return JSONResponse({"error": "member_id or guest_name is required"}, status_code=422)

    try:
        result = save_manual_score(
            store,
            event_id,
            participant,
            total_strokes=payload.total_strokes,
            net_strokes=payload.net_strokes,
            handicap=payload.handicap,
            rank=payload.rank,
            notes=payload.notes,
            hole_scores=payload.hole_scores,
            group_number=payload.group_number,
            team_name=payload.team_name,
        )
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=422)
    return {**result, "participant_name": participant.display_name, "is_guest": participant.is_guest}


@app.get("/api/events/{event_id}/leaderboard")
async def api_leaderboard(event_id: int):
    store = _store()
    _load_event(store, event_id)
    return {"scores": order_leaderboard(store.fetch_event_scores(event_id))}


@app.get("/api/events/{event_id}/match-play")
async def api_match_play(event_id: int):
    store = _store()
    event = _load_event(store, event_id)
    return event_team_aggregate(store, event)


@app.get("/api/events/{event_id}/progress")
async def api_progress(event_id: int):
    store = _store()
    _load_event(store, event_id)
    return score_entry_progress(store, event_id)
