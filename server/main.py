"""FastAPI server exposing clue/guess requests, autonomous games and replay."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from codenames.codenames_record import load_record
from codenames.codenames_replay import replay as replay_record
from codenames.codenames_state import GameState
from engine.errors import BoardSetupError, IllegalTransitionError
from engine.providers.adapter import ProviderFailure
from engine.serialize import json_dumps, to_serializable
from server.provider_factory import create_adapter
from server.schemas import CreateGameRequest, ReplayRequest, RoleRequest
from server.session import GameSession, GameSessionStore

store = GameSessionStore()


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    store.cancel_all()


app = FastAPI(title="Codenames LLM API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""
    return {"status": "ok"}


def _state_for(request: RoleRequest) -> GameState:
    try:
        state = GameState.from_dict(request.state)
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid state: {exc}") from exc
    if state.current_team is not request.team:
        raise ValueError(f"It is {state.current_team.value}'s turn, not {request.team.value}'s.")
    return state


def _bad_request(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


def _failure_response(failure: ProviderFailure) -> JSONResponse:
    return JSONResponse(status_code=502, content=failure.to_dict())


@app.post("/api/clue", response_model=None)
async def request_clue(request: RoleRequest) -> Any:
    """Ask the clue giver model for one clue."""
    try:
        state = _state_for(request)
        adapter = create_adapter(request.provider)
        clue = await adapter.request_clue(state)
    except (IllegalTransitionError, ValueError) as exc:
        return _bad_request(exc)
    if isinstance(clue, ProviderFailure):
        return _failure_response(clue)
    return {"clue": to_serializable(clue)}


@app.post("/api/guess", response_model=None)
async def request_guess(request: RoleRequest) -> Any:
    """Ask the guesser model for one guess (or a skip)."""
    try:
        state = _state_for(request)
        adapter = create_adapter(request.provider)
        proposal = await adapter.request_guess(state)
    except (IllegalTransitionError, ValueError) as exc:
        return _bad_request(exc)
    if isinstance(proposal, ProviderFailure):
        return _failure_response(proposal)
    return {"guess": to_serializable(proposal)}


def _session(game_id: str) -> GameSession:
    try:
        return store.get(game_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown game_id: {game_id}") from exc


@app.post("/api/game/new")
def new_game(request: CreateGameRequest) -> dict[str, Any]:
    """Create a game from a custom board or a random deal."""
    try:
        session = store.create_game(
            words=request.words,
            card_types=request.card_types,
            seed=request.seed,
            provider=request.provider,
            providers=request.providers,
            pacing_delay_sec=request.pacing_delay_sec,
        )
    except BoardSetupError as exc:
        raise HTTPException(status_code=400, detail=exc.to_dict()) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return session.view()


@app.get("/api/game/{game_id}")
def get_game(game_id: str, show_key: bool = Query(default=False)) -> dict[str, Any]:
    """Current snapshot of a game."""
    return _session(game_id).view(show_key=show_key)


@app.post("/api/game/{game_id}/run")
async def run_game(game_id: str) -> dict[str, Any]:
    """Run or resume a game until it ends, halts or is cancelled."""
    session = _session(game_id)
    try:
        return await session.run()
    except RuntimeError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@app.post("/api/game/{game_id}/cancel")
def cancel_game(game_id: str) -> dict[str, Any]:
    """Abandon the in-flight run of a game."""
    session = _session(game_id)
    return {"game_id": game_id, "cancelled": session.cancel()}


@app.get("/api/game/{game_id}/events", response_model=None)
def get_events(game_id: str, format: str = Query(default="array")) -> Any:
    """Return the event history as an array (default) or JSONL text."""
    events = [event.to_dict() for event in _session(game_id).events]
    if format == "jsonl":
        text = "\n".join(json_dumps(event) for event in events)
        return PlainTextResponse(content=text, media_type="application/jsonl")
    return events


@app.get("/api/game/{game_id}/record")
def get_record(game_id: str) -> dict[str, Any]:
    """The saved record of a finished game."""
    session = _session(game_id)
    if session.record is None:
        detail = "Game ended without a record." if session.state.over else "Game is not over yet."
        raise HTTPException(status_code=409, detail=detail)
    return session.record.to_dict()


@app.post("/api/replay")
def replay(request: ReplayRequest) -> dict[str, Any]:
    """Rebuild playback snapshots from a record and report divergences."""
    try:
        record = load_record(request.record)
        run = replay_record(record)
    except (ValidationError, BoardSetupError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return run.to_dict()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.main:app", host="0.0.0.0", port=8000, reload=True)
