"""FastAPI endpoints under /api for driving one in-process game session.

    GET  /api/health          liveness
    GET  /api/game            full snapshot (camelCase)
    GET  /api/game/summary    compact overview
    POST /api/game/start      intro → playing
    POST /api/game/advance    one event turn
    POST /api/game/ceremony   run the final ceremony
    POST /api/game/restart    fresh intro state
    GET  /api/settings        effective config
    PATCH /api/settings       partial update; swaps the live synthesizer

Wrong-phase requests and a busy session answer 409. A synthesizer or LLM
failure answers 502 and the session keeps its previous snapshot.
"""

from __future__ import annotations

import logging
import random
from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException

from inferno_island import engine
from inferno_island.autoplay import AdvanceInProgressError, AutoPlayer
from inferno_island.config import (
    build_synthesizer,
    get_config,
    preview_config,
    update_config,
)
from inferno_island.llm import LLMError
from inferno_island.models import GameState
from inferno_island.synth import SynthesisError, Synthesizer

logger = logging.getLogger(__name__)


class GameSession:
    """The single live game. Restart replaces the snapshot wholesale."""

    def __init__(self, synthesizer: Synthesizer, rng: random.Random | None = None,
                 window: int = engine.RECENT_EVENT_WINDOW) -> None:
        self._rng = rng
        self.player = AutoPlayer(engine.new_game(rng), synthesizer, window=window)

    @property
    def state(self) -> GameState:
        return self.player.state

    def start(self) -> GameState:
        if self.player.busy:
            raise AdvanceInProgressError("An advance is already in progress")
        self.player.state = engine.start_game(self.player.state)
        return self.player.state

    async def advance(self) -> GameState:
        if self.state.phase != "playing":
            raise engine.GameStateError(f"Cannot advance in phase {self.state.phase!r}")
        return await self.player.step()

    async def ceremony(self) -> GameState:
        if self.state.phase != "ceremony":
            raise engine.GameStateError(f"Cannot run the ceremony in phase {self.state.phase!r}")
        return await self.player.step()

    def restart(self) -> GameState:
        if self.player.busy:
            raise AdvanceInProgressError("An advance is already in progress")
        self.player.state = engine.restart(self._rng)
        self.player.last_error = None
        return self.player.state


def _dump(state: GameState) -> dict[str, Any]:
    return state.model_dump(by_alias=True)


def build_router(session: GameSession) -> APIRouter:
    router = APIRouter()

    async def _run(action) -> dict[str, Any]:
        try:
            return _dump(await action())
        except (engine.GameStateError, AdvanceInProgressError) as e:
            raise HTTPException(409, str(e))
        except (SynthesisError, LLMError) as e:
            raise HTTPException(502, str(e))

    @router.get("/health")
    async def health():
        """Health check."""
        return {"status": "ok"}

    @router.get("/game")
    async def get_game():
        """Current snapshot."""
        return _dump(session.state)

    @router.get("/game/summary")
    async def get_summary():
        """Phase, clock, top pairs and couples."""
        summary = engine.summarize(session.state)
        if session.player.last_error is not None:
            summary["lastError"] = str(session.player.last_error)
        return summary

    @router.post("/game/start")
    async def start_game():
        """Leave the intro and begin day 1."""
        try:
            return _dump(session.start())
        except (engine.GameStateError, AdvanceInProgressError) as e:
            raise HTTPException(409, str(e))

    @router.post("/game/advance")
    async def advance_game():
        """Synthesize and apply the next event."""
        return await _run(session.advance)

    @router.post("/game/ceremony")
    async def run_ceremony():
        """Synthesize and apply the final ceremony."""
        return await _run(session.ceremony)

    @router.post("/game/restart")
    async def restart_game():
        """Throw the session away and return to the intro."""
        try:
            return _dump(session.restart())
        except AdvanceInProgressError as e:
            raise HTTPException(409, str(e))

    @router.get("/settings")
    async def get_settings():
        """Effective config: defaults, stored values, then env overrides."""
        return get_config()

    @router.patch("/settings")
    async def update_settings(body: dict):
        """Persist a partial config update and rebuild the synthesizer from it."""
        try:
            synthesizer = build_synthesizer(preview_config(body))
        except ValueError as e:
            raise HTTPException(400, str(e))
        config = update_config(body)
        session.player.synthesizer = synthesizer
        logger.info("Switched to %s synthesizer", config["synthesizer"])
        return config

    return router


def create_app(session: GameSession | None = None) -> FastAPI:
    if session is None:
        config = get_config()
        session = GameSession(
            build_synthesizer(config), window=config["recent_event_window"]
        )
        logger.info("Using %s synthesizer", config["synthesizer"])

    app = FastAPI(title="Inferno Island")
    app.state.session = session
    app.include_router(build_router(session), prefix="/api")
    return app
