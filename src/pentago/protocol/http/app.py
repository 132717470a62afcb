from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    value_error_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore, Session
from ...ai.config import AIConfig
from ...ai.service import Decision, PentagoAI, play_ai_turn
from ...engine.board import BOARD_SIZE, PIECE_TO_CHAR, cell_coords
from ...engine.game import Game, Phase
from ...engine.move import cell_to_str, parse_rotation, str_to_cell
from ...engine.perft import perft as perft_nodes


logger = logging.getLogger(__name__)

PLAYER_NAMES = {0: "black", 1: "white"}
NAME_TO_PLAYER = {v: k for k, v in PLAYER_NAMES.items()}


class CreateGameRequest(BaseModel):
    ai_player: Optional[str] = Field(
        default=None, pattern="^(black|white)$", description="Color played by the AI"
    )
    difficulty: str = Field(default="medium", pattern="^(easy|medium|hard)$")
    seed: Optional[int] = None
    defense_first: bool = True


class CreateGameResponse(BaseModel):
    game_id: str
    position: str


class SetPositionRequest(BaseModel):
    position: str = Field(..., description="Position string: rows, side, phase")


class PlaceRequest(BaseModel):
    cell: str = Field(..., description="Cell in notation, e.g. c3")


class RotateRequest(BaseModel):
    rotation: str = Field(..., description="Rotation in notation, e.g. 1ccw")


class PerftRequest(BaseModel):
    position: Optional[str] = None
    depth: int = Field(default=1, ge=0, le=2)


class GameStateResponse(BaseModel):
    game_id: str
    position: str
    board: List[str]
    current_player: str
    phase: str
    state: str
    winner: Optional[str]
    legal_placements: List[str]
    last_move: Optional[str]
    last_rotation: Optional[str]
    move_history: List[str]


class DecisionInfo(BaseModel):
    kind: str
    state: Optional[str]
    result: str
    score: int
    simulations: int
    time_ms: int


class AIMoveResponse(BaseModel):
    played: str
    decisions: List[DecisionInfo]
    game: GameStateResponse


def create_app() -> FastAPI:
    app = FastAPI(title="Pentago Engine API", version="0.1.0")

    logging.basicConfig(level=os.environ.get("PENTAGO_LOG_LEVEL", "INFO").upper())

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        req = req or CreateGameRequest()
        session = Session()
        if req.ai_player is not None:
            config = AIConfig.for_difficulty(req.difficulty).with_options(
                defense_first=req.defense_first
            )
            player = NAME_TO_PLAYER[req.ai_player]
            session.ai = PentagoAI(player=player, config=config, seed=req.seed)
            session.ai_player = player
        game_id = store.create(session)
        logger.info(
            "game created",
            extra={"game_id": game_id, "ai_player": req.ai_player, "difficulty": req.difficulty},
        )
        return CreateGameResponse(game_id=game_id, position=session.game.to_position())

    @app.get("/api/games/{game_id}/state", response_model=GameStateResponse)
    async def get_state(game_id: str) -> GameStateResponse:
        session = _require_session(store, game_id)
        return _state(game_id, session.game)

    @app.post("/api/games/{game_id}/position", response_model=GameStateResponse)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameStateResponse:
        session = _require_session(store, game_id)
        try:
            game = Game.from_position(req.position)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid position")
        with session.lock:
            store.set_game(game_id, game)
            if session.ai is not None:
                session.ai.sync_turn_counter(game.board)
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/place", response_model=GameStateResponse)
    async def place(game_id: str, req: PlaceRequest) -> GameStateResponse:
        session = _require_session(store, game_id)
        try:
            cell = str_to_cell(req.cell)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        with session.lock:
            row, col = cell_coords(cell)
            try:
                session.game.place(row, col)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return _state(game_id, session.game)

    @app.post("/api/games/{game_id}/rotate", response_model=GameStateResponse)
    async def rotate(game_id: str, req: RotateRequest) -> GameStateResponse:
        session = _require_session(store, game_id)
        try:
            rotation = parse_rotation(req.rotation)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        with session.lock:
            try:
                session.game.rotate(rotation.quadrant, rotation.clockwise)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return _state(game_id, session.game)

    @app.post("/api/games/{game_id}/undo", response_model=GameStateResponse)
    async def undo(game_id: str) -> GameStateResponse:
        session = _require_session(store, game_id)
        with session.lock:
            try:
                session.game.undo()
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return _state(game_id, session.game)

    @app.post("/api/games/{game_id}/ai", response_model=AIMoveResponse)
    async def ai_move(game_id: str) -> AIMoveResponse:
        session = _require_session(store, game_id)
        with session.lock:
            game = session.game
            if game.is_over():
                raise HTTPException(status_code=400, detail="game is over")
            if session.ai_player is not None and game.current_player != session.ai_player:
                raise HTTPException(status_code=409, detail="it is not the AI's turn")
            ai = session.ai
            if ai is None:
                # Analysis mode: a throwaway AI plays for the side to move
                ai = PentagoAI(player=game.current_player)
                ai.sync_turn_counter(game.board)
            decisions: List[DecisionInfo] = []
            played = play_ai_turn(ai, game, lambda d: decisions.append(_decision_info(d)))
            logger.info(
                "ai played",
                extra={"game_id": game_id, "played": played, "state": game.state.value},
            )
            return AIMoveResponse(played=played, decisions=decisions, game=_state(game_id, game))

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, Any]:
        try:
            game = Game.from_position(req.position) if req.position else Game.new()
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid position")
        if game.phase != Phase.PLACE:
            raise HTTPException(status_code=400, detail="perft needs a position in the place phase")
        nodes = perft_nodes(game.board, req.depth, game.current_player)
        return {"nodes": nodes, "depth": req.depth}

    return app


def _decision_info(d: Decision) -> DecisionInfo:
    return DecisionInfo(
        kind=d.kind,
        state=d.state.value if d.state else None,
        result=d.result(),
        score=d.score,
        simulations=d.simulations,
        time_ms=d.time_ms,
    )


def _state(game_id: str, game: Game) -> GameStateResponse:
    rows = [
        "".join(PIECE_TO_CHAR[game.board.piece_at(row, col)] for col in range(BOARD_SIZE))
        for row in range(BOARD_SIZE)
    ]
    winner = game.winner()
    return GameStateResponse(
        game_id=game_id,
        position=game.to_position(),
        board=rows,
        current_player=PLAYER_NAMES[game.current_player],
        phase=game.phase.value,
        state=game.state.value,
        winner=PLAYER_NAMES[winner] if winner is not None else None,
        legal_placements=[cell_to_str(c) for c in game.legal_placements()],
        last_move=cell_to_str(game.last_move) if game.last_move is not None else None,
        last_rotation=game.last_rotation.to_notation() if game.last_rotation else None,
        move_history=game.move_history(),
    )


def _require_session(store: InMemorySessionStore, game_id: str) -> Session:
    session = store.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="game not found")
    return session


# Default app for non-factory servers
app = create_app()
