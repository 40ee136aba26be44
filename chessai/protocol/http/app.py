from __future__ import annotations

import logging
from typing import Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from .error import (
    BadMove,
    GameNotFound,
    TurnConflict,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import GameSession, InMemorySessionStore
from ...assets.book import OpeningBook, load_book
from ...config import Settings
from ...engine.game import Game
from ...engine.move import parse_uci, square_to_str, str_to_square
from ...engine.piece import Side
from ...eval import activity, evaluate, material, positional, tension
from ...search.service import SearchConfig, SearchResult, SearchService


logger = logging.getLogger(__name__)


class AIConfigRequest(BaseModel):
    strategy: Literal["minimax", "mcts"] = "minimax"
    depth: Optional[int] = Field(default=None, ge=1, le=8)
    iterations: Optional[int] = Field(default=None, ge=1, le=100_000)
    seed: Optional[int] = None
    opening: Optional[str] = Field(default=None, description="Lock book moves to this opening")


class CreateGameRequest(BaseModel):
    mode: Literal["two_player", "vs_ai"] = "two_player"
    player_color: Literal["white", "black"] = "white"
    ai: AIConfigRequest = Field(default_factory=AIConfigRequest)


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="UCI move string, e.g., e2e4 or e7e8q")


class CapturedPieces(BaseModel):
    white: List[str]
    black: List[str]


class GameState(BaseModel):
    game_id: str
    mode: str
    fen: str
    side_to_move: str
    status: str
    status_side: Optional[str]
    in_check: bool
    game_over: bool
    ai_to_move: bool
    legal_moves: List[str]
    last_move: Optional[str]
    move_history: List[str]
    captured: CapturedPieces
    opening_name: Optional[str]


class AIMoveResponse(BaseModel):
    move: Optional[str]
    source: str
    score: Optional[int]
    nodes: int
    time_ms: int
    applied: bool
    state: GameState


class SquareMovesResponse(BaseModel):
    square: str
    moves: List[str]


class EvaluationResponse(BaseModel):
    score: int
    material: int
    tension: int
    activity: int
    positional: int


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="Chess AI API", version="0.1.0")

    logging.basicConfig(level=settings.log_level)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    book = load_book(settings.book_paths)
    app.state.store = store
    app.state.book = book
    app.state.settings = settings

    def ai_config_from(req: AIConfigRequest) -> SearchConfig:
        return SearchConfig(
            strategy=req.strategy,
            depth=req.depth or settings.default_depth,
            iterations=req.iterations or settings.default_iterations,
            seed=req.seed,
        )

    async def play_ai(session: GameSession) -> SearchResult:
        """Search on a snapshot off the event loop and apply if still current."""
        with session.lock:
            generation = session.generation
            board = session.game.board.copy()
            config = session.ai_config
        service = SearchService(book, opening=session.opening)
        result = await run_in_threadpool(service.search, board, config)
        with session.lock:
            if result.best_move is None:
                return result
            if session.generation != generation:
                logger.info(
                    "discarding stale AI move %s (generation %d != %d)",
                    result.best_move.to_uci(),
                    generation,
                    session.generation,
                )
                result.best_move = None
                result.source = "stale"
                return result
            session.game.apply_move(result.best_move)
            session.bump()
        return result

    async def maybe_open_for_ai(session: GameSession) -> None:
        # The AI makes the first move when the human plays black
        if session.ai_side is not None and session.game.side_to_move is session.ai_side:
            await play_ai(session)

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/openings")
    async def openings() -> Dict[str, List[str]]:
        return {"openings": book.available_openings}

    @app.post("/api/games", response_model=GameState)
    async def create_game(req: Optional[CreateGameRequest] = None) -> GameState:
        req = req or CreateGameRequest()
        session = GameSession(game=Game.new(), ai_config=ai_config_from(req.ai))
        session.opening = req.ai.opening
        if req.mode == "vs_ai":
            human = Side.WHITE if req.player_color == "white" else Side.BLACK
            session.ai_side = human.opposite
        game_id = store.create(session)
        logger.info("created game %s mode=%s", game_id, req.mode)
        await maybe_open_for_ai(session)
        return _state(game_id, session, book)

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        session = _require_session(store, game_id)
        return _state(game_id, session, book)

    @app.get("/api/games/{game_id}/moves", response_model=SquareMovesResponse)
    async def moves_from(game_id: str, square: str) -> SquareMovesResponse:
        session = _require_session(store, game_id)
        sq = str_to_square(square)
        if sq is None:
            raise HTTPException(status_code=400, detail=f"invalid square: {square!r}")
        moves = session.game.legal_moves_from(sq)
        return SquareMovesResponse(square=square_to_str(sq), moves=[m.to_uci() for m in moves])

    @app.get("/api/games/{game_id}/evaluate", response_model=EvaluationResponse)
    async def evaluate_position(game_id: str) -> EvaluationResponse:
        board = _require_session(store, game_id).game.board
        return EvaluationResponse(
            score=evaluate(board),
            material=material(board),
            tension=tension(board),
            activity=activity(board),
            positional=positional(board),
        )

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        """Apply a human move.

        Versus the AI the reply is not started here: the returned state has
        ``ai_to_move`` set and the client asks for the reply via ``/ai-move``.
        """
        session = _require_session(store, game_id)
        try:
            move = parse_uci(req.move)
        except ValueError as e:
            raise BadMove(str(e))
        with session.lock:
            game = session.game
            if game.status().is_terminal:
                raise TurnConflict("game is over")
            if session.ai_side is not None and game.side_to_move is session.ai_side:
                raise TurnConflict("it is the AI's turn")
            legal = game.legal_moves()
            if move.promotion is None and any(
                m.from_sq == move.from_sq and m.to_sq == move.to_sq and m.promotion
                for m in legal
            ):
                raise BadMove("promotion required")
            try:
                game.apply_move(move)
            except ValueError:
                raise BadMove()
            session.bump()
        return _state(game_id, session, book)

    @app.post("/api/games/{game_id}/ai-move", response_model=AIMoveResponse)
    async def ai_move(game_id: str) -> AIMoveResponse:
        session = _require_session(store, game_id)
        with session.lock:
            if session.game.status().is_terminal:
                raise TurnConflict("game is over")
            if session.ai_side is not None and session.game.side_to_move is not session.ai_side:
                raise TurnConflict("it is not the AI's turn")
        result = await play_ai(session)
        return AIMoveResponse(
            move=result.best_move.to_uci() if result.best_move else None,
            source=result.source,
            score=result.score,
            nodes=result.nodes,
            time_ms=result.time_ms,
            applied=result.best_move is not None,
            state=_state(game_id, session, book),
        )

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str) -> GameState:
        session = _require_session(store, game_id)
        with session.lock:
            game = session.game
            # Versus the AI, taking back its reply also takes back the human move before it
            ai_replied = session.ai_side is not None and game.side_to_move is not session.ai_side
            try:
                game.undo_move()
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            if ai_replied and game.snapshots:
                game.undo_move()
            session.bump()
        # Taking back the AI's opening move hands the first move straight back to it
        await maybe_open_for_ai(session)
        return _state(game_id, session, book)

    @app.post("/api/games/{game_id}/reset", response_model=GameState)
    async def reset(game_id: str) -> GameState:
        session = _require_session(store, game_id)
        session.replace_game(Game.new())
        await maybe_open_for_ai(session)
        return _state(game_id, session, book)

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        session = _require_session(store, game_id)
        try:
            game = Game.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        session.replace_game(game)
        return _state(game_id, session, book)

    return app


def _require_session(store: InMemorySessionStore, game_id: str) -> GameSession:
    session = store.get(game_id)
    if session is None:
        raise GameNotFound(game_id)
    return session


def _state(game_id: str, session: GameSession, book: OpeningBook) -> GameState:
    with session.lock:
        game = session.game
        status = game.status()
        history = game.move_history_uci()
        return GameState(
            game_id=game_id,
            mode="vs_ai" if session.vs_ai else "two_player",
            fen=game.to_fen(),
            side_to_move=_side_name(game.side_to_move),
            status=status.kind.value,
            status_side=_side_name(status.side) if status.side else None,
            in_check=game.in_check(),
            game_over=status.is_terminal,
            ai_to_move=session.ai_side is game.side_to_move and not status.is_terminal,
            legal_moves=[m.to_uci() for m in game.legal_moves()],
            last_move=history[-1] if history else None,
            move_history=history,
            captured=CapturedPieces(
                white=[p.fen_char() for p in game.board.captured_by(Side.WHITE)],
                black=[p.fen_char() for p in game.board.captured_by(Side.BLACK)],
            ),
            opening_name=book.opening_name(game.board),
        )


def _side_name(side: Side) -> str:
    return side.name.lower()
