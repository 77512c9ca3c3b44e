"""
FastAPI backend for Senet (30-cell track, 7 pieces per side).

Endpoints
---------
- GET /state           : pieces, exited counts, current player, pending roll, history
- POST /sticks/roll    : throw the sticks for the player to move
- POST /move/human     : play the pending roll with one of the human's pieces
- POST /move/computer  : let the computer play until a human is to move
- POST /reset          : start a new game (computer or two-player mode)

Player 1 always moves first; in computer mode the computer plays as player 2.
"""
from __future__ import annotations

import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Literal, Optional

from fastapi import FastAPI, HTTPException
from loguru import logger
from pydantic import BaseModel, Field

# Ensure the Senet package is importable when running from Backend/
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
  sys.path.append(str(ROOT))

from Senet import Player, TurnController, TurnError  # type: ignore
from Senet.board import PIECES_PER_SIDE  # type: ignore
from Senet.senet_brain import MAX_DEPTH  # type: ignore

LOG_LEVEL = os.environ.get("SENET_LOG_LEVEL", "INFO")


@asynccontextmanager
async def lifespan(app: FastAPI):
  # Adds a sink of our own; sinks already configured by the host stay in place.
  sink_id = logger.add(sys.stderr, level=LOG_LEVEL)
  logger.enable("Senet")
  try:
    yield
  finally:
    logger.disable("Senet")
    logger.remove(sink_id)


app = FastAPI(title="Senet Backend", version="0.1.0", lifespan=lifespan)


# ----------------------------
# Pydantic models
# ----------------------------
class StateResponse(BaseModel):
  current_player: int
  exited: dict
  winner: Optional[int]
  pieces: List[dict]
  pending_roll: Optional[int]
  computer_player: Optional[int]
  history: List[dict]


class RollResponse(BaseModel):
  player: int
  roll: int
  passed: bool
  current_player: int


class HumanMoveRequest(BaseModel):
  piece_id: int = Field(..., ge=0, lt=PIECES_PER_SIDE, description="Index of the piece in the player's roster")


class ComputerMoveRequest(BaseModel):
  depth: Optional[int] = Field(default=None, ge=1, le=5, description="Search depth for this request only.")
  strategy: Optional[Literal["expectiminimax", "greedy"]] = None


class ResetRequest(BaseModel):
  mode: Literal["computer", "two_player"] = "computer"
  depth: int = Field(default=MAX_DEPTH, ge=1, le=5)


class MoveResponse(BaseModel):
  outcome: Optional[dict]
  computer_turns: List[dict]
  state: StateResponse


# ----------------------------
# Game state
# ----------------------------
controller = TurnController()


def _state_payload() -> dict:
  payload = controller.state.to_dict()
  payload["pending_roll"] = controller.pending_roll
  payload["computer_player"] = controller.computer_player.value if controller.computer_player else None
  payload["history"] = [r.to_dict() for r in controller.history[-50:]]
  return payload


# ----------------------------
# Routes
# ----------------------------
@app.get("/state", response_model=StateResponse)
def get_state():
  return _state_payload()


@app.post("/sticks/roll", response_model=RollResponse)
def roll_sticks():
  if controller.is_computer_turn:
    raise HTTPException(status_code=400, detail="It is the computer's turn.")
  try:
    record = controller.roll()
  except TurnError as exc:
    raise HTTPException(status_code=400, detail=str(exc))
  return {
    "player": record.player.value,
    "roll": record.roll,
    "passed": record.passed,
    "current_player": controller.state.current_player.value,
  }


@app.post("/move/human", response_model=MoveResponse)
def human_move(body: HumanMoveRequest):
  if controller.is_computer_turn:
    raise HTTPException(status_code=400, detail="It is the computer's turn.")
  try:
    outcome = controller.move(body.piece_id)
  except (TurnError, ValueError) as exc:
    raise HTTPException(status_code=400, detail=str(exc))

  return {
    "outcome": outcome.to_dict(),
    "computer_turns": [],
    "state": _state_payload(),
  }


@app.post("/move/computer", response_model=MoveResponse)
def computer_move(body: ComputerMoveRequest):
  if not controller.is_computer_turn:
    raise HTTPException(status_code=400, detail="It is not the computer's turn.")
  try:
    records = controller.run_computer(depth=body.depth, strategy=body.strategy)
  except TurnError as exc:
    raise HTTPException(status_code=400, detail=str(exc))

  return {
    "outcome": None,
    "computer_turns": [r.to_dict() for r in records],
    "state": _state_payload(),
  }


@app.post("/reset")
def reset(body: ResetRequest):
  controller.reset(computer_player=Player.B if body.mode == "computer" else None)
  controller.depth = body.depth
  logger.info("New game in {} mode (depth {})", body.mode, body.depth)
  return {"ok": True}


__all__ = ["app"]
