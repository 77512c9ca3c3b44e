from loguru import logger

from .board import EXITED, SPECIAL_CELLS, TRACK_SIZE, CellKind, SpecialCell
from .evaluator import evaluate_board
from .game_state import GameState, InvariantViolation, Piece, Player, Snapshot
from .greedy_brain import choose_greedy_move
from .move_engine import (
  EventKind,
  MoveEvent,
  MoveOutcome,
  ReentryReason,
  RejectReason,
  apply,
  is_legal_move,
  legal_pieces,
)
from .senet_brain import MAX_DEPTH, SearchResult, TraceEntry, choose_best_move, select_move
from .ThrowSticks import FixedDice, StickDice, roll_sticks
from .turn_controller import TurnController, TurnError, TurnRecord

# Library default: silent until an application enables it.
logger.disable("Senet")

__all__ = [
  "EXITED",
  "SPECIAL_CELLS",
  "TRACK_SIZE",
  "CellKind",
  "SpecialCell",
  "evaluate_board",
  "GameState",
  "InvariantViolation",
  "Piece",
  "Player",
  "Snapshot",
  "choose_greedy_move",
  "EventKind",
  "MoveEvent",
  "MoveOutcome",
  "ReentryReason",
  "RejectReason",
  "apply",
  "is_legal_move",
  "legal_pieces",
  "MAX_DEPTH",
  "SearchResult",
  "TraceEntry",
  "choose_best_move",
  "select_move",
  "FixedDice",
  "StickDice",
  "roll_sticks",
  "TurnController",
  "TurnError",
  "TurnRecord",
]
