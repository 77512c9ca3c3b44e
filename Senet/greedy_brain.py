"""
One-ply greedy opponent.

Scores each legal piece by where the roll would take it and plays the best.
Much weaker than the expectiminimax search but instant; kept as the
"greedy" strategy of the turn controller.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .board import (
  BOUNDARY_CELL,
  FREE_EXIT_CELL,
  REGRESSION_CELL,
  RE_ATOUM_CELL,
  THREE_TRUTHS_CELL,
  exit_roll_allowed,
  is_exit_target,
)
from .game_state import GameState, Piece, Player
from .move_engine import legal_pieces

EXIT_SCORE = 1000
FAILED_EXIT_SCORE = -1000
CAPTURE_SCORE = 30
LANDING_BONUS: Dict[int, int] = {
  BOUNDARY_CELL: 50,
  THREE_TRUTHS_CELL: 40,
  RE_ATOUM_CELL: 40,
  FREE_EXIT_CELL: 50,
  REGRESSION_CELL: -20,
}


def score_move(state: GameState, piece: Piece, roll: int) -> int:
  target = piece.position + roll

  if is_exit_target(target):
    if piece.pending_conditional_exit and not exit_roll_allowed(piece.position, roll):
      return FAILED_EXIT_SCORE
    return EXIT_SCORE

  score = LANDING_BONUS.get(target, 0)
  occupant = state.piece_at(target)
  if occupant is not None and occupant.owner != piece.owner:
    score += CAPTURE_SCORE
  score += target
  return score


def score_moves(state: GameState, mover: Player, roll: int) -> List[Tuple[int, int]]:
  return [(p.piece_id, score_move(state, p, roll)) for p in legal_pieces(state, mover, roll)]


def choose_greedy_move(state: GameState, mover: Player, roll: int) -> Optional[Piece]:
  best_piece: Optional[Piece] = None
  best_score = 0
  for piece in legal_pieces(state, mover, roll):
    score = score_move(state, piece, roll)
    if best_piece is None or score > best_score:
      best_piece = piece
      best_score = score
  return best_piece


__all__ = ["score_move", "score_moves", "choose_greedy_move"]
