from __future__ import annotations

from typing import Dict

from .board import BOUNDARY_CELL, FREE_EXIT_CELL, REGRESSION_CELL, RE_ATOUM_CELL, THREE_TRUTHS_CELL
from .game_state import GameState, Player

EXIT_WEIGHT = 1000
PENDING_EXIT_BONUS = 30
CELL_BONUS: Dict[int, int] = {
  BOUNDARY_CELL: 50,
  THREE_TRUTHS_CELL: 40,
  RE_ATOUM_CELL: 40,
  FREE_EXIT_CELL: 50,
  REGRESSION_CELL: -20,
}


def evaluate_board(state: GameState, mover: Player) -> float:
  """Static evaluation: positive is good for `mover`."""
  opponent = mover.other
  score = EXIT_WEIGHT * (state.exited(mover) - state.exited(opponent))

  for piece in state.all_pieces():
    if not piece.is_on_track:
      continue
    sign = 1 if piece.owner == mover else -1
    value = piece.position + CELL_BONUS.get(piece.position, 0)
    if piece.pending_conditional_exit:
      value += PENDING_EXIT_BONUS
    score += sign * value

  return float(score)


__all__ = ["EXIT_WEIGHT", "PENDING_EXIT_BONUS", "CELL_BONUS", "evaluate_board"]
