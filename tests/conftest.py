from __future__ import annotations

from typing import Callable, Sequence

import pytest

from Senet.board import EXITED, PIECES_PER_SIDE, sets_pending_exit
from Senet.game_state import GameState, Piece, Player


def build_state(
  a_positions: Sequence[int],
  b_positions: Sequence[int],
  current: Player = Player.A,
) -> GameState:
  """Position with the given on-track pieces; every other piece has exited.

  Pieces parked on 27/28/29 get their pending-exit flag, as they would in play.
  """
  rosters = {Player.A: [], Player.B: []}
  for player, positions in ((Player.A, a_positions), (Player.B, b_positions)):
    for piece_id in range(PIECES_PER_SIDE):
      position = positions[piece_id] if piece_id < len(positions) else EXITED
      rosters[player].append(Piece(player, piece_id, position, sets_pending_exit(position)))
  state = GameState(
    rosters=rosters,
    current_player=current,
    exited_counts={
      Player.A: PIECES_PER_SIDE - len(a_positions),
      Player.B: PIECES_PER_SIDE - len(b_positions),
    },
  )
  state.check_invariants()
  return state


@pytest.fixture
def make_state() -> Callable[..., GameState]:
  return build_state
