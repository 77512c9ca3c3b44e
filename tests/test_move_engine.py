from __future__ import annotations

import random

import pytest

from Senet import (
  CellKind,
  EventKind,
  GameState,
  InvariantViolation,
  Player,
  ReentryReason,
  RejectReason,
  StickDice,
  TurnController,
  apply,
  legal_pieces,
)
from Senet.board import EXITED, REENTRY_CELL, find_reentry_cell, sets_pending_exit


def positions(state, player):
  return [p.position for p in state.pieces(player)]


def test_new_game_interleaves_both_sides():
  state = GameState.new_game()
  assert positions(state, Player.A) == [0, 2, 4, 6, 8, 10, 12]
  assert positions(state, Player.B) == [1, 3, 5, 7, 9, 11, 13]
  assert state.current_player == Player.A
  assert state.exited(Player.A) == 0 and state.exited(Player.B) == 0
  state.check_invariants()


def test_capture_swaps_positions(make_state):
  state = make_state([10], [12])
  mover = state.piece(Player.A, 0)
  outcome = apply(state, mover, 2)

  assert outcome.ok
  assert outcome.has(EventKind.MOVED_WITH_CAPTURE)
  assert not outcome.has(EventKind.MOVED)
  assert mover.position == 12
  assert state.piece(Player.B, 0).position == 10
  assert state.current_player == Player.B


def test_boundary_blocks_jump_past_happiness(make_state):
  state = make_state([24], [3])
  before = state.to_dict()
  outcome = apply(state, state.piece(Player.A, 0), 2)

  assert outcome.rejected == RejectReason.BOUNDARY_BLOCKED
  assert outcome.events == []
  assert state.to_dict() == before


def test_landing_exactly_on_happiness_is_allowed(make_state):
  state = make_state([23], [3])
  outcome = apply(state, state.piece(Player.A, 0), 2)

  assert outcome.ok
  assert outcome.event(EventKind.LANDED_ON_SPECIAL).cell == CellKind.HAPPINESS
  assert state.piece(Player.A, 0).position == 25


def test_own_piece_blocks_target(make_state):
  state = make_state([3, 5], [20])
  before = state.to_dict()
  outcome = apply(state, state.piece(Player.A, 0), 2)

  assert outcome.rejected == RejectReason.OWN_PIECE_BLOCKED
  assert state.to_dict() == before


def test_precondition_rejections(make_state):
  state = make_state([3], [8])
  assert apply(state, state.piece(Player.B, 0), 2).rejected == RejectReason.NOT_YOUR_PIECE
  assert apply(state, state.piece(Player.A, 0), 0).rejected == RejectReason.NO_ROLL_PENDING
  assert apply(state, state.piece(Player.A, 0), None).rejected == RejectReason.NO_ROLL_PENDING
  assert apply(state, state.piece(Player.A, 3), 2).rejected == RejectReason.PIECE_EXITED
  assert positions(state, Player.A)[0] == 3


def test_bad_inputs_raise(make_state):
  state = make_state([3], [8])
  with pytest.raises(ValueError):
    apply(state, state.piece(Player.A, 0), 7)
  stranger = GameState.new_game().piece(Player.A, 0)
  with pytest.raises(ValueError):
    apply(state, stranger, 2)


def test_failed_conditional_exit_sends_piece_to_rebirth(make_state):
  state = make_state([27], [3])
  piece = state.piece(Player.A, 0)
  assert piece.pending_conditional_exit

  outcome = apply(state, piece, 2)

  assert outcome.ok
  event = outcome.event(EventKind.SENT_TO_REENTRY)
  assert event.reason == ReentryReason.FORCED_EXIT_FAILURE
  assert outcome.has(EventKind.TURN_PASSED)
  assert piece.position == REENTRY_CELL
  assert not piece.pending_conditional_exit
  assert state.current_player == Player.B


def test_failed_exit_uses_reentry_lookup_when_rebirth_taken(make_state):
  state = make_state([28], [14, 13])
  piece = state.piece(Player.A, 0)
  outcome = apply(state, piece, 1)

  assert outcome.event(EventKind.SENT_TO_REENTRY).reason == ReentryReason.FORCED_EXIT_FAILURE
  assert piece.position == 12
  # Forced-back moves always pass the turn, even on odd rolls.
  assert state.current_player == Player.B


def test_three_truths_exit_with_three(make_state):
  state = make_state([27, 4], [3])
  outcome = apply(state, state.piece(Player.A, 0), 3)

  assert outcome.ok
  assert outcome.event(EventKind.EXITED).exited_count == 6
  assert state.piece(Player.A, 0).position == EXITED
  assert not state.piece(Player.A, 0).pending_conditional_exit
  assert outcome.has(EventKind.EXTRA_TURN)
  assert state.current_player == Player.A


def test_re_atoum_exit_with_two(make_state):
  state = make_state([28, 4], [3])
  outcome = apply(state, state.piece(Player.A, 0), 2)

  assert outcome.has(EventKind.EXITED)
  assert state.current_player == Player.B


@pytest.mark.parametrize("roll", [1, 2, 3, 4, 5])
def test_horus_exits_with_any_roll(make_state, roll):
  state = make_state([29, 4], [3])
  outcome = apply(state, state.piece(Player.A, 0), roll)

  assert outcome.has(EventKind.EXITED)
  assert state.exited(Player.A) == 6


@pytest.mark.parametrize(
  "start,roll,kind",
  [
    (25, 2, CellKind.CONDITIONAL_EXIT_A),
    (25, 3, CellKind.CONDITIONAL_EXIT_B),
    (25, 4, CellKind.FREE_EXIT),
  ],
)
def test_landing_on_exit_cells_sets_flag(make_state, start, roll, kind):
  state = make_state([start], [3])
  piece = state.piece(Player.A, 0)
  outcome = apply(state, piece, roll)

  assert outcome.event(EventKind.LANDED_ON_SPECIAL).cell == kind
  assert piece.pending_conditional_exit


def test_water_sends_piece_back(make_state):
  state = make_state([25], [3])
  piece = state.piece(Player.A, 0)
  outcome = apply(state, piece, 1)

  assert outcome.event(EventKind.SENT_TO_REENTRY).reason == ReentryReason.REGRESSION_CELL
  assert piece.position == REENTRY_CELL
  assert outcome.has(EventKind.EXTRA_TURN)


def test_water_with_rebirth_occupied_scans_backward(make_state):
  state = make_state([25], [14, 13])
  piece = state.piece(Player.A, 0)
  apply(state, piece, 1)
  assert piece.position == 12


def test_landing_on_rebirth_is_informational(make_state):
  state = make_state([12], [3])
  outcome = apply(state, state.piece(Player.A, 0), 2)
  assert outcome.event(EventKind.LANDED_ON_SPECIAL).cell == CellKind.REBIRTH
  assert state.piece(Player.A, 0).position == REENTRY_CELL


def test_last_exit_wins_and_freezes_turn(make_state):
  state = make_state([29], [3])
  outcome = apply(state, state.piece(Player.A, 0), 2)

  assert outcome.won
  assert outcome.event(EventKind.WON).player == Player.A
  assert outcome.event(EventKind.EXITED).exited_count == 7
  assert not outcome.has(EventKind.TURN_PASSED)
  assert state.winner == Player.A
  assert state.check_winner() == Player.A
  assert state.current_player == Player.A

  assert apply(state, state.piece(Player.A, 0), 2).rejected == RejectReason.GAME_OVER


@pytest.mark.parametrize("roll", [1, 2, 3, 4, 5])
def test_turn_rule_depends_on_roll_only(make_state, roll):
  state = make_state([0], [20])
  outcome = apply(state, state.piece(Player.A, 0), roll)

  assert outcome.ok
  if roll in (2, 4):
    assert state.current_player == Player.B
    assert outcome.has(EventKind.TURN_PASSED)
  else:
    assert state.current_player == Player.A
    assert outcome.has(EventKind.EXTRA_TURN)


def test_reentry_lookup():
  assert find_reentry_cell(lambda index: False) == REENTRY_CELL
  assert find_reentry_cell(lambda index: index >= 10) == 9
  assert find_reentry_cell(lambda index: True) == 0
  for _ in range(3):
    assert 0 <= find_reentry_cell(lambda index: index % 2 == 0) <= REENTRY_CELL


def test_legal_pieces_follow_exit_restrictions(make_state):
  state = make_state([27, 10], [3])
  assert [p.piece_id for p in legal_pieces(state, Player.A, 3)] == [0, 1]
  # 27 + 4 leaves the board but Three Truths only lets a 3 out.
  assert [p.piece_id for p in legal_pieces(state, Player.A, 4)] == [1]


def test_check_invariants_detects_shared_cell(make_state):
  state = make_state([5], [8])
  state.piece(Player.B, 0).position = 5
  with pytest.raises(InvariantViolation):
    state.check_invariants()


def test_random_games_keep_invariants():
  rnd = random.Random(2024)
  controller = TurnController(dice=StickDice(random.Random(7)), computer_player=None)
  state = controller.state

  for _ in range(3000):
    if state.is_over:
      break
    record = controller.roll()
    if record.passed:
      continue
    choices = legal_pieces(state, state.current_player, controller.pending_roll)
    outcome = controller.move(rnd.choice(choices).piece_id)
    assert outcome.ok

    state.check_invariants()
    for piece in state.all_pieces():
      if piece.pending_conditional_exit:
        assert sets_pending_exit(piece.position)
    for player in (Player.A, Player.B):
      assert len(state.on_track(player)) + state.exited(player) == 7
