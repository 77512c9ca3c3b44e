"""
Move engine: validates and applies a (piece, roll) move to a game state.

Rules run in a fixed order and later rules may override the target computed
by earlier ones:

1. conditional-exit departure (pieces parked on 27/28/29)
2. boundary (no jumping past the House of Happiness)
3. collision (own piece blocks, opponent is swapped back)
4. re-entry contention on the House of Rebirth
5. commit
6. special-cell triggers on the final target
7. exit and win detection
8. turn resolution from the roll alone

Illegal requests come back as a rejected `MoveOutcome` with the state left
untouched; the engine never raises for a rules violation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from loguru import logger

from .board import (
  EXITED,
  PIECES_PER_SIDE,
  REENTRY_CELL,
  REGRESSION_CELL,
  CellKind,
  crosses_boundary,
  exit_roll_allowed,
  find_reentry_cell,
  is_exit_target,
  special_cell,
)
from .game_state import GameState, Piece, Player
from .ThrowSticks import is_extra_turn, is_valid_roll


class RejectReason(str, Enum):
  NOT_YOUR_PIECE = "notYourPiece"
  NO_ROLL_PENDING = "noRollPending"
  BOUNDARY_BLOCKED = "boundaryBlocked"
  OWN_PIECE_BLOCKED = "ownPieceBlocked"
  PIECE_EXITED = "pieceExited"
  GAME_OVER = "gameOver"


class EventKind(str, Enum):
  MOVED = "moved"
  MOVED_WITH_CAPTURE = "movedWithCapture"
  SENT_TO_REENTRY = "sentToReentry"
  LANDED_ON_SPECIAL = "landedOnSpecial"
  EXITED = "exited"
  WON = "won"
  EXTRA_TURN = "extraTurn"
  TURN_PASSED = "turnPassed"


class ReentryReason(str, Enum):
  FORCED_EXIT_FAILURE = "forcedExitFailure"
  REGRESSION_CELL = "regressionCell"


@dataclass(frozen=True)
class MoveEvent:
  kind: EventKind
  reason: Optional[ReentryReason] = None
  cell: Optional[CellKind] = None
  exited_count: Optional[int] = None
  player: Optional[Player] = None
  captured: Optional[int] = None

  def to_dict(self) -> dict:
    data: dict = {"kind": self.kind.value}
    if self.reason is not None:
      data["reason"] = self.reason.value
    if self.cell is not None:
      data["cell"] = self.cell.value
    if self.exited_count is not None:
      data["exited_count"] = self.exited_count
    if self.player is not None:
      data["player"] = self.player.value
    if self.captured is not None:
      data["captured"] = self.captured
    return data


@dataclass
class MoveOutcome:
  player: Player
  piece_id: int
  roll: Optional[int]
  from_position: int
  to_position: int
  events: List[MoveEvent] = field(default_factory=list)
  rejected: Optional[RejectReason] = None

  @property
  def ok(self) -> bool:
    return self.rejected is None

  def has(self, kind: EventKind) -> bool:
    return any(e.kind == kind for e in self.events)

  def event(self, kind: EventKind) -> Optional[MoveEvent]:
    for e in self.events:
      if e.kind == kind:
        return e
    return None

  @property
  def won(self) -> bool:
    return self.has(EventKind.WON)

  def to_dict(self) -> dict:
    return {
      "player": self.player.value,
      "piece_id": self.piece_id,
      "roll": self.roll,
      "from": self.from_position,
      "to": self.to_position,
      "rejected": self.rejected.value if self.rejected is not None else None,
      "events": [e.to_dict() for e in self.events],
    }


def _reject(piece: Piece, roll: Optional[int], reason: RejectReason) -> MoveOutcome:
  return MoveOutcome(piece.owner, piece.piece_id, roll, piece.position, piece.position, rejected=reason)


def reentry_index(state: GameState, mover: Optional[Piece] = None) -> int:
  return find_reentry_cell(lambda index: state.is_occupied(index, exclude=mover))


def _resolve_turn(state: GameState, roll: int, events: List[MoveEvent]) -> None:
  if is_extra_turn(roll):
    events.append(MoveEvent(EventKind.EXTRA_TURN, player=state.current_player))
  else:
    state.next_player()
    events.append(MoveEvent(EventKind.TURN_PASSED, player=state.current_player))


def apply(state: GameState, piece: Piece, roll: Optional[int]) -> MoveOutcome:
  """Apply `roll` to `piece`, mutating `state` in place unless rejected."""
  if not state.owns(piece):
    raise ValueError(f"Piece {piece.owner.name}{piece.piece_id} does not belong to this game.")
  if roll is not None and roll != 0 and not is_valid_roll(roll):
    raise ValueError(f"Roll out of range: {roll}")

  if state.is_over:
    return _reject(piece, roll, RejectReason.GAME_OVER)
  if piece.owner != state.current_player:
    return _reject(piece, roll, RejectReason.NOT_YOUR_PIECE)
  if not roll:
    return _reject(piece, roll, RejectReason.NO_ROLL_PENDING)
  if piece.is_exited:
    return _reject(piece, roll, RejectReason.PIECE_EXITED)

  position = piece.position
  events: List[MoveEvent] = []

  # 1. Leaving a conditional-exit cell.
  if piece.pending_conditional_exit:
    if not exit_roll_allowed(position, roll):
      piece.position = reentry_index(state, mover=piece)
      piece.pending_conditional_exit = False
      events.append(MoveEvent(EventKind.SENT_TO_REENTRY, reason=ReentryReason.FORCED_EXIT_FAILURE))
      state.next_player()
      events.append(MoveEvent(EventKind.TURN_PASSED, player=state.current_player))
      state.check_invariants()
      logger.debug("{} piece {} failed to exit from {} with {}", piece.owner.name, piece.piece_id, position, roll)
      return MoveOutcome(piece.owner, piece.piece_id, roll, position, piece.position, events)
    piece.pending_conditional_exit = False

  # 2. Boundary.
  target = position + roll
  if crosses_boundary(position, target):
    piece.pending_conditional_exit = _flag_for(position)
    return _reject(piece, roll, RejectReason.BOUNDARY_BLOCKED)

  # 3. Collision.
  captured: Optional[Piece] = None
  occupant = state.piece_at(target)
  if occupant is not None and occupant is not piece:
    if occupant.owner == piece.owner:
      piece.pending_conditional_exit = _flag_for(position)
      return _reject(piece, roll, RejectReason.OWN_PIECE_BLOCKED)
    occupant.position = position
    occupant.pending_conditional_exit = _flag_for(position)
    captured = occupant

  # 4. Re-entry contention.
  if target == REENTRY_CELL and state.is_occupied(REENTRY_CELL, exclude=piece):
    target = reentry_index(state, mover=piece)

  # 5. Commit.
  piece.position = target
  if captured is not None:
    events.append(MoveEvent(EventKind.MOVED_WITH_CAPTURE, captured=captured.piece_id))
  else:
    events.append(MoveEvent(EventKind.MOVED))

  # 6. Special-cell triggers.
  cell = special_cell(target)
  if cell is not None:
    if cell.index == REGRESSION_CELL:
      piece.position = reentry_index(state, mover=piece)
      events.append(MoveEvent(EventKind.SENT_TO_REENTRY, reason=ReentryReason.REGRESSION_CELL))
    else:
      if cell.sets_pending_exit:
        piece.pending_conditional_exit = True
      events.append(MoveEvent(EventKind.LANDED_ON_SPECIAL, cell=cell.kind))

  # 7. Exit.
  if is_exit_target(target):
    piece.position = EXITED
    piece.pending_conditional_exit = False
    state.exited_counts[piece.owner] += 1
    count = state.exited_counts[piece.owner]
    events.append(MoveEvent(EventKind.EXITED, exited_count=count, player=piece.owner))
    if count == PIECES_PER_SIDE:
      state.winner = piece.owner
      events.append(MoveEvent(EventKind.WON, player=piece.owner))
      state.check_invariants()
      logger.info("Player {} wins", piece.owner.name)
      return MoveOutcome(piece.owner, piece.piece_id, roll, position, EXITED, events)

  # 8. Turn resolution.
  _resolve_turn(state, roll, events)
  state.check_invariants()
  logger.debug(
    "{} piece {} {} -> {} (roll {}): {}",
    piece.owner.name, piece.piece_id, position, piece.position, roll, [e.kind.value for e in events],
  )
  return MoveOutcome(piece.owner, piece.piece_id, roll, position, piece.position, events)


def _flag_for(position: int) -> bool:
  cell = special_cell(position)
  return cell is not None and cell.sets_pending_exit


def is_legal_move(state: GameState, piece: Piece, roll: int) -> bool:
  """Whether `roll` is a playable move for `piece` (used by both opponents)."""
  if piece.is_exited or state.is_over:
    return False
  position = piece.position
  target = position + roll

  if is_exit_target(target):
    if piece.pending_conditional_exit:
      return exit_roll_allowed(position, roll)
    return True

  if crosses_boundary(position, target):
    return False

  occupant = state.piece_at(target)
  if occupant is not None and occupant.owner == piece.owner:
    return False
  return True


def legal_pieces(state: GameState, player: Player, roll: int) -> List[Piece]:
  return [p for p in state.pieces(player) if is_legal_move(state, p, roll)]


def pass_turn(state: GameState) -> None:
  state.next_player()


__all__ = [
  "RejectReason",
  "EventKind",
  "ReentryReason",
  "MoveEvent",
  "MoveOutcome",
  "apply",
  "reentry_index",
  "is_legal_move",
  "legal_pieces",
  "pass_turn",
]
