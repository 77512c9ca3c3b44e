from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .board import EXITED, PIECES_PER_SIDE, initial_positions, is_on_track, sets_pending_exit


class InvariantViolation(RuntimeError):
  """Raised when the board reaches a state the rules can never produce."""


class Player(int, Enum):
  A = 1
  B = 2

  @property
  def other(self) -> "Player":
    return Player.B if self is Player.A else Player.A


@dataclass
class Piece:
  owner: Player
  piece_id: int
  position: int = EXITED
  pending_conditional_exit: bool = False

  @property
  def is_exited(self) -> bool:
    return self.position == EXITED

  @property
  def is_on_track(self) -> bool:
    return is_on_track(self.position)

  def copy(self) -> "Piece":
    return Piece(self.owner, self.piece_id, self.position, self.pending_conditional_exit)

  def to_dict(self) -> dict:
    return {
      "owner": self.owner.value,
      "piece_id": self.piece_id,
      "position": self.position,
      "pending_conditional_exit": self.pending_conditional_exit,
    }


@dataclass
class GameState:
  """Mutable record of both rosters, the turn marker and the exit counters."""

  rosters: Dict[Player, List[Piece]] = field(default_factory=dict)
  current_player: Player = Player.A
  exited_counts: Dict[Player, int] = field(default_factory=lambda: {Player.A: 0, Player.B: 0})
  winner: Optional[Player] = None

  @classmethod
  def new_game(cls) -> "GameState":
    rosters: Dict[Player, List[Piece]] = {Player.A: [], Player.B: []}
    for piece_id, (a_index, b_index) in enumerate(initial_positions()):
      rosters[Player.A].append(Piece(Player.A, piece_id, a_index))
      rosters[Player.B].append(Piece(Player.B, piece_id, b_index))
    return cls(rosters=rosters)

  def pieces(self, player: Player) -> List[Piece]:
    return self.rosters[player]

  def piece(self, player: Player, piece_id: int) -> Piece:
    roster = self.rosters[player]
    if not 0 <= piece_id < len(roster):
      raise ValueError(f"Unknown piece {piece_id} for player {player.name}.")
    return roster[piece_id]

  def all_pieces(self) -> List[Piece]:
    return self.rosters[Player.A] + self.rosters[Player.B]

  def piece_at(self, index: int) -> Optional[Piece]:
    for piece in self.all_pieces():
      if piece.position == index:
        return piece
    return None

  def is_occupied(self, index: int, exclude: Optional[Piece] = None) -> bool:
    occupant = self.piece_at(index)
    return occupant is not None and occupant is not exclude

  def on_track(self, player: Player) -> List[Piece]:
    return [p for p in self.rosters[player] if p.is_on_track]

  def exited(self, player: Player) -> int:
    return self.exited_counts[player]

  @property
  def is_over(self) -> bool:
    return self.winner is not None

  def check_winner(self) -> Optional[Player]:
    for player in (Player.A, Player.B):
      if self.exited_counts[player] == PIECES_PER_SIDE:
        return player
    return None

  def next_player(self) -> None:
    self.current_player = self.current_player.other

  def owns(self, piece: Piece) -> bool:
    roster = self.rosters.get(piece.owner, [])
    return 0 <= piece.piece_id < len(roster) and roster[piece.piece_id] is piece

  def snapshot(self) -> "Snapshot":
    return Snapshot.from_state(self)

  def check_invariants(self) -> None:
    seen: Dict[int, Piece] = {}
    for player in (Player.A, Player.B):
      on_track = 0
      for piece in self.rosters[player]:
        if piece.is_exited:
          if piece.pending_conditional_exit:
            raise InvariantViolation(f"Exited piece {player.name}{piece.piece_id} still flagged.")
          continue
        if not piece.is_on_track:
          raise InvariantViolation(f"Piece {player.name}{piece.piece_id} off track at {piece.position}.")
        if piece.position in seen:
          raise InvariantViolation(f"Two pieces share index {piece.position}.")
        if piece.pending_conditional_exit and not sets_pending_exit(piece.position):
          raise InvariantViolation(f"Piece {player.name}{piece.piece_id} flagged at {piece.position}.")
        seen[piece.position] = piece
        on_track += 1
      if on_track + self.exited_counts[player] != PIECES_PER_SIDE:
        raise InvariantViolation(f"Piece count mismatch for player {player.name}.")

  def to_dict(self) -> dict:
    return {
      "current_player": self.current_player.value,
      "exited": {str(p.value): self.exited_counts[p] for p in (Player.A, Player.B)},
      "winner": self.winner.value if self.winner is not None else None,
      "pieces": [p.to_dict() for p in self.all_pieces()],
    }


class Snapshot(GameState):
  """Isolated copy of a game state; search branches only ever touch these."""

  @classmethod
  def from_state(cls, state: GameState) -> "Snapshot":
    return cls(
      rosters={player: [p.copy() for p in roster] for player, roster in state.rosters.items()},
      current_player=state.current_player,
      exited_counts=dict(state.exited_counts),
      winner=state.winner,
    )

  def clone(self) -> "Snapshot":
    return Snapshot.from_state(self)


__all__ = ["InvariantViolation", "Player", "Piece", "GameState", "Snapshot"]
