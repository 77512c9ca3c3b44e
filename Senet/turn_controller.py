"""
Synchronous turn loop around the move engine.

Each step asks whose turn it is, whether a roll is pending and whether the
side to move is computer-controlled, then calls the engine or the search
directly. Extra turns from rolls of 1, 3 and 5 are played by looping, not by
scheduling callbacks.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Optional

from loguru import logger

from .game_state import GameState, Piece, Player
from .greedy_brain import choose_greedy_move
from .move_engine import MoveOutcome, apply, legal_pieces, pass_turn
from .senet_brain import MAX_DEPTH, select_move
from .ThrowSticks import DiceSource, StickDice

Strategy = Literal["expectiminimax", "greedy"]


class TurnError(Exception):
  """A controller call made out of turn order (roll twice, move without a roll...)."""


@dataclass
class TurnRecord:
  player: Player
  roll: int
  outcome: Optional[MoveOutcome] = None
  passed: bool = False

  def to_dict(self) -> dict:
    return {
      "player": self.player.value,
      "roll": self.roll,
      "passed": self.passed,
      "outcome": self.outcome.to_dict() if self.outcome is not None else None,
    }


class TurnController:
  def __init__(
    self,
    state: Optional[GameState] = None,
    dice: Optional[DiceSource] = None,
    computer_player: Optional[Player] = Player.B,
    depth: int = MAX_DEPTH,
    strategy: Strategy = "expectiminimax",
  ) -> None:
    self.state = state or GameState.new_game()
    self.dice = dice or StickDice()
    self.computer_player = computer_player
    self.depth = depth
    self.strategy = strategy
    self.pending_roll: Optional[int] = None
    self.history: List[TurnRecord] = []

  @property
  def is_computer_turn(self) -> bool:
    return self.computer_player is not None and self.state.current_player == self.computer_player

  def _ensure_running(self) -> None:
    if self.state.is_over:
      raise TurnError(f"Game over. Winner: player {self.state.winner.value}")

  def roll(self) -> TurnRecord:
    """Throw the sticks for the player to move; passes the turn if nothing can move."""
    self._ensure_running()
    if self.pending_roll is not None:
      raise TurnError("Already rolled; a piece must be moved first.")

    player = self.state.current_player
    value = self.dice.roll()
    self.pending_roll = value
    record = TurnRecord(player=player, roll=value)

    if not legal_pieces(self.state, player, value):
      logger.warning("Player {} has no legal move for roll {}; turn passed", player.name, value)
      pass_turn(self.state)
      self.pending_roll = None
      record.passed = True
      self.history.append(record)
    return record

  def move(self, piece_id: int) -> MoveOutcome:
    """Play the pending roll with one of the current player's pieces."""
    self._ensure_running()
    if self.pending_roll is None:
      raise TurnError("No roll pending; throw the sticks first.")

    player = self.state.current_player
    roll = self.pending_roll
    outcome = apply(self.state, self.state.piece(player, piece_id), roll)
    if outcome.ok:
      self.pending_roll = None
      self.history.append(TurnRecord(player=player, roll=roll, outcome=outcome))
    return outcome

  def choose(
    self,
    player: Player,
    roll: int,
    depth: Optional[int] = None,
    strategy: Optional[Strategy] = None,
  ) -> Optional[Piece]:
    """Pick a piece with the controller's strategy, or with a one-off override."""
    if (strategy or self.strategy) == "greedy":
      return choose_greedy_move(self.state, player, roll)
    return select_move(self.state, player, roll, depth=depth or self.depth)

  def play_computer_turn(self, depth: Optional[int] = None, strategy: Optional[Strategy] = None) -> TurnRecord:
    """Roll (unless a roll is already pending) and play one move for the computer."""
    self._ensure_running()
    if not self.is_computer_turn:
      raise TurnError("It is not the computer's turn.")

    if self.pending_roll is None:
      record = self.roll()
      if record.passed:
        return record

    player = self.state.current_player
    roll = self.pending_roll
    piece = self.choose(player, roll, depth=depth, strategy=strategy)
    if piece is None:
      pass_turn(self.state)
      self.pending_roll = None
      record = TurnRecord(player=player, roll=roll, passed=True)
      self.history.append(record)
      return record

    outcome = self.move(piece.piece_id)
    if not outcome.ok:
      raise RuntimeError(f"Computer chose a rejected move: {outcome.rejected.value}")
    logger.info("Computer played piece {} with roll {}", piece.piece_id, roll)
    return self.history[-1]

  def run_computer(self, depth: Optional[int] = None, strategy: Optional[Strategy] = None) -> List[TurnRecord]:
    """Play computer turns until a human is to move or the game ends.

    `depth` and `strategy` apply to these turns only; the controller's own
    settings are left as they are.
    """
    records: List[TurnRecord] = []
    while self.is_computer_turn and not self.state.is_over:
      records.append(self.play_computer_turn(depth=depth, strategy=strategy))
    return records

  def reset(self, computer_player: Optional[Player] = Player.B) -> None:
    self.state = GameState.new_game()
    self.computer_player = computer_player
    self.pending_roll = None
    self.history = []


__all__ = ["Strategy", "TurnError", "TurnRecord", "TurnController"]
