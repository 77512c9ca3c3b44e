"""
Throwing-stick roller: uniform draw from 1..5.

Rolls of 1, 3 and 5 grant the thrower another turn; 2 and 4 hand the turn to
the opponent. The random source is injectable so callers (and tests) can make
the sequence deterministic.
"""
from __future__ import annotations

import random
from typing import Iterable, List, Optional, Protocol

STICK_MIN = 1
STICK_MAX = 5
EXTRA_TURN_ROLLS = frozenset({1, 3, 5})


class DiceSource(Protocol):
  def roll(self) -> int:
    ...


def roll_sticks(*, rnd: Optional[random.Random] = None) -> int:
  """Throw the sticks once and return the move value."""
  rnd = rnd or random
  return rnd.randint(STICK_MIN, STICK_MAX)


def is_extra_turn(roll: int) -> bool:
  return roll in EXTRA_TURN_ROLLS


def is_valid_roll(roll: int) -> bool:
  return STICK_MIN <= roll <= STICK_MAX


class StickDice:
  """Dice source backed by `random` (or a seeded `random.Random`)."""

  def __init__(self, rnd: Optional[random.Random] = None) -> None:
    self._rnd = rnd

  def roll(self) -> int:
    return roll_sticks(rnd=self._rnd)


class FixedDice:
  """Replays a fixed sequence of rolls; raises IndexError once exhausted."""

  def __init__(self, rolls: Iterable[int]) -> None:
    self._rolls: List[int] = list(rolls)
    for value in self._rolls:
      if not is_valid_roll(value):
        raise ValueError(f"Roll out of range: {value}")
    self._cursor = 0

  def roll(self) -> int:
    if self._cursor >= len(self._rolls):
      raise IndexError("FixedDice sequence exhausted.")
    value = self._rolls[self._cursor]
    self._cursor += 1
    return value

  @property
  def remaining(self) -> int:
    return len(self._rolls) - self._cursor


__all__ = [
  "STICK_MIN",
  "STICK_MAX",
  "EXTRA_TURN_ROLLS",
  "DiceSource",
  "roll_sticks",
  "is_extra_turn",
  "is_valid_roll",
  "StickDice",
  "FixedDice",
]
