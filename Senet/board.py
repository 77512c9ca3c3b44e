"""
Senet track topology: the single table of special cells.

The track is a linear path of 30 cells (0-based). Pieces leave the board by
moving past the last cell. Every rule that depends on a cell index reads it
from here; the move engine and the evaluators never hard-code indices.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, Optional

TRACK_SIZE = 30
PIECES_PER_SIDE = 7
EXITED = -1

REENTRY_CELL = 14
BOUNDARY_CELL = 25
REGRESSION_CELL = 26
THREE_TRUTHS_CELL = 27
RE_ATOUM_CELL = 28
FREE_EXIT_CELL = 29


class CellKind(str, Enum):
  REBIRTH = "rebirth"
  HAPPINESS = "happiness"
  WATER = "water"
  CONDITIONAL_EXIT_A = "conditionalExitA"
  CONDITIONAL_EXIT_B = "conditionalExitB"
  FREE_EXIT = "freeExit"


@dataclass(frozen=True)
class SpecialCell:
  index: int
  kind: CellKind
  name: str
  # Roll needed to leave the board from this cell; None means any roll.
  exit_roll: Optional[int] = None
  sets_pending_exit: bool = False


SPECIAL_CELLS: Dict[int, SpecialCell] = {
  REENTRY_CELL: SpecialCell(REENTRY_CELL, CellKind.REBIRTH, "House of Rebirth"),
  BOUNDARY_CELL: SpecialCell(BOUNDARY_CELL, CellKind.HAPPINESS, "House of Happiness"),
  REGRESSION_CELL: SpecialCell(REGRESSION_CELL, CellKind.WATER, "House of Water"),
  THREE_TRUTHS_CELL: SpecialCell(
    THREE_TRUTHS_CELL, CellKind.CONDITIONAL_EXIT_A, "House of Three Truths", exit_roll=3, sets_pending_exit=True
  ),
  RE_ATOUM_CELL: SpecialCell(
    RE_ATOUM_CELL, CellKind.CONDITIONAL_EXIT_B, "House of Re-Atoum", exit_roll=2, sets_pending_exit=True
  ),
  FREE_EXIT_CELL: SpecialCell(FREE_EXIT_CELL, CellKind.FREE_EXIT, "House of Horus", sets_pending_exit=True),
}


def special_cell(index: int) -> Optional[SpecialCell]:
  return SPECIAL_CELLS.get(index)


def is_on_track(index: int) -> bool:
  return 0 <= index < TRACK_SIZE


def is_exit_target(index: int) -> bool:
  return index >= TRACK_SIZE


def crosses_boundary(position: int, target: int) -> bool:
  """A single move may not jump from below the boundary cell to beyond it."""
  return position < BOUNDARY_CELL and target > BOUNDARY_CELL


def sets_pending_exit(index: int) -> bool:
  cell = SPECIAL_CELLS.get(index)
  return cell is not None and cell.sets_pending_exit


def required_exit_roll(index: int) -> Optional[int]:
  """Roll required to leave from a conditional-exit cell, None when unrestricted."""
  cell = SPECIAL_CELLS.get(index)
  return cell.exit_roll if cell is not None else None


def exit_roll_allowed(index: int, roll: int) -> bool:
  required = required_exit_roll(index)
  return required is None or required == roll


def find_reentry_cell(is_occupied: Callable[[int], bool]) -> int:
  """Scan backward from the re-entry cell for the first free index; default 0."""
  for index in range(REENTRY_CELL, -1, -1):
    if not is_occupied(index):
      return index
  return 0


def initial_positions() -> Iterable[tuple[int, int]]:
  """Yield (side_a_index, side_b_index) pairs of the interleaved start layout."""
  for i in range(PIECES_PER_SIDE):
    yield 2 * i, 2 * i + 1


__all__ = [
  "TRACK_SIZE",
  "PIECES_PER_SIDE",
  "EXITED",
  "REENTRY_CELL",
  "BOUNDARY_CELL",
  "REGRESSION_CELL",
  "THREE_TRUTHS_CELL",
  "RE_ATOUM_CELL",
  "FREE_EXIT_CELL",
  "CellKind",
  "SpecialCell",
  "SPECIAL_CELLS",
  "special_cell",
  "is_on_track",
  "is_exit_target",
  "crosses_boundary",
  "sets_pending_exit",
  "required_exit_roll",
  "exit_roll_allowed",
  "find_reentry_cell",
  "initial_positions",
]
