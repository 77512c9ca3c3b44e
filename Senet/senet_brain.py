from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from .evaluator import evaluate_board
from .game_state import GameState, Piece, Player, Snapshot
from .move_engine import apply, legal_pieces, pass_turn
from .ThrowSticks import STICK_MAX, STICK_MIN

MAX_DEPTH = 3
WIN_SCORE = math.inf
ROLLS: Sequence[int] = tuple(range(STICK_MIN, STICK_MAX + 1))


@dataclass
class TraceEntry:
  depth: int
  kind: str  # "root", "terminal", "leaf", "chance", "max", "min", "pass"
  player: Player
  value: float
  roll: Optional[int] = None
  piece_id: Optional[int] = None


@dataclass
class SearchResult:
  piece_id: Optional[int]
  score: float
  depth: int
  nodes: int
  decision_ms: float
  scored_moves: Optional[List[Tuple[int, float]]] = None
  trace: Optional[List[TraceEntry]] = None


class _Search:
  def __init__(self, searcher: Player, trace: bool) -> None:
    self.searcher = searcher
    self.nodes = 0
    self.trace: Optional[List[TraceEntry]] = [] if trace else None

  def record(self, depth: int, kind: str, player: Player, value: float, roll: Optional[int] = None, piece_id: Optional[int] = None) -> None:
    if self.trace is not None:
      self.trace.append(TraceEntry(depth, kind, player, value, roll, piece_id))

  def node(self, snapshot: Snapshot, depth: int) -> float:
    """Value of `snapshot` from the searcher's perspective."""
    self.nodes += 1
    player = snapshot.current_player

    if snapshot.winner is not None:
      value = WIN_SCORE if snapshot.winner == self.searcher else -WIN_SCORE
      self.record(depth, "terminal", player, value)
      return value

    if depth == 0:
      value = evaluate_board(snapshot, self.searcher)
      self.record(depth, "leaf", player, value)
      return value

    # Chance layer: each stick value is equally likely.
    values = [self.resolve_roll(snapshot, roll, depth) for roll in ROLLS]
    value = expected_value(values)
    self.record(depth, "chance", player, value)
    return value

  def resolve_roll(self, snapshot: Snapshot, roll: int, depth: int) -> float:
    player = snapshot.current_player
    candidates = legal_pieces(snapshot, player, roll)

    if not candidates:
      child = snapshot.clone()
      pass_turn(child)
      value = self.node(child, depth - 1)
      self.record(depth, "pass", player, value, roll=roll)
      return value

    maximizing = player == self.searcher
    best = -math.inf if maximizing else math.inf
    for piece in candidates:
      child = snapshot.clone()
      apply(child, child.piece(player, piece.piece_id), roll)
      score = self.node(child, depth - 1)
      best = max(best, score) if maximizing else min(best, score)

    self.record(depth, "max" if maximizing else "min", player, best, roll=roll)
    return best


def expected_value(values: Sequence[float]) -> float:
  """Mean over equally likely rolls; a certain win and a certain loss cancel out."""
  if math.inf in values and -math.inf in values:
    return 0.0
  return sum(values) / len(values)


def choose_best_move(
  state: GameState,
  mover: Player,
  roll: int,
  depth: int = MAX_DEPTH,
  trace: bool = False,
) -> SearchResult:
  """Expectiminimax over the stick rolls; returns the piece `mover` should play."""
  if depth < 1:
    raise ValueError("Search depth must be at least 1.")

  start = time.perf_counter()
  search = _Search(mover, trace)

  root = Snapshot.from_state(state)
  root.current_player = mover
  candidates = legal_pieces(root, mover, roll)

  best_score = -math.inf
  best_piece: Optional[int] = None
  scored_moves: List[Tuple[int, float]] = []

  for piece in candidates:
    child = root.clone()
    apply(child, child.piece(mover, piece.piece_id), roll)
    score = search.node(child, depth)
    search.record(depth, "root", mover, score, roll=roll, piece_id=piece.piece_id)
    scored_moves.append((piece.piece_id, score))
    if best_piece is None or score > best_score:
      best_score = score
      best_piece = piece.piece_id

  if best_piece is None:
    best_score = evaluate_board(root, mover)

  decision_ms = (time.perf_counter() - start) * 1000.0
  logger.debug(
    "Search for {} roll {} depth {}: piece {} score {} ({} nodes, {:.1f} ms)",
    mover.name, roll, depth, best_piece, best_score, search.nodes, decision_ms,
  )

  return SearchResult(
    piece_id=best_piece,
    score=best_score,
    depth=depth,
    nodes=search.nodes,
    decision_ms=decision_ms,
    scored_moves=scored_moves,
    trace=search.trace,
  )


def select_move(state: GameState, mover: Player, roll: int, depth: int = MAX_DEPTH) -> Optional[Piece]:
  """Piece of the real `state` that `mover` should play, or None to pass."""
  result = choose_best_move(state, mover, roll, depth=depth)
  if result.piece_id is None:
    return None
  return state.piece(mover, result.piece_id)


__all__ = [
  "MAX_DEPTH",
  "WIN_SCORE",
  "TraceEntry",
  "SearchResult",
  "expected_value",
  "choose_best_move",
  "select_move",
]
