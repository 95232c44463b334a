"""Rank weighted election over analyzer answers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Generic, Hashable, List, Optional, Tuple, TypeVar

import numpy as np

C = TypeVar("C", bound=Hashable)

TIE_BREAK_BOOST = 0.001


@dataclass(frozen=True)
class WeightedVote(Generic[C]):
    value: C
    rank: int
    weight: float


class Election(Generic[C]):
    """Collect ranked votes and score candidates.

    A vote of rank ``r`` is worth ``weight * (max_rank + 1 - r)``; votes ranked
    past ``max_rank`` are ignored.  Scores are normalized to sum to one.  When
    several candidates share the top score the one with the highest mean vote,
    then highest maximum vote, then lowest vote deviation gets a small boost.
    """

    def __init__(self, max_rank: int) -> None:
        if max_rank < 1:
            raise ValueError("max_rank must be positive.")
        self.max_rank = max_rank
        self._votes: List[WeightedVote[C]] = []

    def add(self, value: C, rank: int, weight: float = 1.0) -> None:
        self._votes.append(WeightedVote(value, rank, weight))

    def _vote_score(self, vote: WeightedVote[C]) -> float:
        return vote.weight * (self.max_rank + 1 - vote.rank)

    def results(self) -> List[Tuple[C, float]]:
        """Candidates with normalized scores, best first."""
        by_value: Dict[C, List[WeightedVote[C]]] = {}
        for vote in self._votes:
            by_value.setdefault(vote.value, []).append(vote)

        scores: Dict[C, float] = {}
        total = 0.0
        for value, votes in by_value.items():
            score = sum(self._vote_score(v) for v in votes if v.rank <= self.max_rank)
            scores[value] = score
            total += score
        if total > 0:
            scores = {value: score / total for value, score in scores.items()}

        ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
        if len(ranked) > 1:
            top_score = ranked[0][1]
            tied = [value for value, score in ranked if score == top_score]
            if len(tied) > 1:
                vote_scores = {
                    value: np.array([self._vote_score(v) for v in by_value[value]], dtype=float)
                    for value in tied
                }
                winner = (
                    _best(vote_scores, np.mean, high_wins=True)
                    or _best(vote_scores, np.max, high_wins=True)
                    or _best(vote_scores, np.std, high_wins=False)
                )
                if winner is not None:
                    scores[winner[0]] += TIE_BREAK_BOOST
                    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
        return ranked

    def winner(self) -> Optional[C]:
        ranked = self.results()
        return ranked[0][0] if ranked else None

    def __repr__(self) -> str:
        return f"Election[{len(self._votes)} votes]"


def _best(
    vote_scores: Dict[C, np.ndarray],
    statistic: Callable[[np.ndarray], float],
    high_wins: bool,
) -> Optional[Tuple[C]]:
    # Wrapped in a tuple so a falsy winning value still counts as a winner.
    measured = sorted(
        ((value, float(statistic(scores))) for value, scores in vote_scores.items()),
        key=lambda item: item[1],
        reverse=high_wins,
    )
    if measured[0][1] != measured[1][1]:
        return (measured[0][0],)
    return None
