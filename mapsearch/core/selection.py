"""Keyboard and pointer selection over a candidate list."""
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Tuple

from mapsearch.core.models import CandidateResult, SelectionState
from mapsearch.utils.error_handler import catch_and_log


class SelectionStatus(str, Enum):
    IDLE = "idle"
    BROWSING = "browsing"


class SelectionController:
    """
    Tracks the highlighted candidate and commits a choice.

    Keyboard confirmation commits the highlighted candidate; a pointer
    selection commits the clicked candidate directly, whatever is highlighted.
    Every commit and cancel returns the controller to IDLE with no candidates.
    """

    def __init__(self, on_commit: Optional[Callable[[CandidateResult], Any]] = None):
        self.on_commit = on_commit
        self._candidates: Tuple[CandidateResult, ...] = ()
        self._highlighted_index = -1

    @property
    def state(self) -> SelectionStatus:
        return SelectionStatus.BROWSING if self._candidates else SelectionStatus.IDLE

    @property
    def candidates(self) -> Tuple[CandidateResult, ...]:
        return self._candidates

    @property
    def highlighted_index(self) -> int:
        return self._highlighted_index

    def snapshot(self) -> SelectionState:
        return SelectionState(candidates=self._candidates, highlighted_index=self._highlighted_index)

    def set_candidates(self, candidates: Iterable[CandidateResult]) -> None:
        """Replace the list; clears the highlight."""
        self._candidates = tuple(candidates)
        self._highlighted_index = -1

    def move_down(self) -> None:
        if self.state is SelectionStatus.BROWSING:
            self._highlighted_index = min(self._highlighted_index + 1, len(self._candidates) - 1)

    def move_up(self) -> None:
        if self.state is SelectionStatus.BROWSING:
            self._highlighted_index = max(self._highlighted_index - 1, 0)

    def confirm(self) -> Optional[CandidateResult]:
        """Commit the highlighted candidate; no-op without a highlight."""
        if self.state is not SelectionStatus.BROWSING or self._highlighted_index < 0:
            return None
        return self._commit(self._candidates[self._highlighted_index])

    def cancel(self) -> None:
        self._reset()

    def pointer_select(self, index: int) -> Optional[CandidateResult]:
        """Commit candidates[index] immediately; out-of-range indexes are ignored."""
        if self.state is not SelectionStatus.BROWSING or not 0 <= index < len(self._candidates):
            return None
        return self._commit(self._candidates[index])

    def handle_key(self, key: str) -> bool:
        """
        Apply a DOM-style key name to the controller.

        Returns:
            True if the key is one the list handles (caller should suppress its default action)
        """
        handlers = {
            "ArrowDown": self.move_down,
            "ArrowUp": self.move_up,
            "Enter": self.confirm,
            "Escape": self.cancel,
        }
        handler = handlers.get(key)
        if handler is None:
            return False
        handler()
        return True

    def _commit(self, candidate: CandidateResult) -> CandidateResult:
        self._reset()
        if self.on_commit is not None:
            catch_and_log(self.on_commit)(candidate)
        return candidate

    def _reset(self) -> None:
        self._candidates = ()
        self._highlighted_index = -1
