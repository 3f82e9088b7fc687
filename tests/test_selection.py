"""Tests for the candidate selection state machine."""
import pytest
from mapsearch.core.models import CandidateResult
from mapsearch.core.selection import SelectionController, SelectionStatus


@pytest.fixture
def candidates():
    return [
        CandidateResult("First, A", 1.0, 1.0),
        CandidateResult("Second, B", 2.0, 2.0),
        CandidateResult("Third, C", 3.0, 3.0),
    ]


@pytest.fixture
def controller(candidates):
    committed = []
    controller = SelectionController(on_commit=committed.append)
    controller.committed = committed
    controller.set_candidates(candidates)
    return controller


def test_new_candidates_start_unhighlighted(controller):
    """Test a fresh list is browsed with no highlight."""
    assert controller.state is SelectionStatus.BROWSING
    assert controller.highlighted_index == -1


def test_empty_candidates_are_idle():
    """Test an empty list keeps the controller idle."""
    controller = SelectionController()
    controller.set_candidates([])
    assert controller.state is SelectionStatus.IDLE
    assert controller.highlighted_index == -1


def test_move_down_twice_then_confirm(controller, candidates):
    """Test two moves from no highlight land on the second candidate."""
    controller.move_down()
    controller.move_down()
    result = controller.confirm()

    assert result == candidates[1]
    assert controller.committed == [candidates[1]]
    assert controller.state is SelectionStatus.IDLE
    assert controller.highlighted_index == -1


def test_move_down_three_times_then_confirm(controller, candidates):
    """Test three moves reach the last candidate."""
    controller.move_down()
    controller.move_down()
    controller.move_down()
    result = controller.confirm()

    assert result == candidates[2]
    assert controller.committed == [candidates[2]]
    assert controller.state is SelectionStatus.IDLE
    assert controller.highlighted_index == -1


def test_move_down_clamps_at_end(controller):
    """Test the highlight stops on the last candidate."""
    for _ in range(5):
        controller.move_down()
    assert controller.highlighted_index == 2


def test_move_up_clamps_at_start(controller):
    """Test the highlight never goes above the first candidate."""
    controller.move_down()
    controller.move_down()
    controller.move_up()
    assert controller.highlighted_index == 0
    controller.move_up()
    assert controller.highlighted_index == 0


def test_move_up_from_no_highlight(controller):
    """Test moving up with nothing highlighted lands on the first candidate."""
    controller.move_up()
    assert controller.highlighted_index == 0


def test_confirm_without_highlight_is_noop(controller):
    """Test Enter with nothing highlighted does nothing."""
    assert controller.confirm() is None
    assert controller.committed == []
    assert controller.state is SelectionStatus.BROWSING


def test_cancel_resets(controller):
    """Test Escape returns to idle."""
    controller.move_down()
    controller.cancel()
    assert controller.state is SelectionStatus.IDLE
    assert controller.highlighted_index == -1
    assert controller.candidates == ()


def test_pointer_select_ignores_highlight(controller, candidates):
    """Test clicking commits the clicked candidate directly."""
    controller.move_down()
    controller.move_down()
    controller.move_down()
    assert controller.highlighted_index == 2
    result = controller.pointer_select(1)

    assert result == candidates[1]
    assert controller.committed == [candidates[1]]
    assert controller.state is SelectionStatus.IDLE


def test_pointer_select_out_of_range(controller):
    """Test invalid indexes are ignored."""
    assert controller.pointer_select(3) is None
    assert controller.pointer_select(-1) is None
    assert controller.committed == []


def test_moves_in_idle_are_noops():
    """Test navigation without candidates."""
    controller = SelectionController()
    controller.move_down()
    controller.move_up()
    assert controller.highlighted_index == -1
    assert controller.confirm() is None


def test_handle_key(controller, candidates):
    """Test DOM key names map onto transitions."""
    assert controller.handle_key("ArrowDown") is True
    assert controller.handle_key("ArrowDown") is True
    assert controller.handle_key("ArrowUp") is True
    assert controller.snapshot().highlighted == candidates[0]
    assert controller.handle_key("Tab") is False
    assert controller.handle_key("Enter") is True
    assert controller.committed == [candidates[0]]


def test_handle_escape(controller):
    """Test Escape through handle_key."""
    controller.handle_key("ArrowDown")
    controller.handle_key("Escape")
    assert controller.state is SelectionStatus.IDLE


def test_new_list_resets_highlight(controller, candidates):
    """Test a new candidate list replaces the old one."""
    controller.move_down()
    controller.set_candidates(candidates[:1])
    assert controller.highlighted_index == -1
    assert controller.snapshot().candidates == (candidates[0],)
