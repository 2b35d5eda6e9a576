import copy

import pytest

from constraints import BWD, COL, FWD, ROW, Observer
from model import ConfigurationError, PuzzleModel


def blank(size):
    return [[0] * (size + 2) for _ in range(size + 2)]


def test_blank_model():
    model = PuzzleModel(blank(4))
    assert model.size == 4
    assert model.num_empty == 16
    assert model.row_perms == [None] * 4
    assert model.col_perms == [None] * 4
    assert len(model.perms) == 24
    assert model.candidates(2, 3) == [1, 2, 3, 4]
    assert model.observers == []


def test_clues_registered_and_initial_trim():
    bordered = blank(4)
    bordered[1][0] = 4  # row 0 seen from the left sees 4
    bordered[5][2] = 1  # col 1 seen from the bottom sees 1
    model = PuzzleModel(bordered)
    assert model.observer_at(ROW, 0, FWD) == Observer(ROW, 0, FWD, 4)
    assert model.observer_at(COL, 1, BWD) == Observer(COL, 1, BWD, 1)
    assert model.observer_at(ROW, 0, BWD) is None
    assert [model.perms[i] for i in model.row_perms[0]] == [(1, 2, 3, 4)]
    assert len(model.col_perms[1]) == 6
    assert [model.candidates(0, c) for c in range(4)] == [[1], [2], [3], [4]]
    assert model.candidates(3, 1) == [4]
    # trimming narrows candidates but never fills cells
    assert model.num_empty == 16


def test_givens_are_marked():
    bordered = blank(4)
    bordered[1][1] = 3
    model = PuzzleModel(bordered)
    assert model.get_value(0, 0) == 3
    assert model.num_empty == 15
    assert model.candidates(0, 0) == [3]
    assert not model.is_allowed(0, 2, 3)
    assert not model.is_allowed(2, 0, 3)
    assert model.is_allowed(1, 1, 3)


def test_short_row_rejected():
    bordered = blank(3)
    bordered[2] = [0, 0]
    with pytest.raises(ValueError):
        PuzzleModel(bordered)


def test_duplicate_observer_is_configuration_error():
    model = PuzzleModel(blank(4))
    model.add_observer(Observer(ROW, 0, FWD, 2))
    model.add_observer(Observer(ROW, 0, BWD, 2))
    with pytest.raises(ConfigurationError):
        model.add_observer(Observer(ROW, 0, FWD, 3))
    assert len(model.observers) == 2


def test_zero_count_observer_is_ignored():
    model = PuzzleModel(blank(4))
    model.add_observer(Observer(COL, 2, FWD, 0))
    assert model.observer_at(COL, 2, FWD) is None
    assert model.observers == []


def test_set_and_clear_track_empty_count():
    model = PuzzleModel(blank(3))
    assert model.set_value(0, 0, 2)
    assert not model.set_value(0, 0, 2)
    assert model.num_empty == 8
    assert model.set_value(0, 0, 3)
    assert model.num_empty == 8
    assert model.set_value(0, 0, 0)
    assert model.num_empty == 9
    # set_value leaves candidates alone
    assert model.candidates(0, 1) == [1, 2, 3]


def test_mark_updates_line_candidates():
    model = PuzzleModel(blank(4))
    assert model.mark(1, 2, 3) == (True, True)
    assert model.candidates(1, 2) == [3]
    for i in range(4):
        if i != 2:
            assert not model.is_allowed(1, i, 3)
        if i != 1:
            assert not model.is_allowed(i, 2, 3)
    assert model.is_allowed(0, 0, 3)


def test_mark_same_value_again_is_noop():
    model = PuzzleModel(blank(4))
    model.mark(0, 0, 1)
    before = copy.deepcopy(model.allowed)
    assert model.mark(0, 0, 1) == (False, False)
    assert model.allowed == before


def test_mark_last_cell_does_not_touch_neighbours():
    model = PuzzleModel(blank(3))
    for c, v in enumerate((1, 2)):
        model.mark(0, c, v)
    model.disallow_others(1, 2, [1])
    model.disallow_others(2, 2, [2])
    assert model.mark(0, 2, 3) == (True, False)


def test_disallow_helpers():
    model = PuzzleModel(blank(5))
    assert model.disallow_all(0, 0, {1, 2})
    assert not model.disallow_all(0, 0, [1])
    assert model.candidates(0, 0) == [3, 4, 5]
    assert model.disallow_others(0, 0, [3, 5, 1])
    assert not model.disallow_others(0, 0, [3, 5])
    assert model.candidates(0, 0) == [3, 5]


LATIN = [
    [1, 2, 3, 4],
    [2, 3, 4, 1],
    [3, 4, 1, 2],
    [4, 1, 2, 3],
]


def test_solved_reports_empty_cells():
    check = PuzzleModel(blank(4)).solved()
    assert not check
    assert check.status == "incomplete"
    assert check.message == "grid has 16 empty cells; need 0"


def test_solved_reports_first_unsatisfied_observer():
    model = PuzzleModel(blank(4))
    for r in range(4):
        for c in range(4):
            model.set_value(r, c, LATIN[r][c])
    model.add_observer(Observer(ROW, 0, FWD, 4))
    assert model.solved().ok
    bad = Observer(COL, 0, BWD, 3)
    model.add_observer(bad)
    model.add_observer(Observer(COL, 1, FWD, 1))
    check = model.solved()
    assert check.status == "observer-unsatisfied"
    assert check.observer == bad
    assert check.message == "observer col 0 bwd sees 3 unsatisfied"


def test_has_contradiction():
    model = PuzzleModel(blank(3))
    assert not model.has_contradiction()
    model.disallow_others(2, 2, [])
    assert model.has_contradiction()
