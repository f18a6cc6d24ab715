# test/test_classes.py
import pytest

from rfcount.core import ClassGrid, InvalidArgument, MAX_CLASS_COUNT


def test_quantize_floor_and_clamp():
    grid = ClassGrid(count=4, width=1.0, offset=0.5)

    assert grid.quantize(1.0) == 0
    assert grid.quantize(3.0) == 2
    assert grid.quantize(4.4) == 3
    assert grid.quantize(4.5) == 4        # exactly on the upper boundary
    assert grid.quantize(0.0) == -1       # below the offset

    assert grid.class_index(4.5) == 3
    assert grid.class_index(100.0) == 3
    assert grid.class_index(-100.0) == 0


def test_class_mean_and_upper():
    grid = ClassGrid(count=4, width=2.0, offset=-1.0)
    assert grid.class_mean(0) == 0.0
    assert grid.class_upper(0) == 1.0
    assert grid.class_mean(3) == 6.0


def test_disabled_grid_never_divides():
    grid = ClassGrid(count=0, width=0.0, offset=0.0)
    assert not grid.enabled
    assert grid.quantize(123.4) == 0


def test_rejects_too_many_classes():
    with pytest.raises(InvalidArgument):
        ClassGrid(count=MAX_CLASS_COUNT + 1, width=1.0)


def test_rejects_non_positive_width():
    with pytest.raises(InvalidArgument):
        ClassGrid(count=10, width=0.0)
    with pytest.raises(InvalidArgument):
        ClassGrid(count=10, width=-1.0)


def test_rejects_non_integer_count():
    with pytest.raises(InvalidArgument):
        ClassGrid(count=2.5, width=1.0)
    with pytest.raises(InvalidArgument):
        ClassGrid(count=True, width=1.0)


def test_from_range_matches_small_examples():
    grid = ClassGrid.from_range(1.0, 4.0, 4)
    assert grid.count == 4
    assert grid.width == pytest.approx(1.0)
    assert grid.offset == pytest.approx(0.5)

    grid = ClassGrid.from_range(1.0, 6.0, 6)
    assert grid.width == pytest.approx(1.0)
    assert grid.offset == pytest.approx(0.5)


def test_from_range_rounds_width_up_and_offset_down():
    grid = ClassGrid.from_range(-1.0, 1.0, 100)
    # 2 / 99 = 0.0202... -> 0.03
    assert grid.width == pytest.approx(0.03)
    assert grid.offset == pytest.approx(-1.015)
    assert grid.class_index(-1.0) == 0
    assert grid.class_index(1.0) < grid.count


def test_from_range_without_classes():
    grid = ClassGrid.from_range(-1.0, 1.0, 0)
    assert grid.count == 0
    assert grid.width == 1.0
    assert grid.offset == 0.0


def test_from_range_rejects_inverted_bounds():
    with pytest.raises(InvalidArgument):
        ClassGrid.from_range(2.0, 1.0, 4)
