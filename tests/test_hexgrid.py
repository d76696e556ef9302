import pytest

from world.hexgrid import (
    EVEN_ROW_DELTAS,
    ODD_ROW_DELTAS,
    Direction,
    in_direction,
    neighbor_coords,
    row_shards,
)


@pytest.mark.parametrize("width,height", [(2, 2), (4, 4), (5, 6), (9, 8)])
def test_toroidal_closure(width, height):
    for x in range(width):
        for y in range(height):
            for d in Direction:
                nx, ny = in_direction(x, y, width, height, d)
                assert in_direction(nx, ny, width, height, d.flip()) == (x, y)


@pytest.mark.parametrize("width,height", [(3, 3), (4, 4), (5, 6), (8, 8)])
def test_six_distinct_neighbors(width, height):
    for x in range(width):
        for y in range(height):
            ns = neighbor_coords(x, y, width, height)
            assert len(ns) == 6
            assert len(set(ns)) == 6
            assert (x, y) not in ns


def test_parity_tables_differ():
    assert EVEN_ROW_DELTAS != ODD_ROW_DELTAS
    # left and right never depend on the row
    assert EVEN_ROW_DELTAS[Direction.LEFT] == ODD_ROW_DELTAS[Direction.LEFT] == (-1, 0)
    assert EVEN_ROW_DELTAS[Direction.RIGHT] == ODD_ROW_DELTAS[Direction.RIGHT] == (1, 0)


def test_even_and_odd_row_neighbors():
    assert neighbor_coords(2, 2, 6, 6) == [(3, 1), (2, 1), (1, 2), (2, 3), (3, 3), (3, 2)]
    assert neighbor_coords(2, 3, 6, 6) == [(2, 2), (1, 2), (1, 3), (1, 4), (2, 4), (3, 3)]


def test_neighbor_order_matches_in_direction():
    for d in Direction:
        assert neighbor_coords(0, 1, 5, 4)[d] == in_direction(0, 1, 5, 4, d)


def test_wraps_at_edges():
    assert in_direction(0, 0, 4, 4, Direction.UP_LEFT) == (0, 3)
    assert in_direction(3, 0, 4, 4, Direction.UP_RIGHT) == (0, 3)
    assert in_direction(0, 3, 4, 4, Direction.DOWN_LEFT) == (3, 0)


def test_flip_is_index_plus_three():
    for d in Direction:
        assert d.flip() == Direction((d + 3) % 6)
        assert d.flip().flip() == d


def test_row_shards_cover_rows_once():
    shards = row_shards(10, 3)
    rows = [y for r in shards for y in r]
    assert rows == list(range(10))
    assert [len(r) for r in shards] == [3, 3, 4]


def test_row_shards_more_workers_than_rows():
    shards = row_shards(2, 8)
    assert [list(r) for r in shards] == [[0], [1]]
