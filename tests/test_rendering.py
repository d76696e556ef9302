import os

import numpy as np
import pytest

import main
from rendering.colors import color_map, hex_color
from rendering.hexdraw import hex_center, image_size, render_image, save_preview
from world.config import FOOD, FOOD_FLUID_COLOR_NORMAL, KILL


def test_hex_color_of_fresh_tile(make_grid):
    grid = make_grid(4, 4)
    assert hex_color(grid.hex(0, 0)) == [0.0, 0.0, 0.0, 1.0]


def test_hex_color_channels(make_grid):
    grid = make_grid(4, 4)
    tile = grid.hex(1, 1)
    tile.solution.fluids[FOOD] = FOOD_FLUID_COLOR_NORMAL / 2
    tile.solution.fluids[KILL] = 0.99
    r, g, b, a = hex_color(tile)
    assert r == pytest.approx(1.0)
    assert g == pytest.approx(0.5)
    assert a == 1.0


def test_color_map(make_grid):
    grid = make_grid(5, 4)
    grid.hex(2, 3).solution.fluids[FOOD] = FOOD_FLUID_COLOR_NORMAL
    img = color_map(grid)
    assert img.shape == (4, 5, 3)
    assert img.dtype == np.uint8
    assert img[3, 2, 1] == 255
    assert img[0, 0, 1] == 0


def test_even_rows_are_shifted():
    assert hex_center(0, 0, 10.0)[0] > hex_center(0, 1, 10.0)[0]


def test_render_image(make_grid, stub_cell, tmp_path):
    grid = make_grid(6, 4)
    grid.hex(1, 1).cell = stub_cell()
    img = render_image(grid, tile_size=4.0)
    assert img.size == image_size(6, 4, 4.0)

    path = save_preview(grid, str(tmp_path / "out" / "grid.png"), tile_size=4.0)
    assert os.path.exists(path)


def test_cli_headless(tmp_path, capsys):
    save = tmp_path / "sim"
    png = tmp_path / "grid.png"
    code = main.main([
        "--headless",
        "--size", "8", "6",
        "--ticks", "4",
        "--workers", "1",
        "--sample-every", "2",
        "--spawn-rate", "2.0",
        "--metrics-dir", str(tmp_path / "metrics"),
        "--save", str(save),
        "--snapshot", str(png),
    ])
    assert code == 0
    assert (tmp_path / "sim.npz").exists()
    assert png.exists()
    assert len(os.listdir(tmp_path / "metrics")) == 1
    assert "Tick 00004" in capsys.readouterr().out

    code = main.main(["--headless", "--load", str(save), "--ticks", "2", "--workers", "1", "--no-spawn"])
    assert code == 0
