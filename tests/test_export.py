"""
Tests for pixel readback, flattening and PNG export.
"""
import numpy as np
import pygame
import pytest

from conftest import BLUE, RED, paint


class TestReadback:

    def test_get_pixels_rgba_region(self, canvas):
        paint(canvas, 1, 1, RED, opacity=0.5)
        rows = canvas.get_pixels_rgba(1, 1, 2, 1)
        assert rows == [[[255, 0, 0, 0.5], [0, 0, 0, 0.0]]]

    def test_get_pixels_rgba_clamps_region(self, canvas):
        rows = canvas.get_pixels_rgba(6, 6, 10, 10)
        assert len(rows) == 2 and len(rows[0]) == 2

    def test_flatten_over_background(self, canvas):
        paint(canvas, 0, 0, RED, opacity=0.5)
        background = np.full((8, 8, 3), 255.0, dtype=np.float32)
        rgb = canvas.flatten_rgb(background)
        assert tuple(rgb[0, 0]) == (255, 128, 128)
        assert tuple(rgb[7, 7]) == (255, 255, 255)


class TestExportPng:

    def test_united_export(self, canvas, tmp_path):
        paint(canvas, 0, 0, RED)
        canvas.add_layer()
        paint(canvas, 1, 0, BLUE, opacity=0.5)
        path = str(tmp_path / "art.png")
        assert canvas.export_png(path) == [path]

        image = pygame.image.load(path)
        assert image.get_size() == (8, 8)
        assert tuple(image.get_at((0, 0))) == (255, 0, 0, 255)
        assert tuple(image.get_at((1, 0))) == (0, 0, 255, 128)
        assert image.get_at((5, 5)).a == 0

    def test_scaled_export(self, canvas, tmp_path):
        paint(canvas, 0, 0, RED)
        path = str(tmp_path / "big.png")
        canvas.export_png(path, scale=3)
        image = pygame.image.load(path)
        assert image.get_size() == (24, 24)
        assert tuple(image.get_at((2, 2))) == (255, 0, 0, 255)
        assert image.get_at((3, 3)).a == 0

    def test_opaque_export_premultiplies(self, canvas, tmp_path):
        paint(canvas, 0, 0, RED, opacity=0.5)
        path = str(tmp_path / "flat.png")
        canvas.export_png(path, transparent=False)
        image = pygame.image.load(path)
        assert tuple(image.get_at((0, 0)))[:3] == (128, 0, 0)
        assert image.get_at((0, 0)).a == 255

    def test_separate_export_skips_hidden_layers(self, canvas, tmp_path):
        paint(canvas, 0, 0, RED)
        canvas.add_layer()
        paint(canvas, 0, 0, BLUE)
        canvas.add_layer()
        canvas.toggle_layer_visibility()

        written = canvas.export_png(str(tmp_path / "layers.png"), separate=True)
        assert written == [str(tmp_path / "layers_1.png"), str(tmp_path / "layers_2.png")]
        top = pygame.image.load(written[1])
        assert tuple(top.get_at((0, 0))) == (0, 0, 255, 255)
        assert canvas.status_message == "Exported 2 layers"

    @pytest.mark.parametrize("opacity, alpha", [(0.5, 128), (0.25, 64)])
    def test_separate_export_applies_layer_opacity(self, canvas, tmp_path, opacity, alpha):
        paint(canvas, 0, 0, RED)
        canvas.set_layer_opacity(opacity)
        written = canvas.export_png(str(tmp_path / "o.png"), separate=True)
        assert pygame.image.load(written[0]).get_at((0, 0)).a == alpha
