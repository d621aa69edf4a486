"""Tests for the projection pipeline and screen mapping."""

import math

import pytest
import numpy as np

from ncube.core_geometry import (
    DimensionError, ProjectionMode, ProjectionSpec, ProjectionPipeline, RotationEngine,
    build_hypercube, to_screen, projection_presets, view_position, average_matrix,
    isometric_matrix, MIN_VIEW_DEPTH
)

ORTHO = ProjectionSpec(ProjectionMode.ORTHOGRAPHIC, 1.0)
ISO = ProjectionSpec(ProjectionMode.ISOMETRIC, 1.0)
AVG = ProjectionSpec(ProjectionMode.PERSPECTIVE_AVERAGE, 1.0)
TRIM = ProjectionSpec(ProjectionMode.PERSPECTIVE_TRIM, 1.0)


class TestMatrices:
    """Test the fixed per-dimension projection matrices."""

    def test_isometric_columns_on_unit_circle(self):
        M = isometric_matrix(6)
        assert M.shape == (2, 6)
        np.testing.assert_allclose(np.hypot(M[0], M[1]), np.ones(6))
        np.testing.assert_allclose(M[:, 0], [1.0, 0.0])

    def test_average_matrix_three_axes(self):
        np.testing.assert_array_equal(average_matrix(3), np.eye(3))

    @pytest.mark.parametrize("n,counts", [(4, [2, 1, 1]), (5, [2, 2, 1]), (9, [3, 3, 3])])
    def test_average_row_weights(self, n, counts):
        M = average_matrix(n)
        for row, count in enumerate(counts):
            assert np.count_nonzero(M[row]) == count
            np.testing.assert_allclose(M[row].sum(), 1.0)
        assert M[0, 0] == M[0, 3] == pytest.approx(1.0 / counts[0])

    def test_average_matrix_small_dimension(self):
        M = average_matrix(2)
        np.testing.assert_array_equal(M[2], [0.0, 0.0])


class TestProjectionPipeline:
    """Test the four projection models."""

    def test_orthographic_takes_first_two(self):
        pipe = ProjectionPipeline(5)
        assert pipe.project([0.3, -0.7, 4.0, 1.0, 2.0], None, ORTHO) == (0.3, -0.7)

    def test_orthographic_scale_and_view_ignored(self):
        pipe = ProjectionPipeline(3)
        view = view_position(3, 12.0)
        assert pipe.project([2.0, -4.0, 1.0], view, ORTHO, scale=2.0) == (1.0, -2.0)

    def test_isometric_of_origin(self):
        pipe = ProjectionPipeline(7)
        assert pipe.project(np.zeros(7), view_position(7, 5.0), ISO) == (0.0, 0.0)

    def test_isometric_axis_and_scale(self):
        pipe = ProjectionPipeline(4)
        x, y = pipe.project([0.0, 1.0, 0.0, 0.0], None, ProjectionSpec(ProjectionMode.ISOMETRIC, 2.0))
        assert x == pytest.approx(0.0, abs=1e-12)
        assert y == pytest.approx(0.5)

    def test_perspective_average_adds_view(self):
        pipe = ProjectionPipeline(3)
        x, y = pipe.project([1.0, 2.0, 0.0], [0.0, 0.0, 4.0], AVG)
        assert (x, y) == pytest.approx((0.25, 0.5))

    def test_perspective_average_groups_axes(self):
        pipe = ProjectionPipeline(4)
        # rows: (x0 + x3)/2, x1, x2
        x, y = pipe.project([1.0, 2.0, 1.0, 3.0], [0.0, 0.0, 3.0, 0.0], AVG)
        assert (x, y) == pytest.approx((2.0 / 4.0, 2.0 / 4.0))

    def test_perspective_trim(self):
        pipe = ProjectionPipeline(4)
        x, y = pipe.project([1.0, 2.0, 3.0, 9.0], [0.0, 0.0, 1.0, 0.0],
                            ProjectionSpec(ProjectionMode.PERSPECTIVE_TRIM, 0.5))
        assert (x, y) == pytest.approx((0.5, 1.0))

    def test_perspective_divide_guard(self):
        pipe = ProjectionPipeline(3)
        x, y = pipe.project([1.0, 1.0, 0.0], None, TRIM)
        assert math.isfinite(x) and math.isfinite(y)

    @pytest.mark.parametrize("n,spec", [(2, AVG), (2, TRIM), (1, ORTHO)])
    def test_too_few_axes(self, n, spec):
        pipe = ProjectionPipeline(n)
        with pytest.raises(DimensionError):
            pipe.project(np.ones(n), None, spec)

    def test_isometric_one_dimension(self):
        pipe = ProjectionPipeline(1)
        assert pipe.project([1.0], None, ISO) == pytest.approx((1.0, 0.0))

    def test_point_width_mismatch(self):
        with pytest.raises(DimensionError):
            ProjectionPipeline(4).project([1.0, 2.0, 3.0], None, ORTHO)

    def test_zero_scale(self):
        with pytest.raises(ValueError):
            ProjectionSpec(ProjectionMode.ISOMETRIC, 0.0)
        with pytest.raises(ValueError):
            ProjectionPipeline(3).project([1.0, 1.0, 1.0], None, ISO, scale=0)

    def test_blended_endpoints_and_midpoint(self):
        pipe = ProjectionPipeline(4)
        p = [0.5, -1.0, 0.25, 2.0]
        view = view_position(4, 10.0)
        a = pipe.project(p, view, ISO)
        b = pipe.project(p, view, ORTHO)
        assert pipe.project_blended(p, view, ISO, ORTHO, 0.0) == a
        assert pipe.project_blended(p, view, ISO, ORTHO, 1.0) == b
        mid = pipe.project_blended(p, view, ISO, ORTHO, 0.5)
        assert mid == pytest.approx(((a[0] + b[0]) / 2, (a[1] + b[1]) / 2))

    def test_project_many_matches_project(self):
        lattice = build_hypercube(4)
        pipe = ProjectionPipeline(4)
        view = view_position(4, 15.0)
        many = pipe.project_many(lattice.vertices, view, AVG)
        assert many.shape == (16, 2)
        for i in (0, 5, 15):
            assert tuple(many[i]) == pytest.approx(pipe.project(lattice.vertices[i], view, AVG))

    def test_cube_scenario(self):
        lattice = build_hypercube(3)
        rotated = RotationEngine(3, seed=0).apply(lattice.vertices)
        pipe = ProjectionPipeline(3)
        assert pipe.project(rotated[0], None, ORTHO) == (-1.0, -1.0)
        assert pipe.project(rotated[7], None, ORTHO) == (1.0, 1.0)
        assert lattice.has_edge(0, 1)
        assert not lattice.has_edge(0, 3)


class TestScreenAndPresets:
    """Test screen mapping, view position and presets."""

    def test_to_screen_centre_and_flip(self):
        out = to_screen(np.array([[0.0, 0.0], [1.0, 1.0], [-0.5, -0.5]]), 800, 600)
        np.testing.assert_allclose(out, [[400, 300], [1000, -300], [100, 600]])

    def test_to_screen_scale(self):
        out = to_screen([0.5, 0.0], 400, 400, scale=2.0)
        np.testing.assert_allclose(out, [300, 200])

    def test_view_position(self):
        v = view_position(5, 3.0)
        np.testing.assert_array_equal(v, [0, 0, 3.0, 0, 0])
        np.testing.assert_array_equal(view_position(2, 3.0), [0, 0])
        with pytest.raises(ValueError):
            view_position(4, MIN_VIEW_DEPTH / 2)

    def test_presets(self):
        n = 4
        dist = 10 + math.sqrt(2) * n
        assert projection_presets(ProjectionMode.ISOMETRIC, n) == pytest.approx((math.sqrt(2) * 2, dist))
        assert projection_presets("Perspective - Trim", n) == pytest.approx((4 * math.sqrt(2) * 2 / dist, dist))
        assert projection_presets("orthographic", n) == pytest.approx((2.0, dist))

    @pytest.mark.parametrize("label,mode", [
        ("Isometric", ProjectionMode.ISOMETRIC),
        ("Perspective - Avg", ProjectionMode.PERSPECTIVE_AVERAGE),
        ("perspective_trim", ProjectionMode.PERSPECTIVE_TRIM),
        ("ORTHOGRAPHIC", ProjectionMode.ORTHOGRAPHIC),
    ])
    def test_mode_parse(self, label, mode):
        assert ProjectionMode.parse(label) is mode

    def test_mode_parse_unknown(self):
        with pytest.raises(ValueError):
            ProjectionMode.parse("fisheye")
