"""Tests for PathSet helpers and the demo star."""

import pytest

from turtlefleet.paths import (
    STAR_POINTS,
    load_path_set,
    normalize_path_set,
    scale_points,
    star_path_set,
)


class TestNormalize:
    def test_freezes_to_float_tuples(self):
        assert normalize_path_set([[[1, 2], [3, 4]], []]) == (((1.0, 2.0), (3.0, 4.0)), ())

    def test_bad_waypoint_raises(self):
        with pytest.raises(ValueError, match="path 0 waypoint 1"):
            normalize_path_set([[[1, 2], [3]]])

    def test_non_numeric_raises(self):
        with pytest.raises(ValueError):
            normalize_path_set([[["a", "b"]]])


class TestScale:
    def test_corners(self):
        assert scale_points([(0, 0), (8, 8)], 8, 8) == ((0.5, 10.5), (10.5, 0.5))

    def test_uses_longer_side(self):
        assert scale_points([(10, 5)], 10, 5) == ((10.5, 5.5),)


class TestStar:
    def test_single_turtle_draws_whole_outline(self):
        (path,) = star_path_set()
        assert len(path) == len(STAR_POINTS)
        assert path[0] == path[-1]

    def test_split_runs_share_endpoints(self):
        paths = star_path_set(3)
        assert len(paths) == 3
        for a, b in zip(paths, paths[1:]):
            assert a[-1] == b[0]
        assert paths[0][0] == paths[-1][-1]

    def test_split_covers_every_point(self):
        full = star_path_set(1)[0]
        paths = star_path_set(4)
        rebuilt = list(paths[0]) + [p for path in paths[1:] for p in path[1:]]
        assert tuple(rebuilt) == full


class TestLoad:
    def test_load_yaml(self, tmp_path):
        f = tmp_path / "paths.yaml"
        f.write_text("paths:\n  - [[1, 1], [2, 1]]\n  - [[5, 5]]\n")
        assert load_path_set(str(f)) == (((1.0, 1.0), (2.0, 1.0)), ((5.0, 5.0),))

    def test_missing_paths_key(self, tmp_path):
        f = tmp_path / "paths.yaml"
        f.write_text("other: 1\n")
        with pytest.raises(ValueError, match="'paths' list"):
            load_path_set(str(f))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_path_set(str(tmp_path / "nope.yaml"))
