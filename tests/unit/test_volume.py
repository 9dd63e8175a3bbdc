import logging

import numpy as np
import pytest

from partseed.core.errors import NoUsableGeometry
from partseed.core.geometry import AABB
from partseed.core.volume import MeshVolumeSampler
from partseed.examples.synthetic import build_mesh


def _triangles(preset: str, size: float) -> np.ndarray:
    vertices, faces = build_mesh(preset, size)
    return vertices.astype(np.float64)[faces]


def test_cube_fill_stays_inside_and_fills_every_slot() -> None:
    tris = _triangles("cube", 2.0)
    pts = MeshVolumeSampler().sample(tris, 300, rng=np.random.default_rng(0))
    assert len(pts) == 300
    assert not pts.is_partial
    assert pts.normals is None
    assert np.all(np.abs(pts.positions) <= 1.0 + 1e-5)


def test_cube_fill_is_spread_through_volume() -> None:
    tris = _triangles("cube", 2.0)
    pts = MeshVolumeSampler().sample(tris, 3000, rng=np.random.default_rng(5))
    np.testing.assert_allclose(pts.positions.mean(axis=0), [0.0, 0.0, 0.0], atol=0.08)
    # Interior points, not just the faces: a good share sits well inside.
    assert np.mean(np.all(np.abs(pts.positions) < 0.8, axis=1)) > 0.3


def test_points_stay_within_grown_bounds() -> None:
    tris = _triangles("tetra", 1.5)
    sampler = MeshVolumeSampler(ray_margin=0.5)
    pts = sampler.sample(tris, 400, rng=np.random.default_rng(11))
    assert len(pts) <= 400
    box = AABB.from_triangles(tris).grow(sampler.ray_margin)
    assert np.all(box.contains(pts.positions))
    # Points of a convex tetrahedron satisfy x + y + z <= edge.
    assert np.all(pts.positions.sum(axis=1) <= 1.5 + 1e-4)


def test_flat_mesh_may_under_produce() -> None:
    tris = _triangles("plane", 2.0)
    pts = MeshVolumeSampler(attempts=1).sample(tris, 600, rng=np.random.default_rng(9))
    assert pts.requested == 600
    assert 0 < len(pts) < 600
    assert pts.is_partial
    np.testing.assert_allclose(pts.positions[:, 2], 0.0, atol=1e-6)


def test_dropped_samples_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    tris = _triangles("plane", 2.0)
    with caplog.at_level(logging.DEBUG, logger="partseed"):
        pts = MeshVolumeSampler(attempts=1).sample(tris, 200, rng=np.random.default_rng(4))
    missed = pts.requested - len(pts)
    assert missed > 0
    dropped = [rec for rec in caplog.records if rec.levelno == logging.DEBUG and "dropped" in rec.message]
    assert len(dropped) == missed
    assert any(rec.levelno == logging.WARNING for rec in caplog.records)


def test_intersector_is_injectable() -> None:
    class NeverHits:
        def __init__(self) -> None:
            self.calls = 0

        def intersect_segment(self, tris, start, end) -> np.ndarray:
            self.calls += 1
            return np.zeros((0, 3))

    stub = NeverHits()
    pts = MeshVolumeSampler(attempts=5, intersector=stub).sample(
        _triangles("cube", 1.0), 4, rng=np.random.default_rng(0)
    )
    assert len(pts) == 0
    assert pts.positions.shape == (0, 3)
    assert stub.calls == 20


def test_same_seed_reproduces_samples() -> None:
    tris = _triangles("cube", 1.0)
    a = MeshVolumeSampler().sample(tris, 50, rng=np.random.default_rng(3))
    b = MeshVolumeSampler().sample(tris, 50, rng=np.random.default_rng(3))
    np.testing.assert_array_equal(a.positions, b.positions)


@pytest.mark.parametrize(
    "tris",
    [
        np.zeros((0, 3, 3)),
        np.array([[[0, 0, 0], [1, 1, 1], [2, 2, 2]]], dtype=np.float64),
    ],
)
def test_no_usable_geometry(tris: np.ndarray) -> None:
    with pytest.raises(NoUsableGeometry):
        MeshVolumeSampler().sample(tris, 5, rng=np.random.default_rng(0))
