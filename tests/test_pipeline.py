"""Перехресна перевірка з Qhull (scipy.spatial.ConvexHull)."""
import random
from itertools import product

import pytest

pytest.importorskip("scipy")

from cgnd.geom import unique_points
from cgnd.hull import GiftWrapping
from cgnd.pipeline import hull_vertices, scipy_facets

CUBE = [tuple(float(c) for c in p) for p in product((0, 1), repeat=3)]


def _facet_coords(facets, pts):
    return {frozenset(pts[i] for i in f) for f in facets}


def test_cube_vertices_match_qhull():
    pts = CUBE + [(0.5, 0.5, 0.5), (0.2, 0.8, 0.3), (0.8, 0.2, 0.7)]
    ours = hull_vertices(pts, backend="internal")
    qhull = hull_vertices(pts, backend="scipy")
    assert ours == qhull
    assert len(ours) == 8


def test_cube_facets_match_qhull():
    pts = CUBE + [(0.5, 0.5, 0.5)]
    swarm = [p.to_floats() for p in unique_points(pts)]
    qhull = scipy_facets(pts)
    assert len(qhull) == 6
    assert all(len(f) == 4 for f in qhull)

    fl = GiftWrapping(pts).lattice
    verts = [v.to_floats() for v in fl.vertices]
    ours = {frozenset(verts[i] for i in fl.faces[fid].verts) for fid in fl.facets()}
    assert ours == _facet_coords(qhull, swarm)


def test_random_swarm_matches_qhull():
    rnd = random.Random(42)
    pts = [(rnd.uniform(-1, 1), rnd.uniform(-1, 1), rnd.uniform(-1, 1)) for _ in range(80)]
    assert hull_vertices(pts, backend="internal") == hull_vertices(pts, backend="scipy")

    swarm = [p.to_floats() for p in unique_points(pts)]
    fl = GiftWrapping(pts).lattice
    verts = [v.to_floats() for v in fl.vertices]
    ours = {frozenset(verts[i] for i in fl.faces[fid].verts) for fid in fl.facets()}
    assert ours == _facet_coords(scipy_facets(pts), swarm)


def test_random_4d_swarm_matches_qhull():
    rnd = random.Random(8)
    pts = [tuple(rnd.gauss(0, 1) for _ in range(4)) for _ in range(30)]
    assert hull_vertices(pts, backend="internal") == hull_vertices(pts, backend="scipy")


def test_unknown_backend():
    with pytest.raises(ValueError):
        hull_vertices(CUBE, backend="cgal")
