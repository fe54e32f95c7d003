"""Gift wrapping: повнота, коректність, інваріантність, вироджені входи."""
import math
import random
from itertools import product

import pytest

from cgnd.errors import AmbiguousTieError, DegenerateInputError, GeometryError
from cgnd.geom import Vec
from cgnd.hull import GiftWrapping, build_hull
from cgnd.numeric import DEFAULT, Context, MpmathBackend


CUBE = [tuple(float(c) for c in p) for p in product((0, 1), repeat=3)]


def _cube_with_face_points(per_face: int, seed: int):
    rnd = random.Random(seed)
    pts = list(CUBE)
    for axis in range(3):
        for side in (0.0, 1.0):
            for _ in range(per_face):
                p = [rnd.uniform(0.05, 0.95) for _ in range(3)]
                p[axis] = side
                pts.append(tuple(p))
    return pts


def _clean(report):
    return all(not v for k, v in report.items() if k != "f_vector")


def _rotation_3d(a: float, b: float):
    ca, sa, cb, sb = math.cos(a), math.sin(a), math.cos(b), math.sin(b)
    rz = [[ca, -sa, 0.0], [sa, ca, 0.0], [0.0, 0.0, 1.0]]
    rx = [[1.0, 0.0, 0.0], [0.0, cb, -sb], [0.0, sb, cb]]
    return [[sum(rz[i][k] * rx[k][j] for k in range(3)) for j in range(3)] for i in range(3)]


def _apply(m, p, shift=(0.0, 0.0, 0.0)):
    return tuple(sum(m[i][j] * p[j] for j in range(3)) + shift[i] for i in range(3))


def test_cube_shuffled_with_interior_points():
    pts = list(CUBE) + [(0.5, 0.5, 0.5), (0.2, 0.8, 0.3), (0.8, 0.2, 0.7)]
    random.Random(3).shuffle(pts)
    hull = GiftWrapping(pts)
    assert len(hull.vertices) == 8
    assert hull.lattice.f_vector() == (8, 12, 6, 1)
    for fid in hull.lattice.facets():
        assert len(hull.lattice.faces[fid].verts) == 4
    assert _clean(hull.validate())


def test_cube_face_points_are_not_vertices():
    hull = GiftWrapping(_cube_with_face_points(50, seed=11))
    assert hull.lattice.f_vector() == (8, 12, 6, 1)
    got = sorted(v.to_floats() for v in hull.vertices)
    assert got == sorted(CUBE)
    assert _clean(hull.validate())


def test_hull_does_not_depend_on_input_order():
    pts = _cube_with_face_points(5, seed=2)
    shuffled = list(pts)
    random.Random(5).shuffle(shuffled)
    assert build_hull(pts) == build_hull(shuffled)


def test_hull_invariant_under_rotation_and_translation():
    m = _rotation_3d(0.3, 1.1)
    shift = (2.0, -1.0, 0.5)
    pts = _cube_with_face_points(3, seed=7)
    moved = [_apply(m, p, shift) for p in pts]
    base = build_hull(pts)
    hull = build_hull(moved)
    assert hull.f_vector() == base.f_vector()
    expected = [Vec(_apply(m, p.to_floats(), shift)) for p in base.vertices]
    assert base.transform(lambda v: Vec(_apply(m, v.to_floats(), shift))) == hull
    for p in hull.vertices:
        assert any(DEFAULT.with_eps(1e-7).same_point(p, q) for q in expected)


def test_every_point_is_inside_every_facet():
    rnd = random.Random(17)
    pts = [(rnd.gauss(0, 1), rnd.gauss(0, 1), rnd.gauss(0, 1)) for _ in range(60)]
    hull = GiftWrapping(pts)
    report = hull.validate()
    assert report["outside_points"] == []
    assert _clean(report)
    # симпліціальна оболонка в загальному положенні: f1 = 3 f2 / 2, Ейлер
    f0, f1, f2, _ = hull.lattice.f_vector()
    assert 2 * f1 == 3 * f2
    assert f0 - f1 + f2 == 2


def test_simplex():
    fl = build_hull([(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)])
    assert fl.f_vector() == (4, 6, 4, 1)


def test_square_in_plane():
    fl = build_hull([(0, 0), (2, 0), (2, 2), (0, 2), (1, 1), (1, 0)])
    assert fl.f_vector() == (4, 4, 1)
    assert len(fl.hyperplanes()) == 4


def test_tesseract():
    pts = list(product((0.0, 1.0), repeat=4)) + [(0.5, 0.5, 0.5, 0.5)]
    hull = GiftWrapping(pts)
    assert hull.lattice.f_vector() == (16, 32, 24, 8, 1)
    assert _clean(hull.validate())


def test_coplanar_swarm_is_degenerate():
    with pytest.raises(DegenerateInputError) as exc:
        GiftWrapping([(0, 0, 0), (1, 0, 0), (0, 1, 0), (1, 1, 0)])
    assert exc.value.dim == 3
    assert exc.value.count == 4
    assert isinstance(exc.value, ValueError)


def test_empty_and_mixed_swarms():
    with pytest.raises(DegenerateInputError):
        GiftWrapping([])
    with pytest.raises(ValueError):
        GiftWrapping([(0, 0, 0), (1, 0)])
    with pytest.raises(GeometryError):
        GiftWrapping([(1, 1, 1)] * 5)


def test_lower_dimensional_hulls():
    seg = GiftWrapping([(0, 0, 0), (1, 1, 1), (0.5, 0.5, 0.5)], full_dim=False).lattice
    assert seg.f_vector() == (2, 1)
    assert seg.dim == 1 and seg.space_dim == 3

    square = GiftWrapping(
        [(0, 0, 3), (1, 0, 3), (1, 1, 3), (0, 1, 3), (0.5, 0.5, 3)], full_dim=False
    ).lattice
    assert square.f_vector() == (4, 4, 1)

    point = GiftWrapping([(2, 2, 2), (2, 2, 2 + 1e-12)], full_dim=False).lattice
    assert point.f_vector() == (1,)


def test_mpmath_backend_hull():
    ctx = Context(eps=1e-20, num=MpmathBackend(dps=40))
    hull = GiftWrapping(CUBE + [(0.5, 0.5, 0.5)], ctx)
    assert hull.lattice.f_vector() == (8, 12, 6, 1)
    assert _clean(hull.validate())


def test_ambiguous_tie_error_carries_candidates():
    err = AmbiguousTieError("tie", candidates=[Vec((0.0, 1.0)), Vec((1.0, 0.0))], dim=2)
    assert err.candidates == [Vec((0.0, 1.0)), Vec((1.0, 0.0))]
    assert err.count == 2
    assert "dim=2" in str(err)


def test_strict_mode_accepts_clean_input():
    ctx = Context(strict=True)
    hull = GiftWrapping(_cube_with_face_points(4, seed=23), ctx)
    assert hull.lattice.f_vector() == (8, 12, 6, 1)


# дві верхівки на відстані 5e-5: косинуси майже рівні, але спільної грані немає
NEAR_TIE = [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0.3, 0.3, 1e4), (0.3 + 5e-5, 0.3, 1e4)]


def test_strict_mode_raises_on_near_tie():
    with pytest.raises(AmbiguousTieError) as info:
        build_hull(NEAR_TIE, Context(strict=True))
    assert info.value.count >= 2
    assert all(len(c) == 3 for c in info.value.candidates)


def test_near_tie_resolved_without_strict(caplog):
    with caplog.at_level("WARNING", logger="cgnd.hull"):
        fl = build_hull(NEAR_TIE)
    assert fl.f_vector() == (5, 8, 5, 1)
    assert "near-tie" in caplog.text
