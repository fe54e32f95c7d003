"""H-представлення: вершини, решітка, надлишкові нерівності."""
from itertools import product

import pytest

from cgnd.errors import DegenerateInputError, UnboundedRegionError
from cgnd.geom import Vec
from cgnd.hrep import find_initial_vertex, from_half_spaces, hrep_redundancy, vertices_from_half_spaces
from cgnd.hull import build_hull
from cgnd.hyperplane import HyperPlane
from cgnd.numeric import DEFAULT, Context
from cgnd.polytope import ConvexPolytop


def _hp(normal, offset):
    return HyperPlane(Vec(tuple(float(c) for c in normal)), float(offset))


def _box(d, lo=0.0, hi=1.0):
    hps = []
    for i in range(d):
        e = [0.0] * d
        e[i] = 1.0
        hps.append(_hp(e, hi))
        hps.append(_hp([-c for c in e], -lo))
    return hps


def _same_points(a, b, ctx=DEFAULT):
    return len(a) == len(b) and all(any(ctx.same_point(p, q) for q in b) for p in a)


def test_cube_from_half_spaces_matches_hull():
    fl = from_half_spaces(_box(3))
    assert fl.f_vector() == (8, 12, 6, 1)
    assert fl == build_hull(product((0.0, 1.0), repeat=3))
    assert all(not v for k, v in fl.validate().items() if k != "f_vector")


def test_tesseract_from_half_spaces():
    fl = from_half_spaces(_box(4, -1.0, 1.0))
    assert fl.f_vector() == (16, 32, 24, 8, 1)


def test_round_trip_through_hull_hyperplanes():
    for poly in (ConvexPolytop.cyclic(3, 6), ConvexPolytop.ball_1([0.0, 0.0, 0.0], 1.0),
                 ConvexPolytop.regular_polygon(8)):
        fl = poly.lattice
        assert from_half_spaces(fl.hyperplanes()) == fl


def test_facet_hyperplanes_are_kept():
    fl = from_half_spaces(_box(3))
    for fid in fl.facets():
        hp = fl.faces[fid].hyperplane
        assert all(hp.contains(p) for p in fl.points_of(fid))
        assert hp.contains_negative(fl.inner(fl.top))


def test_triangle_from_half_spaces():
    fl = from_half_spaces([_hp((-1, 0), 0), _hp((0, -1), 0), _hp((1, 1), 1)])
    assert fl.f_vector() == (3, 3, 1)
    assert _same_points(fl.vertex_points(), [Vec((0.0, 0.0)), Vec((1.0, 0.0)), Vec((0.0, 1.0))])


def test_segment_from_half_spaces():
    fl = from_half_spaces([_hp((1,), 2), _hp((-1,), 1)])
    assert fl.f_vector() == (2, 1)
    assert [v.to_floats() for v in fl.vertex_points()] == [(-1.0,), (2.0,)]


def test_single_vertex_gives_point():
    fl = from_half_spaces(_box(2, 0.5, 0.5))
    assert fl.f_vector() == (1,)


def test_half_plane_is_unbounded():
    with pytest.raises(UnboundedRegionError):
        from_half_spaces([_hp((1, 0), 1)])


def test_missing_bound_is_unbounded():
    with pytest.raises(UnboundedRegionError) as exc:
        from_half_spaces([_hp((1, 0), 1), _hp((0, 1), 1), _hp((-1, 0), 0)])
    assert exc.value.dim == 2


def test_flat_region_is_degenerate():
    with pytest.raises(DegenerateInputError):
        from_half_spaces([_hp((1, 0), 0), _hp((-1, 0), 0), _hp((0, 1), 1), _hp((0, -1), 0)])


def test_dimension_argument():
    with pytest.raises(ValueError):
        from_half_spaces(_box(3), dim=2)
    assert from_half_spaces(_box(3), dim=3).dim == 3


def test_empty_system():
    with pytest.raises(ValueError):
        vertices_from_half_spaces([])


def test_infeasible_system_has_no_vertices():
    hps = [_hp((1,), 0), _hp((-1,), -1)]
    assert find_initial_vertex(hps) is None
    assert vertices_from_half_spaces(hps) == []
    assert vertices_from_half_spaces(hps, method="naive") == []


def test_geometric_and_naive_enumeration_agree():
    hps = _box(3) + [_hp((1, 1, 1), 2.5)]
    geo = vertices_from_half_spaces(hps)
    naive = vertices_from_half_spaces(hps, method="naive")
    # куб зі зрізаним кутом (1,1,1): 7 + 3 вершини
    assert len(geo) == 10
    assert _same_points(geo, naive)
    with pytest.raises(ValueError):
        vertices_from_half_spaces(hps, method="simplex")


def test_initial_vertex_is_feasible():
    hps = _box(3)
    x, active = find_initial_vertex(hps)
    assert all(h.contains_non_positive(x) for h in hps)
    assert len(active) == 3


def test_redundancy_removes_loose_and_duplicate_constraints():
    hps = _box(2) + [_hp((1, 0), 5), _hp((0, 2), 2), _hp((1, 1), 3)]
    kept = hrep_redundancy(hps)
    assert len(kept) == 4
    assert all(any(k.same_as(h) for h in _box(2)) for k in kept)


def test_strict_walk_accepts_plane_touching_one_vertex():
    # x+y+z <= 3 торкається куба лише у (1,1,1); промені з сусідніх вершин
    # упираються в неї та в грань куба при однаковому t
    hps = _box(3) + [_hp((1, 1, 1), 3)]
    fl = from_half_spaces(hps, Context(strict=True))
    assert fl.f_vector() == (8, 12, 6, 1)
    assert _same_points(vertices_from_half_spaces(hps, Context(strict=True)), list(fl.vertices))
