"""FaceLattice: структура, рівність, серіалізація, валідація."""
import json
from itertools import product

import pytest

from cgnd.geom import Vec
from cgnd.hull import build_hull
from cgnd.lattice import FaceLattice
from cgnd.numeric import DEFAULT

CUBE = [tuple(float(c) for c in p) for p in product((0, 1), repeat=3)]


def test_cube_lattice_structure():
    fl = build_hull(CUBE)
    assert fl.dim == 3 and fl.space_dim == 3
    assert fl.f_vector() == (8, 12, 6, 1)
    assert fl.faces[fl.top].verts == frozenset(range(8))
    # вершини впорядковані лексикографічно
    assert [v.to_floats() for v in fl.vertex_points()] == sorted(CUBE)
    for fid in fl.levels[1]:
        face = fl.faces[fid]
        assert len(face.verts) == 2
        assert len(face.super) == 2
    for fid in fl.levels[0]:
        assert len(fl.faces[fid].super) == 3
    assert fl.below(fl.top) == frozenset(range(len(fl.faces)))


def test_cube_facet_hyperplanes():
    fl = build_hull(CUBE)
    got = set()
    for hp in fl.hyperplanes():
        normal, offset = hp.to_floats()
        got.add((tuple(round(c, 9) + 0.0 for c in normal), round(offset, 9) + 0.0))
    expected = set()
    for i in range(3):
        e = tuple(1.0 if k == i else 0.0 for k in range(3))
        expected.add((e, 1.0))
        expected.add((tuple(-c + 0.0 for c in e), 0.0))
    assert got == expected


def test_inner_points_lie_in_relative_interior():
    fl = build_hull(CUBE)
    for fid in fl.levels[2]:
        hp = fl.faces[fid].hyperplane
        assert hp.contains(fl.inner(fid))
        assert hp.contains_negative(fl.inner(fl.top))


def test_validate_reports_nothing_for_hull():
    report = build_hull(CUBE).validate()
    assert report["f_vector"] == (8, 12, 6, 1)
    assert report["bad_union"] == []
    assert report["bad_count"] == []
    assert report["bad_affine"] == []
    assert report["bad_links"] == []


def test_validate_reports_broken_links():
    fl = build_hull(CUBE)
    edge = fl.levels[1][0]
    sub = next(iter(fl.faces[edge].sub))
    fl.faces[sub].super.discard(edge)
    assert (edge, sub) in fl.validate()["bad_links"]


def test_lattice_equality_ignores_vertex_noise():
    a = build_hull(CUBE)
    b = build_hull([tuple(c + 1e-11 for c in p) for p in CUBE])
    assert a == b
    c = build_hull([(0, 0, 0), (2, 0, 0), (0, 2, 0), (0, 0, 2)])
    assert a != c


def test_dict_round_trip():
    fl = build_hull(CUBE + [(0.5, 0.5, 0.5)])
    data = json.loads(json.dumps(fl.to_dict()))
    assert data["dim"] == 3
    assert len(data["vertices"]) == 8
    back = FaceLattice.from_dict(data)
    assert back == fl
    assert back.f_vector() == fl.f_vector()


def test_transform_keeps_combinatorics():
    fl = build_hull(CUBE)
    moved = fl.transform(lambda v: v * 2 + Vec((1.0, 1.0, 1.0)))
    assert moved.f_vector() == fl.f_vector()
    assert Vec((3.0, 3.0, 3.0)) in moved.vertex_points()
    for hp in moved.hyperplanes():
        assert hp.contains_negative(Vec((2.0, 2.0, 2.0)))


def test_point_lattice():
    fl = FaceLattice.point(Vec((1.0, 2.0)))
    assert fl.dim == 0
    assert fl.f_vector() == (1,)
    assert fl.facets() == []
    with pytest.raises(ValueError):
        fl.hyperplanes()


def test_lower_dimensional_lattice_has_no_hyperplanes():
    fl = build_hull([(0, 0), (1, 0), (0, 1)])
    flat = fl.transform(lambda v: Vec((v[0], v[1], 0.0)))
    assert flat.dim == 2 and flat.space_dim == 3
    with pytest.raises(ValueError):
        flat.hyperplanes()


def test_empty_lattice_rejected():
    with pytest.raises(ValueError):
        FaceLattice([])
    fl = FaceLattice([Vec((0.0,)), Vec((1.0,))], DEFAULT)
    fl.add_face(0, [0])
    fl.add_face(0, [1])
    with pytest.raises(ValueError):
        fl.finalize()


def test_add_face_is_idempotent():
    fl = FaceLattice([Vec((0.0,)), Vec((1.0,))])
    a = fl.add_face(0, [0])
    assert fl.add_face(0, [0]) == a
    b = fl.add_face(0, [1])
    top = fl.add_face(1, [0, 1])
    fl.link(top, a)
    fl.link(top, b)
    fl.finalize()
    assert fl.f_vector() == (2, 1)
    assert len(fl.hyperplanes()) == 2
    assert all(hp.contains_negative(Vec((0.5,))) for hp in fl.hyperplanes())
