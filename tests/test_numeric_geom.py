"""Числовий контекст, вектори та дедуплікація точок."""
import random

import pytest

from cgnd.geom import Vec, centroid, lex_min, unique_points, unit
from cgnd.numeric import DEFAULT, EPS, Context, FloatBackend, MpmathBackend


def test_context_comparisons():
    ctx = Context(eps=1e-6)
    assert ctx.eq(1.0, 1.0 + 1e-7)
    assert not ctx.eq(1.0, 1.0 + 1e-5)
    assert ctx.gt(1.0 + 1e-5, 1.0)
    assert not ctx.gt(1.0 + 1e-7, 1.0)
    assert ctx.le(1.0 + 1e-7, 1.0)
    assert ctx.ge(1.0 - 1e-7, 1.0)
    assert ctx.lt(-1e-5)
    assert ctx.cmp(2.0, 1.0) == 1
    assert ctx.cmp(1.0, 2.0) == -1
    assert ctx.cmp(1.0, 1.0 + 1e-9) == 0


def test_default_context():
    assert DEFAULT.eps == EPS
    assert isinstance(DEFAULT.num, FloatBackend)
    assert DEFAULT.strict is False
    assert DEFAULT.with_eps(1e-3).eps == 1e-3


def test_context_from_env(monkeypatch):
    monkeypatch.setenv("CGND_EPS", "1e-6")
    monkeypatch.setenv("CGND_STRICT", "true")
    monkeypatch.setenv("CGND_BACKEND", "mpmath")
    ctx = Context.from_env()
    assert ctx.eps == 1e-6
    assert ctx.strict is True
    assert isinstance(ctx.num, MpmathBackend)


def test_context_from_env_defaults(monkeypatch):
    for name in ("CGND_EPS", "CGND_STRICT", "CGND_BACKEND"):
        monkeypatch.delenv(name, raising=False)
    ctx = Context.from_env()
    assert ctx.eps == EPS
    assert ctx.strict is False
    assert isinstance(ctx.num, FloatBackend)


def test_context_from_env_unknown_backend(monkeypatch):
    monkeypatch.setenv("CGND_BACKEND", "decimal")
    with pytest.raises(ValueError):
        Context.from_env()


def test_vec_arithmetic():
    a = Vec((1.0, 2.0, 3.0))
    b = Vec((0.5, 0.5, 0.5))
    assert a + b == Vec((1.5, 2.5, 3.5))
    assert a - b == Vec((0.5, 1.5, 2.5))
    assert -b == Vec((-0.5, -0.5, -0.5))
    assert a * 2 == Vec((2.0, 4.0, 6.0))
    assert 2 * a == a * 2
    assert a / 2 == Vec((0.5, 1.0, 1.5))
    assert a.dot(b) == 3.0
    assert a.dim == 3
    assert Vec((3.0, 4.0)).norm() == 5.0
    assert Vec((3.0, 4.0)).normalize() == Vec((0.6, 0.8))
    with pytest.raises(ValueError):
        Vec((0.0, 0.0)).normalize()


def test_unit_and_centroid():
    assert unit(3, 1) == Vec((0.0, 1.0, 0.0))
    c = centroid([Vec((0.0, 0.0)), Vec((2.0, 0.0)), Vec((2.0, 2.0)), Vec((0.0, 2.0))])
    assert c == Vec((1.0, 1.0))
    with pytest.raises(ValueError):
        centroid([])


def test_unique_points_removes_near_duplicates():
    pts = [(0.0, 0.0), (1e-10, -1e-10), (1.0, 1.0), (1.0, 1.0 + 1e-12), (0.0, 1.0)]
    res = unique_points(pts)
    assert len(res) == 3
    assert [p.to_floats() for p in res] == [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0)]


def test_unique_points_independent_of_order():
    rnd = random.Random(1)
    pts = [(rnd.random(), rnd.random(), rnd.random()) for _ in range(30)]
    shuffled = list(pts)
    rnd.shuffle(shuffled)
    assert unique_points(pts) == unique_points(shuffled)


def test_lex_min_with_tolerance():
    pts = [Vec((1e-10, 5.0)), Vec((0.0, 1.0)), Vec((2.0, 0.0))]
    assert lex_min(pts, DEFAULT) == Vec((0.0, 1.0))


def test_mpmath_backend_arithmetic():
    num = MpmathBackend(dps=30)
    ctx = Context(eps=1e-20, num=num)
    v = ctx.vec([3.0, 4.0])
    assert ctx.eq(v.norm(ctx), num.from_float(5.0))
    assert abs(num.to_float(num.pi) - 3.141592653589793) < 1e-15
    assert num.to_float(num.acos(num.from_float(1.0))) == 0.0


def test_mpmath_backends_keep_own_precision():
    import mpmath

    before = mpmath.mp.dps
    lo = MpmathBackend(dps=15)
    hi = MpmathBackend(dps=50)
    assert (lo.dps, hi.dps) == (15, 50)
    assert mpmath.mp.dps == before

    root_lo = str(lo.sqrt(lo.from_float(2.0)))
    root_hi = str(hi.sqrt(hi.from_float(2.0)))
    assert len(root_lo) < 20
    assert root_hi.startswith("1.41421356237309504880168872420969807856967187537")
