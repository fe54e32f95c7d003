from __future__ import annotations
from typing import List, Optional, Sequence

from .geom import Vec
from .numeric import DEFAULT, Context


def _eliminate(a: List[list], n: int, cols: int, ctx: Context):
    """
    Прямий хід Гауса з частковим вибором опорного елемента (на місці).
    Повертає (знак перестановки, True якщо матриця вироджена з точністю eps).
    """
    sign = 1
    for i in range(n):
        # півод
        piv = i
        maxv = abs(a[i][i])
        for r in range(i + 1, n):
            v = abs(a[r][i])
            if v > maxv:
                maxv = v
                piv = r
        if ctx.eq(maxv):
            return sign, True
        if piv != i:
            a[i], a[piv] = a[piv], a[i]
            sign = -sign
        inv = 1 / a[i][i]
        # елімінація
        for r in range(i + 1, n):
            factor = a[r][i] * inv
            if factor != 0:
                for c in range(i, cols):
                    a[r][c] -= factor * a[i][c]
    return sign, False


def det(m: Sequence[Sequence], ctx: Context = DEFAULT):
    """Детермінант через Гауса (для будь-якого числового типу)."""
    n = len(m)
    a = [list(row) for row in m]
    sign, singular = _eliminate(a, n, n, ctx)
    if singular:
        return 0 * a[0][0]
    res = a[0][0] * sign
    for i in range(1, n):
        res *= a[i][i]
    return res


def solve(m: Sequence[Sequence], b: Sequence, ctx: Context = DEFAULT) -> Optional[Vec]:
    """
    Розв'язати квадратну систему m·x = b.
    None — якщо система вироджена (з точністю eps).
    """
    n = len(m)
    a = [list(row) + [bi] for row, bi in zip(m, b)]
    _, singular = _eliminate(a, n, n + 1, ctx)
    if singular:
        return None
    x = [0 * a[0][0]] * n
    # зворотний хід
    for i in range(n - 1, -1, -1):
        s = a[i][n]
        for j in range(i + 1, n):
            s -= a[i][j] * x[j]
        x[i] = s / a[i][i]
    return Vec(tuple(x))


def orient(simplex: Sequence[Vec], p: Vec, ctx: Context = DEFAULT):
    """
    d-вимірний аналог orient3d: детермінант векторів (s_i - s_0) та (p - s_0).
    simplex — d точок у d-просторі.
    """
    s0 = simplex[0]
    rows = [list(s - s0) for s in simplex[1:]]
    rows.append(list(p - s0))
    return det(rows, ctx)


def cos_angle(u: Vec, v: Vec, ctx: Context = DEFAULT):
    nu = u.norm(ctx)
    nv = v.norm(ctx)
    if ctx.eq(nu) or ctx.eq(nv):
        raise ValueError("cos_angle: zero vector")
    return u.dot(v) / (nu * nv)
