from __future__ import annotations
import logging
from collections import deque
from itertools import combinations
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from .basis import AffineBasis, LinearBasis
from .errors import DegenerateInputError, UnboundedRegionError
from .geom import Vec, centroid, unique_points
from .hyperplane import HyperPlane
from .lattice import FaceLattice, sorted_vertex_order
from .numeric import DEFAULT, Context
from .predicates import solve

logger = logging.getLogger(__name__)


def _prepare(hps: Sequence[HyperPlane], ctx: Context) -> List[HyperPlane]:
    if not hps:
        raise ValueError("Empty system of half-spaces")
    return [h.normalized(ctx) for h in hps]


def _active(hps: Sequence[HyperPlane], p: Vec, ctx: Context) -> FrozenSet[int]:
    return frozenset(k for k, h in enumerate(hps) if h.contains(p, ctx))


def _feasible(hps: Sequence[HyperPlane], p: Vec, ctx: Context) -> bool:
    return all(h.contains_non_positive(p, ctx) for h in hps)


def find_initial_vertex(hps: Sequence[HyperPlane], ctx: Context = DEFAULT) -> Optional[Tuple[Vec, FrozenSet[int]]]:
    """
    Наївний пошук першої вершини: перебір d-наборів гіперплощин у порядку combinations,
    перший розв'язок, що задовольняє всі нерівності, виграє.
    Повертає (точка, індекси гіперплощин через неї) або None.
    """
    hps = _prepare(hps, ctx)
    d = hps[0].dim
    for combo in combinations(range(len(hps)), d):
        x = solve([list(hps[k].normal) for k in combo], [hps[k].offset for k in combo], ctx)
        if x is not None and _feasible(hps, x, ctx):
            return x, _active(hps, x, ctx)
    return None


def _walk(hps: List[HyperPlane], ctx: Context) -> Tuple[List[Vec], List[FrozenSet[int]], Set[FrozenSet[int]]]:
    """
    BFS по 1-скелету: з кожної вершини — по одному променю на кожен (d-1)-набір
    лінійно незалежних активних гіперплощин.
    Повертає (вершини, активні множини, ребра як пари індексів вершин).
    """
    d = hps[0].dim
    start = find_initial_vertex(hps, ctx)
    if start is None:
        return [], [], set()
    verts: List[Vec] = [start[0]]
    active: List[FrozenSet[int]] = [start[1]]
    edges: Set[FrozenSet[int]] = set()
    queue = deque([0])
    while queue:
        i = queue.popleft()
        x, act = verts[i], sorted(active[i])
        for combo in combinations(act, d - 1):
            lin = LinearBasis(d, (hps[k].normal for k in combo), ctx)
            if lin.sub_dim < d - 1:
                continue
            direction = _outward_safe(lin.orthonormal_vector(), [hps[k] for k in act], ctx)
            if direction is None:
                continue
            y = _march(hps, x, direction, ctx)
            j = next((k for k, v in enumerate(verts) if ctx.same_point(v, y)), None)
            if j is None:
                j = len(verts)
                verts.append(y)
                active.append(_active(hps, y, ctx))
                queue.append(j)
            if j != i:
                edges.add(frozenset((i, j)))
    logger.debug("half-space walk: %d half-spaces, %d vertices, %d edges", len(hps), len(verts), len(edges))
    return verts, active, edges


def _outward_safe(direction: Vec, through: Sequence[HyperPlane], ctx: Context) -> Optional[Vec]:
    """
    Знак напрямку визначає перший ненульовий добуток з нормалями активних гіперплощин;
    решта ненульових добутків мають бути від'ємними, інакше промінь виходить за многогранник.
    """
    sign = None
    for h in through:
        dot = h.normal.dot(direction)
        if ctx.eq(dot):
            continue
        if sign is None:
            sign = -1 if dot > 0 else 1
            continue
        if ctx.gt(dot * sign):
            return None
    if sign is None:
        return None
    return direction if sign > 0 else -direction


def _march(hps: Sequence[HyperPlane], x: Vec, direction: Vec, ctx: Context) -> Vec:
    """Рух з x уздовж direction до найближчої гіперплощини (мінімальне додатне t)."""
    best_t = None
    for h in hps:
        denom = h.normal.dot(direction)
        if not ctx.gt(denom):
            continue
        t = (h.offset - h.normal.dot(x)) / denom
        if not ctx.gt(t):
            continue
        if best_t is None or t < best_t:
            best_t = t
    if best_t is None:
        raise UnboundedRegionError(
            "Half-space system is unbounded: no hyperplane ahead along an edge ray", dim=x.dim, count=len(hps)
        )
    # гіперплощини з t у межах eps від best_t містять нову вершину
    return x + direction * best_t


def vertices_from_half_spaces(hps: Sequence[HyperPlane], ctx: Context = DEFAULT, method: str = "geometric") -> List[Vec]:
    """
    Вершини многогранника {x : n·x <= c}.
    method="geometric" — обхід ребер від першої вершини; "naive" — перебір усіх d-наборів.
    Порожній список — система несумісна.
    """
    hps = _prepare(hps, ctx)
    if method == "geometric":
        verts, _, _ = _walk(hps, ctx)
        return unique_points(verts, ctx)
    if method == "naive":
        d = hps[0].dim
        found = []
        for combo in combinations(range(len(hps)), d):
            x = solve([list(hps[k].normal) for k in combo], [hps[k].offset for k in combo], ctx)
            if x is not None and _feasible(hps, x, ctx):
                found.append(x)
        return unique_points(found, ctx)
    raise ValueError(f"Unknown vertex enumeration method: {method!r}")


def from_half_spaces(hps: Sequence[HyperPlane], ctx: Context = DEFAULT, dim: Optional[int] = None) -> FaceLattice:
    """
    Решітка граней напряму з H-представлення.

    1) вершини й ребра — обхід _walk;
    2) (i+1)-грані для i = 1..d-2: у кожній гіперплощині беремо пари i-граней,
       що в ній лежать; середина їхніх внутрішніх точок визначає найменшу грань,
       яка її містить (вершини на всіх гіперплощинах через середину);
       приймаємо, якщо її афінна розмірність рівно i+1;
    3) sub/super — за включенням множин вершин.
    """
    hps = _prepare(hps, ctx)
    d = hps[0].dim
    if dim is not None and dim != d:
        raise ValueError(f"Only full-dimensional polytopes are supported (dim={dim}, space_dim={d})")
    verts, active, edges = _walk(hps, ctx)
    if not verts:
        raise UnboundedRegionError("No feasible vertex: the half-spaces do not bound a polytope", dim=d, count=len(hps))
    if len(verts) == 1:
        return FaceLattice.point(verts[0], ctx)
    if AffineBasis.from_points(verts, ctx).sub_dim < d:
        raise DegenerateInputError("Half-spaces define a polytope that is not full-dimensional", dim=d, count=len(verts))

    # вершини у лексикографічному порядку
    order = sorted_vertex_order(verts, ctx)
    remap = {old: new for new, old in enumerate(order)}
    points = [verts[i] for i in order]
    act = [active[i] for i in order]

    levels: List[List[FrozenSet[int]]] = [[frozenset([v]) for v in range(len(points))]]
    if d >= 2:
        levels.append(sorted((frozenset(remap[v] for v in e) for e in edges), key=sorted))
    inner: Dict[FrozenSet[int], Vec] = {}

    def inner_of(key: FrozenSet[int]) -> Vec:
        p = inner.get(key)
        if p is None:
            p = centroid(points[v] for v in key)
            inner[key] = p
        return p

    facet_hp: Dict[FrozenSet[int], HyperPlane] = {}
    for i in range(1, d - 1):
        found: List[FrozenSet[int]] = []
        seen: Set[FrozenSet[int]] = set()
        for k, h in enumerate(hps):
            in_h = [f for f in levels[i] if all(k in act[v] for v in f)]
            for a, b in combinations(in_h, 2):
                m = (inner_of(a) + inner_of(b)) / 2
                through = _active(hps, m, ctx)
                face = frozenset(v for v in range(len(points)) if through <= act[v])
                if face in seen:
                    continue
                seen.add(face)
                if AffineBasis.from_points([points[v] for v in sorted(face)], ctx).sub_dim != i + 1:
                    continue
                found.append(face)
                if i + 1 == d - 1:
                    facet_hp[face] = hps[min(through)]
        levels.append(found)
    if d == 2:
        for e in levels[1]:
            facet_hp[e] = next(hps[k] for k in sorted(act[min(e)] & act[max(e)]))
    elif d == 1:
        for v in range(len(points)):
            facet_hp[frozenset([v])] = hps[min(act[v])]

    fl = FaceLattice(points, ctx)
    for i, level in enumerate(levels):
        for key in level:
            fl.add_face(i, key, hyperplane=facet_hp.get(key))
    top = fl.add_face(d, range(len(points)))
    for i in range(1, len(levels)):
        for sup in levels[i]:
            sid = fl.add_face(i, sup)
            for sub in levels[i - 1]:
                if sub < sup:
                    fl.link(sid, fl.add_face(i - 1, sub))
    for key in levels[-1]:
        fl.link(top, fl.add_face(len(levels) - 1, key))
    fl.finalize()
    logger.debug("half-spaces -> lattice: f-vector %s", fl.f_vector())
    return fl


def hrep_redundancy(hps: Sequence[HyperPlane], ctx: Context = DEFAULT) -> List[HyperPlane]:
    """Прибрати гіперплощини, що не визначають фасет (і дублікати)."""
    hps = _prepare(hps, ctx)
    d = hps[0].dim
    verts, active, _ = _walk(hps, ctx)
    if not verts:
        raise UnboundedRegionError("No feasible vertex: the half-spaces do not bound a polytope", dim=d, count=len(hps))
    kept: List[HyperPlane] = []
    for k, h in enumerate(hps):
        on = [v for v, a in zip(verts, active) if k in a]
        if not on or AffineBasis.from_points(on, ctx).sub_dim != d - 1:
            continue
        if any(h.same_as(g, ctx) for g in kept):
            continue
        kept.append(h)
    return kept
