from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .basis import AffineBasis, LinearBasis
from .errors import DegenerateInputError
from .geom import Vec, unique_points, unit
from .hrep import vertices_from_half_spaces
from .hyperplane import HyperPlane
from .lattice import FaceLattice, sorted_vertex_order
from .numeric import DEFAULT, Context

if TYPE_CHECKING:
    from .polytope import ConvexPolytop

logger = logging.getLogger(__name__)


@dataclass
class _SumNode:
    """Вузол решітки суми: грань x ⊕ y, x — грань P, y — грань Q."""
    dim: int
    x: int
    y: int
    inner: Vec
    basis: AffineBasis
    sub: Set[int] = field(default_factory=set)
    super: Set[int] = field(default_factory=set)


def sum_points(a: Iterable[Vec], b: Iterable[Vec]) -> List[Vec]:
    """Попарні суми {p + q}."""
    b = list(b)
    return [p + q for p in a for q in b]


def _combined(p: AffineBasis, q: AffineBasis, ctx: Context) -> AffineBasis:
    return AffineBasis(p.origin + q.origin, LinearBasis.merge(p.linear, q.linear), ctx)


def _lattice_of(x) -> FaceLattice:
    return x if isinstance(x, FaceLattice) else x.lattice


def _sum_levels(P: FaceLattice, Q: FaceLattice, hrep_only: bool, ctx: Context):
    """
    Спуск згори вниз (Das & Dev): для кожного вузла z = x ⊕ y рівня k перебираємо
    пари (xi ⊆ x, yj ⊆ y) за спаданням розмірності; пара дає (k-1)-грань z, якщо
    гіперплощина xi ⊕ yj в афінній оболонці z, орієнтована від внутрішньої точки z,
    залишає на від'ємній стороні всі сусідні надграні xi (в парі з yj) та yj (в парі з xi).
    """
    top = _combined(P.affine(P.top), Q.affine(Q.top), ctx)
    dim = top.sub_dim
    nodes: List[_SumNode] = [_SumNode(dim, P.top, Q.top, P.inner(P.top) + Q.inner(Q.top), top)]
    memo: Dict[Tuple[int, int], int] = {(P.top, Q.top): 0}
    levels: List[List[int]] = [[] for _ in range(dim)] + [[0]]

    def by_dim_desc(fl: FaceLattice, fid: int) -> List[int]:
        return sorted(fl.below(fid), key=lambda f: (-fl.faces[f].dim, f))

    for k in range(dim, 0, -1):
        for zid in levels[k]:
            z = nodes[zid]
            zspace = z.basis
            inner_z = zspace.project_point(z.inner)
            X = by_dim_desc(P, z.x)
            Y = by_dim_desc(Q, z.y)
            for xi in X:
                for yj in Y:
                    if P.faces[xi].dim + Q.faces[yj].dim < k - 1:
                        break
                    cand = _combined(P.affine(xi), Q.affine(yj), ctx)
                    if cand.sub_dim != k - 1:
                        continue
                    known = memo.get((xi, yj))
                    if known is not None:
                        z.sub.add(known)
                        nodes[known].super.add(zid)
                        continue

                    # гіперплощина кандидата в локальних координатах z
                    local = AffineBasis(
                        zspace.project_point(cand.origin),
                        LinearBasis(k, (zspace.linear.project(b) for b in cand.linear.basis), ctx),
                        ctx,
                    )
                    if local.sub_dim != k - 1:
                        continue
                    A = HyperPlane.from_basis(local, ctx)
                    if A.contains(inner_z, ctx):
                        continue
                    A = A.orient(inner_z, ctx)

                    ok = all(
                        A.contains_negative(zspace.project_point(P.inner(f) + Q.inner(yj)), ctx)
                        for f in P.super_within(xi, z.x)
                    ) and all(
                        A.contains_negative(zspace.project_point(P.inner(xi) + Q.inner(g)), ctx)
                        for g in Q.super_within(yj, z.y)
                    )
                    if not ok:
                        continue

                    nid = len(nodes)
                    nodes.append(_SumNode(k - 1, xi, yj, P.inner(xi) + Q.inner(yj), cand, super={zid}))
                    memo[(xi, yj)] = nid
                    levels[k - 1].append(nid)
                    z.sub.add(nid)
        logger.debug("minkowski sum: level %d has %d faces", k - 1, len(levels[k - 1]))
        if hrep_only:
            break
    return nodes, levels, dim


def _assemble(nodes: List[_SumNode], levels: List[List[int]], ctx: Context) -> FaceLattice:
    """Вершини — вузли рівня 0; множини вершин решти вузлів — знизу вгору через sub."""
    pts = [nodes[n].inner for n in levels[0]]
    order = sorted_vertex_order(pts, ctx)
    vid = {levels[0][old]: new for new, old in enumerate(order)}
    verts: Dict[int, FrozenSet[int]] = {n: frozenset([vid[n]]) for n in levels[0]}
    for level in levels[1:]:
        for n in level:
            acc: Set[int] = set()
            for s in nodes[n].sub:
                acc |= verts[s]
            verts[n] = frozenset(acc)

    fl = FaceLattice([pts[i] for i in order], ctx)
    fid: Dict[int, int] = {}
    for k, level in enumerate(levels):
        for n in sorted(level, key=lambda n: sorted(verts[n])):
            fid[n] = fl.add_face(k, verts[n], inner=nodes[n].inner if k > 0 else None)
    for level in levels[1:]:
        for n in level:
            for s in nodes[n].sub:
                fl.link(fid[n], fid[s])
    return fl.finalize()


def minkowski_sum(P, Q, hrep_only: bool = False, ctx: Context = DEFAULT) -> "ConvexPolytop":
    """
    Сума Мінковського P ⊕ Q за решітками граней (Das & Dev, 2021).
    P, Q — ConvexPolytop або FaceLattice (можливо різних розмірностей в одному просторі).
    hrep_only=True: зупинитися після рівня фасет і повернути многогранник з H-представленням
    (вимагає повновимірної суми).
    """
    from .polytope import ConvexPolytop

    PL, QL = _lattice_of(P), _lattice_of(Q)
    if PL.space_dim != QL.space_dim:
        raise ValueError(f"Summands live in different spaces ({PL.space_dim} and {QL.space_dim})")
    top = _combined(PL.affine(PL.top), QL.affine(QL.top), ctx)
    if top.sub_dim == 0:
        origin = PL.inner(PL.top) + QL.inner(QL.top)
        if hrep_only:
            n = origin.dim
            hps = []
            for i in range(n):
                e = unit(n, i, ctx)
                hps.append(HyperPlane(e, origin[i]))
                hps.append(HyperPlane(-e, -origin[i]))
            return ConvexPolytop.from_half_spaces(hps, ctx)
        return ConvexPolytop.from_lattice(FaceLattice.point(origin, ctx))
    if hrep_only and top.sub_dim != top.space_dim:
        raise DegenerateInputError(
            "Half-space description of the sum needs a full-dimensional sum", dim=top.sub_dim, count=None
        )

    nodes, levels, dim = _sum_levels(PL, QL, hrep_only, ctx)
    if hrep_only:
        inner = nodes[levels[dim][0]].inner
        hps = [HyperPlane.from_basis(nodes[n].basis, ctx, orient_by=inner) for n in levels[dim - 1]]
        return ConvexPolytop.from_half_spaces(hps, ctx)
    return ConvexPolytop.from_lattice(_assemble(nodes, levels, ctx))


def minkowski_sum_by_hull(P, Q, ctx: Context = DEFAULT) -> "ConvexPolytop":
    """Еталон: опукла оболонка попарних сум вершин."""
    from .polytope import ConvexPolytop

    return ConvexPolytop.from_points(sum_points(P.vrep, Q.vrep), ctx, convexify=True)


def _extreme(points: List[Vec], direction: Vec) -> Vec:
    """Вершина з найбільшим direction·v (перша серед рівних)."""
    best = points[0]
    best_val = direction.dot(best)
    for p in points[1:]:
        val = direction.dot(p)
        if val > best_val:
            best, best_val = p, val
    return best


def minkowski_difference(A, B, ctx: Context = DEFAULT, method: str = "geometric") -> Optional["ConvexPolytop"]:
    """
    Геометрична різниця A ⊖ B = найбільший многогранник C з C ⊕ B ⊆ A.
    Кожна фасета (n, c) многогранника A зсувається на max{n·v : v ∈ B}.
    None — різниця порожня або не повновимірна (очікуваний результат, не помилка).
    """
    from .polytope import ConvexPolytop

    hps = A.hrep
    vb = B.vrep
    shifted = [h.shifted(-h.normal.dot(_extreme(vb, h.normal))) for h in hps]
    verts = vertices_from_half_spaces(shifted, ctx, method=method)
    if not verts:
        logger.debug("minkowski difference is empty")
        return None
    if AffineBasis.from_points(verts, ctx).sub_dim < A.space_dim:
        logger.debug("minkowski difference is not full-dimensional (%d vertices)", len(verts))
        return None
    return ConvexPolytop.from_points(unique_points(verts, ctx), ctx, convexify=True)
