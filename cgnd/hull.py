from __future__ import annotations
import logging
from collections import deque
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .basis import AffineBasis
from .errors import AmbiguousTieError, DegenerateInputError
from .geom import PlanePoint, Vec, lex_min, unique_points, unit
from .lattice import Cell, FaceLattice
from .numeric import DEFAULT, Context

logger = logging.getLogger(__name__)

Key = FrozenSet[int]            # грань = множина індексів точок рою
Cells = Dict[Key, Cell]         # підрешітка, яку повертає рекурсія


@dataclass
class _Facet:
    """
    Фасета поточного рівня рекурсії.
    normal: зовнішня одинична нормаль у локальних координатах рівня.
    cells: уся підрешітка фасети (разом із нею самою).
    """
    key: Key
    normal: Vec
    cells: Cells

    def ridges(self) -> List[Key]:
        return sorted(self.cells[self.key].subs, key=sorted)


# ---------------- Базові випадки ----------------
def _simplex_cells(ids: Iterable[int]) -> Cells:
    """Решітка симплекса: кожна непорожня підмножина вершин — грань."""
    ids = sorted(ids)
    cells: Cells = {}
    for k in range(1, len(ids) + 1):
        for combo in combinations(ids, k):
            key = frozenset(combo)
            subs = frozenset(frozenset(c) for c in combinations(combo, k - 1)) if k > 1 else frozenset()
            cells[key] = Cell(k - 1, key, subs)
    return cells


def _polygon_cells(ring: Sequence[int]) -> Cells:
    cells: Cells = {frozenset([i]): Cell(0, frozenset([i])) for i in ring}
    edges = []
    for k, i in enumerate(ring):
        j = ring[(k + 1) % len(ring)]
        key = frozenset((i, j))
        cells[key] = Cell(1, key, frozenset({frozenset([i]), frozenset([j])}))
        edges.append(key)
    top = frozenset(ring)
    cells[top] = Cell(2, top, frozenset(edges))
    return cells


def _cross(o: Vec, a: Vec, b: Vec):
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def planar_hull(pts: Sequence[PlanePoint], ctx: Context = DEFAULT) -> List[int]:
    """
    Монотонний ланцюг Ендрю на локальних 2D координатах.
    Повертає індекси точок рою проти годинникової стрілки; колінеарні й дублікати (eps) відкинуто.
    """
    order = sorted(pts, key=lambda p: p.coords.c)

    def chain(seq):
        out: List[PlanePoint] = []
        for p in seq:
            while len(out) >= 2 and ctx.le(_cross(out[-2].coords, out[-1].coords, p.coords)):
                out.pop()
            out.append(p)
        return out

    lower = chain(order)
    upper = chain(reversed(order))
    ring = [p.origin for p in lower[:-1] + upper[:-1]]
    if len(ring) < 3:
        raise DegenerateInputError("2D hull has fewer than 3 distinct non-collinear points", dim=2, count=len(pts))
    return ring


def _cells_below(cells: Cells, key: Key) -> Cells:
    out: Cells = {}
    stack = [key]
    while stack:
        k = stack.pop()
        if k in out:
            continue
        c = cells[k]
        out[k] = c
        stack.extend(c.subs)
    return out


# ---------------- Загортання ----------------
class _Wrapper:
    """
    Один рівень рекурсії gift wrapping у локальних d-вимірних координатах.
    active: точки, що ще можуть стати вершинами (невершини з уже побудованих фасет прибираються).
    incidence: ребро (d-2)-грань -> фасети, що через нього суміжні (не більше двох).
    """

    def __init__(self, pts: List[PlanePoint], ctx: Context):
        self.ctx = ctx
        self.pts = pts
        self.d = pts[0].dim
        self.by_id: Dict[int, PlanePoint] = {p.origin: p for p in pts}
        self.active: List[PlanePoint] = list(pts)
        self.facets: Dict[Key, _Facet] = {}
        self.incidence: Dict[Key, List[Key]] = {}

    # ---------------- Публічний API ----------------
    def run(self, init: Optional[Cells] = None) -> Cells:
        d = self.d
        if d == 1:
            lo = min(self.pts, key=lambda p: p.coords[0])
            hi = max(self.pts, key=lambda p: p.coords[0])
            if self.ctx.eq(lo.coords[0], hi.coords[0]):
                raise DegenerateInputError("All points coincide on the line", dim=1, count=len(self.pts))
            return _simplex_cells([lo.origin, hi.origin])
        if len(self.pts) == d + 1:
            basis = AffineBasis.from_points([p.coords for p in self.pts], self.ctx)
            if basis.sub_dim < d:
                raise DegenerateInputError("Simplex points are affinely dependent", dim=d, count=d + 1)
            return _simplex_cells(p.origin for p in self.pts)
        if d == 2:
            return _polygon_cells(planar_hull(self.pts, self.ctx))
        return self._wrap(init)

    # ---------------- Внутрішні методи ----------------
    def _wrap(self, init: Optional[Cells]) -> Cells:
        if init is None:
            flat, normal = self._initial_plane()
            first = self._build_face(flat, normal=normal)
        else:
            first = self._facet_from_cells(init)
        self.facets[first.key] = first
        for r in first.ridges():
            self.incidence[r] = [first.key]

        queue = deque([first])
        while queue:
            face = queue.popleft()
            for ridge in face.ridges():
                if len(self.incidence[ridge]) == 2:
                    continue
                nxt = self._roll_over(face, ridge)
                known = self.facets.get(nxt.key)
                if known is None:
                    self.facets[nxt.key] = nxt
                else:
                    # та сама фасета знайдена вдруге: лише зв'язок суміжності
                    nxt = known
                has_free = False
                for r in nxt.ridges():
                    owners = self.incidence.get(r)
                    if owners is None:
                        self.incidence[r] = [nxt.key]
                        has_free = True
                    elif nxt.key not in owners and len(owners) < 2:
                        owners.append(nxt.key)
                if known is None and has_free:
                    queue.append(nxt)

        cells: Cells = {}
        for f in self.facets.values():
            cells.update(f.cells)
        top = frozenset().union(*self.facets.keys())
        cells[top] = Cell(self.d, top, frozenset(self.facets.keys()))
        logger.debug("wrap dim=%d: %d points, %d facets, %d vertices", self.d, len(self.pts), len(self.facets), len(top))
        return cells

    def _orient(self, n: Vec, origin: Vec) -> Vec:
        """Нормаль назовні: перша точка не з площини визначає знак."""
        for p in self.active:
            dot = (p.coords - origin).dot(n)
            if self.ctx.lt(dot):
                break
            if self.ctx.gt(dot):
                n = -n
                break
        return n

    def _outer_normal(self, basis: AffineBasis) -> Vec:
        return self._orient(basis.linear.orthonormal_vector(), basis.origin)

    def _initial_plane(self) -> Tuple[AffineBasis, Vec]:
        """
        Початкова опорна гіперплощина (процедура Сварта).
        Стартуємо з лексикографічно мінімальної точки та n = -e1; на кожному кроці
        e ⊥ (площина ∪ n), серед проекцій точок на площину (e, n) беремо ту,
        що дає найменший косинус з e (перша серед рівних), і повертаємо n у площині (e, n).
        """
        ctx, d = self.ctx, self.d
        origin = lex_min(self.active, ctx, key=lambda p: p.coords).coords
        flat = AffineBasis(origin, ctx=ctx)
        n = -unit(d, 0, ctx)
        while flat.sub_dim < d - 1:
            lin = flat.linear.copy()
            lin.add_vector(n)
            e = lin.orthonormal_vector()
            best: Optional[PlanePoint] = None
            best_cos = best_u = None
            for p in self.active:
                w = p.coords - origin
                u = Vec((w.dot(e), w.dot(n)))
                if u.is_zero(ctx):
                    continue
                c = u[0] / u.norm(ctx)
                if best is None or c < best_cos:
                    best, best_cos, best_u = p, c, u
            if best is None or not flat.add_point(best.coords):
                raise DegenerateInputError(
                    "Initial plane: the swarm does not span the space", dim=d, count=len(self.active)
                )
            r = best_u.normalize(ctx)
            n = (e * r[1] - n * r[0]).normalize(ctx)
            n = self._orient(n, origin)
        return flat, n

    def _build_face(self, basis: AffineBasis, ridge: Optional[Cells] = None,
                    normal: Optional[Vec] = None) -> _Facet:
        """
        Фасета в площині basis: усі точки площини беруться разом.
        d точок — симплекс; інакше проектуємо у (d-1)-вимірні координати площини
        і загортаємо рекурсивно, стартуючи з ребра ridge.
        """
        d = self.d
        in_plane = [p for p in self.active if basis.contains(p.coords)]
        if len(in_plane) < d:
            raise DegenerateInputError("Facet plane holds fewer than d points", dim=d, count=len(in_plane))
        if len(in_plane) == d:
            cells = _simplex_cells(p.origin for p in in_plane)
            key = frozenset(p.origin for p in in_plane)
        else:
            sub_pts = [p.project_to(basis) for p in in_plane]
            cells = _Wrapper(sub_pts, self.ctx).run(ridge)
            key = max(cells.values(), key=lambda c: c.dim).verts
            drop = {p.origin for p in in_plane} - key
            if drop:
                self.active = [p for p in self.active if p.origin not in drop]
        if normal is None:
            normal = self._outer_normal(basis)
        return _Facet(key, normal, cells)

    def _facet_from_cells(self, cells: Cells) -> _Facet:
        """Фасета, задана готовою підрешіткою (ребро, через яке перекотився рівень вище)."""
        top = max(cells.values(), key=lambda c: c.dim)
        basis = AffineBasis.from_points([self.by_id[i].coords for i in sorted(top.verts)], self.ctx)
        if basis.sub_dim != self.d - 1:
            raise DegenerateInputError("Initial facet is not a hyperplane section", dim=self.d, count=len(top.verts))
        return _Facet(top.verts, self._outer_normal(basis), dict(cells))

    def _roll_over(self, face: _Facet, ridge: Key) -> _Facet:
        """
        Перекат з фасети face через ребро ridge.
        v — одиничний вектор у площині face, ортогональний ребру і спрямований всередину face;
        кожна точка поза ребром проектується на площину (v, N); сусідня фасета визначається
        точкою з найменшим косинусом між v та проекцією.
        """
        ctx = self.ctx
        edge = AffineBasis.from_points([self.by_id[i].coords for i in sorted(ridge)], ctx)
        origin = edge.origin
        f = next(self.by_id[i].coords for i in sorted(face.key) if i not in ridge)
        v = edge.linear.residual(f - origin).normalize(ctx)
        N = face.normal

        best: Optional[PlanePoint] = None
        best_cos = None
        cand: List[Tuple[object, PlanePoint]] = []
        for p in self.active:
            if p.origin in ridge or edge.contains(p.coords):
                continue
            w = p.coords - origin
            u = Vec((w.dot(v), w.dot(N)))
            if u.is_zero(ctx):
                continue
            c = u[0] / u.norm(ctx)
            cand.append((c, p))
            if best is None or c < best_cos:
                best, best_cos = p, c
        if best is None:
            raise DegenerateInputError("Roll over: no point outside the ridge", dim=self.d, count=len(self.active))

        basis = edge.copy()
        basis.add_point(best.coords)
        self._check_ties(cand, best_cos, best, basis)
        return self._build_face(basis, _cells_below(face.cells, ridge))

    def _check_ties(self, cand, best_cos, best: PlanePoint, basis: AffineBasis) -> None:
        near = [p for c, p in cand if p is not best and self.ctx.eq(c, best_cos) and not basis.contains(p.coords)]
        if not near:
            return
        if self.ctx.strict:
            raise AmbiguousTieError(
                "Roll over: several candidates within eps of the winning cosine do not share a hyperplane",
                candidates=[best.lift()] + [p.lift() for p in near],
                dim=self.d,
            )
        logger.warning(
            "dim=%d: near-tie of %d candidates resolved by enumeration order (point #%d wins)",
            self.d, len(near) + 1, best.origin,
        )


class GiftWrapping:
    """
    Опукла оболонка рою точок у d-просторі (загортання подарунка з рекурсивним пониженням розмірності).

    Вхід: будь-які ітеровані координати; дублікати (eps) прибираються, точки
    впорядковуються лексикографічно — тож результат не залежить від порядку вводу.
    full_dim=True вимагає d+1 афінно незалежних точок; full_dim=False спершу
    проектує рій у його власну афінну оболонку (одна точка — 0-вимірна решітка).

    Вихід: self.lattice — FaceLattice з зовнішніми гіперплощинами фасет.
    """

    def __init__(self, points: Iterable[Sequence], ctx: Context = DEFAULT, full_dim: bool = True):
        self.ctx = ctx
        self.swarm: List[Vec] = unique_points(points, ctx)
        if not self.swarm:
            raise DegenerateInputError("Empty swarm", count=0)
        d = self.swarm[0].dim
        if any(p.dim != d for p in self.swarm):
            raise ValueError("Points of different dimensions in one swarm")

        aff = AffineBasis.from_points(self.swarm, ctx)
        pts = [PlanePoint(p, i) for i, p in enumerate(self.swarm)]
        if aff.sub_dim < d:
            if full_dim:
                raise DegenerateInputError(
                    f"Need at least d+1 affinely independent points, the swarm spans a {aff.sub_dim}-flat",
                    dim=d, count=len(self.swarm),
                )
            if aff.sub_dim == 0:
                self.lattice = FaceLattice.point(self.swarm[0], ctx)
                return
            pts = [p.project_to(aff) for p in pts]

        cells = _Wrapper(pts, ctx).run()
        self.lattice = FaceLattice.from_cells(self.swarm, cells, ctx)
        logger.debug("hull of %d points in %d-space: f-vector %s", len(self.swarm), d, self.lattice.f_vector())

    # ---------------- Публічний API ----------------
    @property
    def vertices(self) -> List[Vec]:
        return self.lattice.vertex_points()

    def validate(self) -> dict:
        """
        Діагностика оболонки поверх FaceLattice.validate():
          - outside_points: точки рою строго зовні якоїсь фасети (порожньо = все ок).
        """
        report = self.lattice.validate()
        outside = []
        if self.lattice.dim == self.lattice.space_dim:
            for i, p in enumerate(self.swarm):
                if any(h.contains_positive(p, self.ctx) for h in self.lattice.hyperplanes()):
                    outside.append(i)
        report["outside_points"] = outside
        return report


def build_hull(points: Iterable[Sequence], ctx: Context = DEFAULT) -> FaceLattice:
    """Решітка граней опуклої оболонки (потрібні d+1 афінно незалежні точки)."""
    return GiftWrapping(points, ctx).lattice
