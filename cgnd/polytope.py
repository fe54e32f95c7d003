from __future__ import annotations
import logging
from itertools import product
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .geom import Vec, centroid, unique_points, unit
from .hrep import from_half_spaces, vertices_from_half_spaces
from .hull import GiftWrapping
from .hyperplane import HyperPlane
from .lattice import FaceLattice
from .numeric import DEFAULT, Context

logger = logging.getLogger(__name__)


def _cross3(a: Vec, b: Vec) -> Vec:
    return Vec((a[1] * b[2] - a[2] * b[1],
                a[2] * b[0] - a[0] * b[2],
                a[0] * b[1] - a[1] * b[0]))


class ConvexPolytop:
    """
    Опуклий многогранник: тримає хоча б одне з представлень Vrep / Hrep / FLrep,
    решта обчислюються ліниво й кешуються. Після створення не змінюється.

    Hrep: гіперплощини n·x = c з одиничними нормалями назовні, многогранник — {x : n·x <= c}.
    """

    def __init__(self, vrep: Optional[Iterable[Vec]] = None, hrep: Optional[Iterable[HyperPlane]] = None,
                 lattice: Optional[FaceLattice] = None, ctx: Context = DEFAULT):
        if vrep is None and hrep is None and lattice is None:
            raise ValueError("ConvexPolytop needs at least one representation")
        self.ctx = ctx
        self._vrep: Optional[List[Vec]] = list(vrep) if vrep is not None else None
        self._hrep: Optional[List[HyperPlane]] = [h.normalized(ctx) for h in hrep] if hrep is not None else None
        self._lattice = lattice
        if self._vrep is not None and not self._vrep:
            raise ValueError("ConvexPolytop: empty vertex set")

    # ---------------- Фабрики ----------------
    @classmethod
    def from_points(cls, points: Iterable[Sequence], ctx: Context = DEFAULT, convexify: bool = False) -> "ConvexPolytop":
        """
        convexify=False: точки вважаються вершинами (лише дедуплікація);
        convexify=True: одразу будується оболонка (можливо нижчої розмірності).
        """
        pts = unique_points(points, ctx)
        if convexify:
            return cls(lattice=GiftWrapping(pts, ctx, full_dim=False).lattice, ctx=ctx)
        return cls(vrep=pts, ctx=ctx)

    @classmethod
    def from_half_spaces(cls, hps: Iterable[HyperPlane], ctx: Context = DEFAULT) -> "ConvexPolytop":
        return cls(hrep=list(hps), ctx=ctx)

    @classmethod
    def from_lattice(cls, fl: FaceLattice) -> "ConvexPolytop":
        return cls(lattice=fl, ctx=fl.ctx)

    @classmethod
    def point(cls, p: Sequence, ctx: Context = DEFAULT) -> "ConvexPolytop":
        v = p if isinstance(p, Vec) else ctx.vec(p)
        return cls(lattice=FaceLattice.point(v, ctx), ctx=ctx)

    @classmethod
    def rect(cls, left: Sequence, right: Sequence, ctx: Context = DEFAULT) -> "ConvexPolytop":
        """Паралелепіпед [left, right] зі сторонами вздовж осей (одразу Vrep і Hrep)."""
        lo = left if isinstance(left, Vec) else ctx.vec(left)
        hi = right if isinstance(right, Vec) else ctx.vec(right)
        d = lo.dim
        if any(not ctx.gt(b, a) for a, b in zip(lo, hi)):
            raise ValueError("rect: every right coordinate must exceed the left one")
        verts = [Vec(tuple(c)) for c in product(*zip(lo, hi))]
        hps = []
        for i in range(d):
            e = unit(d, i, ctx)
            hps.append(HyperPlane(e, hi[i]))
            hps.append(HyperPlane(-e, -lo[i]))
        return cls(vrep=unique_points(verts, ctx), hrep=hps, ctx=ctx)

    @classmethod
    def cube01(cls, dim: int, ctx: Context = DEFAULT) -> "ConvexPolytop":
        return cls.rect([0.0] * dim, [1.0] * dim, ctx)

    @classmethod
    def ball_oo(cls, center: Sequence, radius, ctx: Context = DEFAULT) -> "ConvexPolytop":
        """Куля в нормі max — куб зі стороною 2r."""
        c = center if isinstance(center, Vec) else ctx.vec(center)
        r = ctx.num.from_float(radius)
        return cls.rect([x - r for x in c], [x + r for x in c], ctx)

    @classmethod
    def ball_1(cls, center: Sequence, radius, ctx: Context = DEFAULT) -> "ConvexPolytop":
        """Куля в нормі l1 — кросполітоп center ± r·e_i."""
        c = center if isinstance(center, Vec) else ctx.vec(center)
        r = ctx.num.from_float(radius)
        verts = []
        for i in range(c.dim):
            e = unit(c.dim, i, ctx)
            verts.append(c + e * r)
            verts.append(c - e * r)
        return cls(vrep=unique_points(verts, ctx), ctx=ctx)

    @classmethod
    def ellipsoid(cls, center: Sequence, semi_axes: Sequence, polar_div: int, azimuth_div: int,
                  ctx: Context = DEFAULT) -> "ConvexPolytop":
        """
        Вписаний у еліпсоїд многогранник: вузли сітки гіперсферичних координат.
        phi (азимут) пробігає [0, 2pi) з кроком 2pi/azimuth_div, кожен з d-2
        полярних кутів — [0, pi] з кроком pi/polar_div; збіжні вузли (полюси)
        склеюються. Усі точки лежать на поверхні, тож усі вони — вершини.
        """
        c = center if isinstance(center, Vec) else ctx.vec(center)
        axes = semi_axes if isinstance(semi_axes, Vec) else ctx.vec(semi_axes)
        d = c.dim
        if axes.dim != d:
            raise ValueError(f"ellipsoid: semi-axes dimension {axes.dim} does not match the center (dim={d})")
        if any(not ctx.gt(a) for a in axes):
            raise ValueError("ellipsoid: every semi-axis must be positive")
        if d == 1:
            return cls(vrep=unique_points([c - axes, c + axes], ctx), ctx=ctx)
        if azimuth_div < 3 or (d >= 3 and polar_div < 2):
            raise ValueError(f"ellipsoid: grid too coarse (polar_div={polar_div}, azimuth_div={azimuth_div})")

        num = ctx.num
        phi_step = 2 * num.pi / azimuth_div
        theta_step = num.pi / polar_div
        thetas = [theta_step * i for i in range(polar_div + 1)]

        pts = []
        for k in range(azimuth_div):
            phi = phi_step * k
            for ts in product(thetas, repeat=d - 2):
                # ts[0]: кут від останньої осі, далі вкладені кути
                sins = num.one
                for t in ts:
                    sins = sins * num.sin(t)
                coords = [axes[0] * num.cos(phi) * sins, axes[1] * num.sin(phi) * sins]
                inner = num.one
                for j in range(1, d - 2):
                    inner = inner * num.sin(ts[j - 1])
                    coords.append(axes[j + 1] * num.cos(ts[j]) * inner)
                if d >= 3:
                    coords.append(axes[d - 1] * num.cos(ts[0]))
                pts.append(c + Vec(tuple(coords)))
        return cls(vrep=unique_points(pts, ctx), ctx=ctx)

    @classmethod
    def ball_2(cls, center: Sequence, radius, polar_div: int, azimuth_div: int,
               ctx: Context = DEFAULT) -> "ConvexPolytop":
        """Евклідова куля радіуса r, наближена вписаним многогранником (див. ellipsoid)."""
        c = center if isinstance(center, Vec) else ctx.vec(center)
        r = ctx.num.from_float(radius)
        return cls.ellipsoid(c, Vec((r,) * c.dim), polar_div, azimuth_div, ctx)

    @classmethod
    def simplex(cls, dim: int, ctx: Context = DEFAULT) -> "ConvexPolytop":
        """Стандартний симплекс: 0 та орти."""
        verts = [Vec((ctx.num.zero,) * dim)] + [unit(dim, i, ctx) for i in range(dim)]
        return cls(vrep=unique_points(verts, ctx), ctx=ctx)

    @classmethod
    def regular_polygon(cls, n: int, radius=1.0, phase=0.0, ctx: Context = DEFAULT) -> "ConvexPolytop":
        if n < 3:
            raise ValueError("regular_polygon: need at least 3 vertices")
        num = ctx.num
        r, ph = num.from_float(radius), num.from_float(phase)
        step = 2 * num.pi / n
        verts = [Vec((r * num.cos(ph + k * step), r * num.sin(ph + k * step))) for k in range(n)]
        return cls(vrep=unique_points(verts, ctx), ctx=ctx)

    @classmethod
    def cyclic(cls, dim: int, n: int, step=1.0, ctx: Context = DEFAULT) -> "ConvexPolytop":
        """
        Циклічний многогранник: початок координат і n-1 точок (t, t^2, ..., t^dim)
        на кривій моментів, t = 1 + step, 1 + 2·step, ...
        """
        if n <= dim:
            raise ValueError(f"cyclic: the amount of points must exceed the dimension (dim={dim}, n={n})")
        s = ctx.num.from_float(step)
        t = ctx.num.one + s
        verts = [Vec((ctx.num.zero,) * dim)]
        for _ in range(1, n):
            coords = []
            c = t
            for _ in range(dim):
                coords.append(c)
                c = c * t
            verts.append(Vec(tuple(coords)))
            t = t + s
        return cls(vrep=unique_points(verts, ctx), ctx=ctx)

    # ---------------- Представлення ----------------
    @property
    def space_dim(self) -> int:
        if self._lattice is not None:
            return self._lattice.space_dim
        if self._vrep is not None:
            return self._vrep[0].dim
        return self._hrep[0].dim

    @property
    def vrep(self) -> List[Vec]:
        if self._vrep is None:
            if self._lattice is not None:
                self._vrep = self._lattice.vertex_points()
            else:
                self._vrep = vertices_from_half_spaces(self._hrep, self.ctx)
        return list(self._vrep)

    @property
    def lattice(self) -> FaceLattice:
        if self._lattice is None:
            if self._vrep is not None:
                self._lattice = GiftWrapping(self._vrep, self.ctx, full_dim=False).lattice
            else:
                self._lattice = from_half_spaces(self._hrep, self.ctx)
        return self._lattice

    @property
    def hrep(self) -> List[HyperPlane]:
        """Гіперплощини фасет; для неповновимірного многогранника — ValueError."""
        if self._hrep is None:
            self._hrep = self.lattice.hyperplanes()
        return list(self._hrep)

    @property
    def dim(self) -> int:
        return self.lattice.dim

    @property
    def f_vector(self):
        return self.lattice.f_vector()

    @property
    def inner_point(self) -> Vec:
        if self._lattice is not None:
            return self._lattice.inner(self._lattice.top)
        return centroid(self.vrep)

    @property
    def rep(self) -> str:
        """Найінформативніше з наявних представлень: FL > V > H."""
        if self._lattice is not None:
            return "FL"
        if self._vrep is not None:
            return "V"
        return "H"

    # ---------------- Запити ----------------
    def contains(self, p: Sequence) -> int:
        """-1 — строго всередині, 0 — на межі, 1 — зовні (для повновимірних многогранників)."""
        v = p if isinstance(p, Vec) else self.ctx.vec(p)
        res = -1
        for h in self.hrep:
            if h.contains_positive(v, self.ctx):
                return 1
            if not h.contains_negative(v, self.ctx):
                res = 0
        return res

    def contains_non_strict(self, p: Sequence) -> bool:
        return self.contains(p) <= 0

    # ---------------- Операції ----------------
    def polar(self) -> "ConvexPolytop":
        """
        Полярний многогранник {y : v·y <= 1 для всіх вершин v}.
        Початок координат має лежати строго всередині (інакше полярне тіло необмежене);
        для довільного многогранника спершу зсунь його, напр. shift(-inner_point).
        """
        origin = Vec((self.ctx.num.zero,) * self.space_dim)
        if self.contains(origin) != -1:
            raise ValueError("polar: the origin must lie strictly inside the polytope")
        one = self.ctx.num.one
        return ConvexPolytop(hrep=[HyperPlane(v, one) for v in self.vrep], ctx=self.ctx)

    def section(self, hp: HyperPlane) -> Optional["ConvexPolytop"]:
        """
        Переріз гіперплощиною hp: вершини P ∩ {hp <= 0}, що лежать на hp.
        None — площина не перетинає многогранник.
        """
        h = hp.normalized(self.ctx)
        below = vertices_from_half_spaces(self.hrep + [h], self.ctx)
        on = [p for p in below if h.contains(p, self.ctx)]
        if not on:
            logger.debug("section: hyperplane %r misses the polytope", h)
            return None
        return ConvexPolytop(vrep=on, ctx=self.ctx)

    # ---------------- Перетворення ----------------
    def _mapped(self, func, hrep: Optional[List[HyperPlane]]) -> "ConvexPolytop":
        lattice = self._lattice.transform(func) if self._lattice is not None else None
        vrep = [func(p) for p in self._vrep] if self._vrep is not None else None
        if lattice is None and vrep is None:
            vrep = [func(p) for p in self.vrep]
        return ConvexPolytop(vrep=vrep, hrep=hrep, lattice=lattice, ctx=self.ctx)

    def shift(self, v: Sequence) -> "ConvexPolytop":
        v = v if isinstance(v, Vec) else self.ctx.vec(v)
        hrep = [h.shifted(h.normal.dot(v)) for h in self._hrep] if self._hrep is not None else None
        return self._mapped(lambda x: x + v, hrep)

    def scale(self, k, origin: Optional[Sequence] = None) -> "ConvexPolytop":
        """Гомотетія з коефіцієнтом k > 0 відносно origin (за замовчуванням — початок координат)."""
        if not self.ctx.gt(k):
            raise ValueError("scale: the factor must be positive")
        o = Vec((self.ctx.num.zero,) * self.space_dim) if origin is None else (
            origin if isinstance(origin, Vec) else self.ctx.vec(origin))
        hrep = None
        if self._hrep is not None:
            hrep = [HyperPlane(h.normal, k * (h.offset - h.normal.dot(o)) + h.normal.dot(o)) for h in self._hrep]
        return self._mapped(lambda x: o + (x - o) * k, hrep)

    def rotate(self, matrix: Sequence[Sequence]) -> "ConvexPolytop":
        """x -> M·x (рядки матриці); Hrep перераховується ліниво."""
        rows = [Vec(tuple(r)) if not isinstance(r, Vec) else r for r in matrix]
        if len(rows) != self.space_dim:
            raise ValueError("rotate: matrix size does not match the space dimension")
        return self._mapped(lambda x: Vec(tuple(r.dot(x) for r in rows)), None)

    # ---------------- Експорт ----------------
    def _facet_cycle(self, fid: int) -> List[int]:
        """Вершини 2-грані по її межі, проти годинникової стрілки навколо зовнішньої нормалі."""
        fl = self.lattice
        face = fl.faces[fid]
        nbrs: Dict[int, List[int]] = {}
        for e in face.sub:
            a, b = sorted(fl.faces[e].verts)
            nbrs.setdefault(a, []).append(b)
            nbrs.setdefault(b, []).append(a)
        start = min(face.verts)
        cycle = [start]
        prev, cur = None, start
        while True:
            nxt = nbrs[cur][0] if nbrs[cur][0] != prev else nbrs[cur][1]
            if nxt == start:
                break
            cycle.append(nxt)
            prev, cur = cur, nxt
        # нормаль Ньюела
        acc = Vec((self.ctx.num.zero,) * 3)
        for i, v in enumerate(cycle):
            acc = acc + _cross3(fl.vertices[v], fl.vertices[cycle[(i + 1) % len(cycle)]])
        if acc.dot(face.hyperplane.normal) < 0:
            cycle = [cycle[0]] + cycle[1:][::-1]
        return cycle

    def to_off(self) -> str:
        """Експорт у формат OFF (лише для 3-вимірних многогранників у 3-просторі)."""
        fl = self.lattice
        if fl.space_dim != 3 or fl.dim != 3:
            raise ValueError(f"OFF export needs a 3-polytope in 3-space (dim={fl.dim}, space_dim={fl.space_dim})")
        num = self.ctx.num
        facets = fl.facets()
        lines = ["OFF", f"{len(fl.vertices)} {len(facets)} 0"]
        for p in fl.vertices:
            lines.append(" ".join(repr(num.to_float(c)) for c in p))
        for fid in facets:
            cycle = self._facet_cycle(fid)
            lines.append(f"{len(cycle)} " + " ".join(str(v) for v in cycle))
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        num = self.ctx.num
        data: Dict[str, Any] = {
            "space_dim": self.space_dim,
            "dim": self.dim,
            "lattice": self.lattice.to_dict(),
        }
        if self.dim == self.space_dim:
            data["hrep"] = [
                {"normal": [num.to_float(c) for c in h.normal], "offset": num.to_float(h.offset)}
                for h in self.hrep
            ]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], ctx: Context = DEFAULT) -> "ConvexPolytop":
        return cls.from_lattice(FaceLattice.from_dict(data["lattice"], ctx))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConvexPolytop):
            return NotImplemented
        return self.lattice == other.lattice

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ConvexPolytop(rep={self.rep}, space_dim={self.space_dim})"

