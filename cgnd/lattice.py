from __future__ import annotations
import logging
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

from .basis import AffineBasis
from .geom import Vec, centroid
from .hyperplane import HyperPlane
from .numeric import DEFAULT, Context

logger = logging.getLogger(__name__)


@dataclass
class Face:
    """
    k-грань решітки.
    verts: індекси вершин у FaceLattice.vertices.
    sub / super: id граней на розмірність нижче / вище.
    inner: точка з відносної внутрішності (лише для орієнтаційної арифметики).
    hyperplane: опорна гіперплощина (тільки для фасет повновимірної решітки).
    """
    dim: int
    verts: FrozenSet[int]
    sub: Set[int] = field(default_factory=set)
    super: Set[int] = field(default_factory=set)
    inner: Optional[Vec] = None
    hyperplane: Optional[HyperPlane] = None


@dataclass
class Cell:
    """Грань у вигляді, в якому її повертає рекурсивна побудова оболонки (ключі — індекси точок рою)."""
    dim: int
    verts: FrozenSet[int]
    subs: FrozenSet[FrozenSet[int]] = frozenset()


class FaceLattice:
    """
    Решітка граней: арена Face з цілими id, рівні levels[k] та вершина top.
    Будується через add_face/link, після чого викликається finalize().
    """

    def __init__(self, vertices: Iterable[Vec], ctx: Context = DEFAULT):
        self.vertices: List[Vec] = list(vertices)
        if not self.vertices:
            raise ValueError("FaceLattice: no vertices")
        self.ctx = ctx
        self.faces: List[Face] = []
        self.levels: List[List[int]] = []
        self.top: Optional[int] = None
        self._by_verts: Dict[FrozenSet[int], int] = {}
        self._affine: Dict[int, AffineBasis] = {}
        self._below: Dict[int, FrozenSet[int]] = {}

    # ---------------- Побудова ----------------
    def add_face(self, dim: int, verts: Iterable[int], inner: Optional[Vec] = None,
                 hyperplane: Optional[HyperPlane] = None) -> int:
        """Додати грань; якщо грань з такими вершинами вже є — повернути її id."""
        key = frozenset(verts)
        fid = self._by_verts.get(key)
        if fid is not None:
            return fid
        fid = len(self.faces)
        self.faces.append(Face(dim, key, inner=inner, hyperplane=hyperplane))
        self._by_verts[key] = fid
        while len(self.levels) <= dim:
            self.levels.append([])
        self.levels[dim].append(fid)
        return fid

    def link(self, sup: int, sub: int) -> None:
        self.faces[sup].sub.add(sub)
        self.faces[sub].super.add(sup)

    def finalize(self) -> "FaceLattice":
        """Знайти top, заповнити внутрішні точки та гіперплощини фасет."""
        if not self.levels or len(self.levels[-1]) != 1:
            raise ValueError("FaceLattice: the top level must hold exactly one face")
        self.top = self.levels[-1][0]
        self._affine.clear()
        self._below.clear()
        for face in self.faces:
            if face.inner is None:
                face.inner = centroid(self.vertices[v] for v in face.verts)
        if self.dim == self.space_dim and self.dim >= 1:
            top_inner = self.faces[self.top].inner
            for fid in self.levels[self.dim - 1]:
                face = self.faces[fid]
                if face.hyperplane is None:
                    face.hyperplane = HyperPlane.from_basis(self.affine(fid), self.ctx, orient_by=top_inner)
        return self

    @classmethod
    def point(cls, p: Vec, ctx: Context = DEFAULT) -> "FaceLattice":
        fl = cls([p], ctx)
        fl.add_face(0, [0], inner=p)
        return fl.finalize()

    @classmethod
    def from_cells(cls, points: List[Vec], cells: Mapping[FrozenSet[int], Cell], ctx: Context = DEFAULT) -> "FaceLattice":
        """
        Зібрати решітку з клітин рекурсивної побудови.
        points — рій (індекси клітин посилаються на нього); у решітку потрапляють лише вершини,
        впорядковані за індексом рою (тобто лексикографічно).
        """
        vert_ids = sorted(next(iter(c.verts)) for c in cells.values() if c.dim == 0)
        remap = {old: new for new, old in enumerate(vert_ids)}
        fl = cls([points[i] for i in vert_ids], ctx)
        by_dim = sorted(cells.values(), key=lambda c: (c.dim, sorted(c.verts)))
        ids: Dict[FrozenSet[int], int] = {}
        for c in by_dim:
            ids[c.verts] = fl.add_face(c.dim, (remap[v] for v in c.verts))
        for c in by_dim:
            for s in c.subs:
                fl.link(ids[c.verts], ids[s])
        return fl.finalize()

    # ---------------- Властивості ----------------
    @property
    def dim(self) -> int:
        return len(self.levels) - 1

    @property
    def space_dim(self) -> int:
        return len(self.vertices[0])

    def vertex_points(self) -> List[Vec]:
        return list(self.vertices)

    def f_vector(self) -> Tuple[int, ...]:
        return tuple(len(level) for level in self.levels)

    def facets(self) -> List[int]:
        return list(self.levels[self.dim - 1]) if self.dim >= 1 else []

    def hyperplanes(self) -> List[HyperPlane]:
        if self.dim != self.space_dim:
            raise ValueError(
                f"Half-space description needs a full-dimensional polytope (dim={self.dim}, space_dim={self.space_dim})"
            )
        return [self.faces[f].hyperplane for f in self.facets()]

    def points_of(self, fid: int) -> List[Vec]:
        return [self.vertices[v] for v in sorted(self.faces[fid].verts)]

    def inner(self, fid: int) -> Vec:
        return self.faces[fid].inner

    def affine(self, fid: int) -> AffineBasis:
        """Афінна оболонка грані (кешується)."""
        ab = self._affine.get(fid)
        if ab is None:
            ab = AffineBasis.from_points(self.points_of(fid), self.ctx)
            self._affine[fid] = ab
        return ab

    def below(self, fid: int) -> FrozenSet[int]:
        """Усі нестрогі підграні fid."""
        res = self._below.get(fid)
        if res is None:
            acc = {fid}
            stack = [fid]
            while stack:
                for s in self.faces[stack.pop()].sub:
                    if s not in acc:
                        acc.add(s)
                        stack.append(s)
            res = frozenset(acc)
            self._below[fid] = res
        return res

    def super_within(self, fid: int, bound: int) -> Set[int]:
        """Надграні fid (на розмірність вище), що лежать у bound."""
        return self.faces[fid].super & self.below(bound)

    # ---------------- Перетворення / порівняння ----------------
    def transform(self, func: Callable[[Vec], Vec]) -> "FaceLattice":
        """Відобразити кожну вершину, комбінаторику зберегти (func має бути афінною і невиродженою)."""
        fl = FaceLattice([func(v) for v in self.vertices], self.ctx)
        for face in self.faces:
            fl.add_face(face.dim, face.verts)
        for fid, face in enumerate(self.faces):
            for s in face.sub:
                fl.link(fid, s)
        return fl.finalize()

    def _level_keys(self, perm: Optional[Dict[int, int]] = None):
        def key(fid):
            vs = self.faces[fid].verts
            return frozenset(perm[v] for v in vs) if perm is not None else vs

        levels = [frozenset(key(f) for f in level) for level in self.levels]
        pairs = frozenset((key(fid), key(s)) for fid, face in enumerate(self.faces) for s in face.sub)
        return levels, pairs

    def isomorphic(self, other: "FaceLattice", ctx: Optional[Context] = None) -> bool:
        """
        Структурна рівність: вершини збігаються з точністю eps (бієкція),
        і ця бієкція переводить рівні та відношення sub один в одного.
        """
        ctx = ctx or self.ctx
        if self.f_vector() != other.f_vector():
            return False
        perm: Dict[int, int] = {}
        taken: Set[int] = set()
        for i, p in enumerate(self.vertices):
            match = None
            for j, q in enumerate(other.vertices):
                if j not in taken and ctx.same_point(p, q):
                    match = j
                    break
            if match is None:
                return False
            perm[i] = match
            taken.add(match)
        return self._level_keys(perm) == other._level_keys()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FaceLattice):
            return NotImplemented
        return self.isomorphic(other)

    __hash__ = None  # type: ignore[assignment]

    def validate(self) -> Dict[str, Any]:
        """
        Перевірка коректності решітки. Повертає словник із діагностикою (порожні списки = все ок):
          - bad_union: грані (dim >= 1), чия множина вершин != об'єднанню вершин підграней;
          - bad_count: k-грані з менш ніж k+1 вершинами;
          - bad_affine: грані, афінна розмірність яких не дорівнює dim;
          - bad_links: (грань, підгрань) з несиметричним sub/super або стрибком рівня.
        """
        bad_union: List[int] = []
        bad_count: List[int] = []
        bad_affine: List[int] = []
        bad_links: List[Tuple[int, int]] = []
        for fid, face in enumerate(self.faces):
            if face.dim >= 1:
                u: Set[int] = set()
                for s in face.sub:
                    u |= self.faces[s].verts
                if u != face.verts:
                    bad_union.append(fid)
            if len(face.verts) < face.dim + 1:
                bad_count.append(fid)
            if self.affine(fid).sub_dim != face.dim:
                bad_affine.append(fid)
            for s in face.sub:
                if fid not in self.faces[s].super or self.faces[s].dim != face.dim - 1:
                    bad_links.append((fid, s))
            for s in face.super:
                if fid not in self.faces[s].sub:
                    bad_links.append((s, fid))
        return {
            "f_vector": self.f_vector(),
            "bad_union": bad_union,
            "bad_count": bad_count,
            "bad_affine": bad_affine,
            "bad_links": bad_links,
        }

    # ---------------- Серіалізація ----------------
    def to_dict(self) -> Dict[str, Any]:
        num = self.ctx.num
        return {
            "dim": self.dim,
            "space_dim": self.space_dim,
            "vertices": [[num.to_float(c) for c in v] for v in self.vertices],
            "faces": [
                {"dim": f.dim, "verts": sorted(f.verts), "sub": sorted(f.sub)}
                for f in self.faces
            ],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], ctx: Context = DEFAULT) -> "FaceLattice":
        fl = cls((ctx.vec(v) for v in data["vertices"]), ctx)
        for f in data["faces"]:
            fl.add_face(int(f["dim"]), f["verts"])
        for fid, f in enumerate(data["faces"]):
            for s in f["sub"]:
                fl.link(fid, int(s))
        return fl.finalize()

    def __repr__(self) -> str:
        return f"FaceLattice(dim={self.dim}, space_dim={self.space_dim}, f_vector={self.f_vector()})"


def sorted_vertex_order(points: List[Vec], ctx: Context = DEFAULT) -> List[int]:
    """Індекси points у толерантному лексикографічному порядку."""
    return sorted(range(len(points)), key=cmp_to_key(lambda i, j: ctx.cmp_points(points[i], points[j])))
