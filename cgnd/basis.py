from __future__ import annotations
from typing import Iterable, List, Optional, Sequence

from .geom import Vec, unit, zero
from .numeric import DEFAULT, Context


class LinearBasis:
    """
    Ортонормований базис лінійного підпростору в d-просторі (вектори-рядки).
    Грам–Шмідт із повторною ортогоналізацією: другий прохід прибирає похибку першого.
    """

    def __init__(self, space_dim: int, vectors: Iterable[Vec] = (), ctx: Context = DEFAULT):
        self.space_dim = space_dim
        self.ctx = ctx
        self.basis: List[Vec] = []
        for v in vectors:
            self.add_vector(v)

    # ---------------- Публічний API ----------------
    @property
    def sub_dim(self) -> int:
        return len(self.basis)

    @property
    def is_full(self) -> bool:
        return self.sub_dim == self.space_dim

    def copy(self) -> "LinearBasis":
        lb = LinearBasis(self.space_dim, ctx=self.ctx)
        lb.basis = list(self.basis)
        return lb

    def residual(self, v: Vec) -> Vec:
        """Компонента v, ортогональна підпростору."""
        r = v
        for _ in range(2):
            for b in self.basis:
                r = r - b * b.dot(r)
        return r

    def add_vector(self, v: Vec) -> bool:
        """Додати вектор; False, якщо він лінійно залежний з точністю eps."""
        if len(v) != self.space_dim:
            raise ValueError(f"Vector of dim {len(v)} in basis of dim {self.space_dim}")
        if self.is_full:
            return False
        r = self.residual(v)
        n = r.norm(self.ctx)
        if self.ctx.eq(n):
            return False
        self.basis.append(r / n)
        return True

    def contains(self, v: Vec) -> bool:
        return self.residual(v).is_zero(self.ctx)

    def orthonormal_vector(self) -> Vec:
        """
        Одиничний вектор, ортогональний підпростору.
        Детерміновано: нормований залишок того орта, залишок якого найдовший.
        """
        if self.is_full:
            raise ValueError("Full-dimensional basis has no orthogonal complement")
        best = None
        best_norm = None
        for i in range(self.space_dim):
            r = self.residual(unit(self.space_dim, i, self.ctx))
            n = r.norm(self.ctx)
            if best_norm is None or n > best_norm:
                best, best_norm = r, n
        return best / best_norm

    def project(self, v: Vec) -> Vec:
        """Координати v у цьому базисі."""
        return Vec(tuple(b.dot(v) for b in self.basis))

    def project_in_space(self, v: Vec) -> Vec:
        """Ортогональна проекція v на підпростір (у координатах простору)."""
        acc = zero(self.space_dim, self.ctx)
        for b in self.basis:
            acc = acc + b * b.dot(v)
        return acc

    def to_space(self, coords: Sequence) -> Vec:
        acc = zero(self.space_dim, self.ctx)
        for c, b in zip(coords, self.basis):
            acc = acc + b * c
        return acc

    @staticmethod
    def merge(a: "LinearBasis", b: "LinearBasis") -> "LinearBasis":
        lb = a.copy()
        for v in b.basis:
            if lb.is_full:
                break
            lb.add_vector(v)
        return lb

    def __repr__(self) -> str:
        return f"LinearBasis(space_dim={self.space_dim}, sub_dim={self.sub_dim})"


class AffineBasis:
    """Точка-початок + лінійний базис напрямків."""

    def __init__(self, origin: Vec, linear: Optional[LinearBasis] = None, ctx: Context = DEFAULT):
        self.origin = origin
        self.ctx = ctx
        self.linear = linear if linear is not None else LinearBasis(len(origin), ctx=ctx)

    @classmethod
    def from_points(cls, points: Sequence[Vec], ctx: Context = DEFAULT) -> "AffineBasis":
        """Початок — перша точка; решта додаються по черзі (залежні відкидаються)."""
        if not points:
            raise ValueError("AffineBasis.from_points: empty set")
        ab = cls(points[0], ctx=ctx)
        for p in points[1:]:
            if ab.linear.is_full:
                break
            ab.add_point(p)
        return ab

    @property
    def sub_dim(self) -> int:
        return self.linear.sub_dim

    @property
    def space_dim(self) -> int:
        return self.linear.space_dim

    def copy(self) -> "AffineBasis":
        return AffineBasis(self.origin, self.linear.copy(), self.ctx)

    def add_point(self, p: Vec) -> bool:
        return self.linear.add_vector(p - self.origin)

    def add_vector(self, v: Vec) -> bool:
        return self.linear.add_vector(v)

    def contains(self, p: Vec) -> bool:
        return self.linear.contains(p - self.origin)

    def project_point(self, p: Vec) -> Vec:
        """Локальні координати точки (p вважається такою, що лежить у підпросторі)."""
        return self.linear.project(p - self.origin)

    def to_space(self, coords: Sequence) -> Vec:
        return self.origin + self.linear.to_space(coords)

    def __repr__(self) -> str:
        return f"AffineBasis(origin={self.origin!r}, sub_dim={self.sub_dim})"
