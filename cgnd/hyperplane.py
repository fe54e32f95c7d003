from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional

from .basis import AffineBasis
from .geom import Vec
from .numeric import DEFAULT, Context


@dataclass(frozen=True)
class HyperPlane:
    """
    Гіперплощина normal·x = offset; півпростір «всередині» — normal·x <= offset.
    normal вважається одиничним (див. normalized / from_normal).
    """
    normal: Vec
    offset: Any

    @classmethod
    def from_normal(cls, normal: Vec, offset, ctx: Context = DEFAULT) -> "HyperPlane":
        n = normal.norm(ctx)
        if ctx.eq(n):
            raise ValueError("HyperPlane: zero normal")
        return cls(normal / n, offset / n)

    @classmethod
    def through_point(cls, normal: Vec, point: Vec, ctx: Context = DEFAULT) -> "HyperPlane":
        return cls.from_normal(normal, normal.dot(point), ctx)

    @classmethod
    def from_basis(cls, basis: AffineBasis, ctx: Context = DEFAULT, orient_by: Optional[Vec] = None) -> "HyperPlane":
        """Гіперплощина через (d-1)-вимірний афінний базис; orient_by — точка, що має бути на «мінус»-стороні."""
        if basis.sub_dim != basis.space_dim - 1:
            raise ValueError(
                f"HyperPlane.from_basis: basis of dim {basis.sub_dim} in {basis.space_dim}-space is not a hyperplane"
            )
        n = basis.linear.orthonormal_vector()
        hp = cls(n, n.dot(basis.origin))
        if orient_by is not None:
            hp = hp.orient(orient_by, ctx)
        return hp

    @property
    def dim(self) -> int:
        return self.normal.dim

    def normalized(self, ctx: Context = DEFAULT) -> "HyperPlane":
        return HyperPlane.from_normal(self.normal, self.offset, ctx)

    def value(self, p: Vec):
        return self.normal.dot(p) - self.offset

    def contains(self, p: Vec, ctx: Context = DEFAULT) -> bool:
        return ctx.eq(self.value(p))

    def contains_positive(self, p: Vec, ctx: Context = DEFAULT) -> bool:
        return ctx.gt(self.value(p))

    def contains_negative(self, p: Vec, ctx: Context = DEFAULT) -> bool:
        return ctx.lt(self.value(p))

    def contains_non_positive(self, p: Vec, ctx: Context = DEFAULT) -> bool:
        return ctx.le(self.value(p))

    def contains_non_negative(self, p: Vec, ctx: Context = DEFAULT) -> bool:
        return ctx.ge(self.value(p))

    def flipped(self) -> "HyperPlane":
        return HyperPlane(-self.normal, -self.offset)

    def orient(self, point: Vec, ctx: Context = DEFAULT, inside: bool = True) -> "HyperPlane":
        """
        Орієнтувати нормаль так, щоб point лежала на від'ємній стороні (inside=True)
        або на додатній (inside=False). Точка на самій площині — помилка.
        """
        v = self.value(point)
        if ctx.eq(v):
            raise ValueError("HyperPlane.orient: the point lies in the hyperplane")
        if (v > 0) == inside:
            return self.flipped()
        return self

    def shifted(self, delta) -> "HyperPlane":
        """Та сама нормаль, offset + delta."""
        return HyperPlane(self.normal, self.offset + delta)

    def same_as(self, other: "HyperPlane", ctx: Context = DEFAULT) -> bool:
        return ctx.same_point(self.normal, other.normal) and ctx.eq(self.offset, other.offset)

    def to_floats(self, ctx: Context = DEFAULT):
        return self.normal.to_floats(ctx), ctx.num.to_float(self.offset)

    def __repr__(self) -> str:
        return f"HyperPlane(normal={self.normal!r}, offset={float(self.offset):.6g})"
