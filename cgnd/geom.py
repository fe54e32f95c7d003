from __future__ import annotations
from dataclasses import dataclass
from functools import cmp_to_key
from typing import TYPE_CHECKING, Iterable, List, Sequence, Tuple

from .numeric import DEFAULT, EPS, Context

if TYPE_CHECKING:
    from .basis import AffineBasis

__all__ = [
    "EPS", "Vec", "PlanePoint", "sub", "dot", "norm", "centroid", "unit", "zero",
    "unique_points", "lex_sorted", "lex_min",
]


@dataclass(frozen=True)
class Vec:
    """
    Незмінний вектор/точка фіксованої розмірності над довільним числовим типом.
    == і hash — точні (як у кортежу); порівняння з точністю робить Context.
    """
    c: Tuple

    def __iter__(self):
        return iter(self.c)

    def __len__(self) -> int:
        return len(self.c)

    def __getitem__(self, i):
        return self.c[i]

    @property
    def dim(self) -> int:
        return len(self.c)

    def __add__(self, other: "Vec") -> "Vec":
        return Vec(tuple(a + b for a, b in zip(self.c, other.c)))

    def __sub__(self, other: "Vec") -> "Vec":
        return Vec(tuple(a - b for a, b in zip(self.c, other.c)))

    def __neg__(self) -> "Vec":
        return Vec(tuple(-a for a in self.c))

    def __mul__(self, k) -> "Vec":
        return Vec(tuple(a * k for a in self.c))

    __rmul__ = __mul__

    def __truediv__(self, k) -> "Vec":
        return Vec(tuple(a / k for a in self.c))

    def dot(self, other: "Vec"):
        return sum((a * b for a, b in zip(self.c, other.c)), 0 * self.c[0])

    def norm(self, ctx: Context = DEFAULT):
        return ctx.num.sqrt(self.dot(self))

    def normalize(self, ctx: Context = DEFAULT) -> "Vec":
        n = self.norm(ctx)
        if n == 0:
            raise ValueError("Cannot normalize a zero vector")
        return self / n

    def is_zero(self, ctx: Context = DEFAULT) -> bool:
        return all(ctx.eq(a) for a in self.c)

    def to_floats(self, ctx: Context = DEFAULT) -> Tuple[float, ...]:
        return tuple(ctx.num.to_float(a) for a in self.c)

    def __repr__(self) -> str:
        return "Vec(" + ", ".join(f"{float(a):.6g}" for a in self.c) + ")"


def sub(a: Vec, b: Vec) -> Vec:
    return a - b


def dot(a: Vec, b: Vec):
    return a.dot(b)


def norm(a: Vec, ctx: Context = DEFAULT):
    return a.norm(ctx)


def unit(dim: int, i: int, ctx: Context = DEFAULT) -> Vec:
    """i-й орт (нумерація з 0)."""
    zero_, one = ctx.num.zero, ctx.num.one
    return Vec(tuple(one if k == i else zero_ for k in range(dim)))


def zero(dim: int, ctx: Context = DEFAULT) -> Vec:
    return Vec((ctx.num.zero,) * dim)


def centroid(points: Iterable[Vec]) -> Vec:
    acc = None
    n = 0
    for p in points:
        acc = p if acc is None else acc + p
        n += 1
    if n == 0:
        raise ValueError("empty set")
    return acc / n


def lex_sorted(points: Iterable[Vec], ctx: Context = DEFAULT) -> List[Vec]:
    return sorted(points, key=cmp_to_key(ctx.cmp_points))


def lex_min(points: Iterable, ctx: Context = DEFAULT, key=None):
    """Мінімум у лексикографічному порядку з точністю eps (перший серед рівних)."""
    if key is None:
        return min(points, key=cmp_to_key(ctx.cmp_points))
    return min(points, key=cmp_to_key(lambda a, b: ctx.cmp_points(key(a), key(b))))


def unique_points(points: Iterable[Sequence], ctx: Context = DEFAULT) -> List[Vec]:
    """
    Дедуплікація з точністю eps.
    Результат відсортований лексикографічно (точно), тож не залежить від порядку вводу:
    саме цей порядок далі є порядком перебору у gift wrapping.
    """
    vs = [p if isinstance(p, Vec) else ctx.vec(p) for p in points]
    vs.sort(key=lambda v: v.c)
    out: List[Vec] = []
    for p in vs:
        dup = False
        # відсортовано за першою координатою: дивимось назад лише в межах eps
        for q in reversed(out):
            if q[0] < p[0] - ctx.eps:
                break
            if ctx.same_point(p, q):
                dup = True
                break
        if not dup:
            out.append(p)
    return lex_sorted(out, ctx)


@dataclass(frozen=True)
class PlanePoint:
    """
    Точка рою в поточній локальній системі координат.
    origin — індекс вихідної точки рою; history — ланцюжок афінних базисів,
    через які точку спроектовано (від повного простору до поточного).
    """
    coords: Vec
    origin: int
    history: Tuple["AffineBasis", ...] = ()

    @property
    def dim(self) -> int:
        return self.coords.dim

    def project_to(self, basis: "AffineBasis") -> "PlanePoint":
        return PlanePoint(basis.project_point(self.coords), self.origin, self.history + (basis,))

    def lift(self) -> Vec:
        """Повернути координати у вихідний простір, проходячи історію у зворотному порядку."""
        p = self.coords
        for basis in reversed(self.history):
            p = basis.to_space(p)
        return p
