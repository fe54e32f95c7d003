from __future__ import annotations
import math
import os
from dataclasses import dataclass
from typing import Any, Iterable, Optional

EPS = 1e-8  # абсолютна точність порівнянь за замовчуванням


class NumBackend:
    """
    Числовий тип, над яким рахує бібліотека.
    Потрібні: арифметика (через оператори самого типу), порівняння,
    корінь, тригонометрія та явне перетворення до/з float.
    """
    name = "abstract"

    def from_float(self, x: float) -> Any:
        raise NotImplementedError

    def to_float(self, x: Any) -> float:
        return float(x)

    def sqrt(self, x: Any) -> Any:
        raise NotImplementedError

    def cos(self, x: Any) -> Any:
        raise NotImplementedError

    def sin(self, x: Any) -> Any:
        raise NotImplementedError

    def acos(self, x: Any) -> Any:
        raise NotImplementedError

    @property
    def zero(self) -> Any:
        return self.from_float(0.0)

    @property
    def one(self) -> Any:
        return self.from_float(1.0)

    @property
    def pi(self) -> Any:
        return self.acos(-self.one)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class FloatBackend(NumBackend):
    name = "float"

    def from_float(self, x):
        return float(x)

    def sqrt(self, x):
        return math.sqrt(x)

    def cos(self, x):
        return math.cos(x)

    def sin(self, x):
        return math.sin(x)

    def acos(self, x):
        # захист від 1.0000000002 після округлень
        return math.acos(max(-1.0, min(1.0, x)))


class MpmathBackend(NumBackend):
    """
    Довільна точність через mpmath.mpf.
    Кожен бекенд має власну копію контексту mpmath (mp.clone()), тож dps
    одного бекенда не змінює точність інших і глобального mpmath.mp.
    """
    name = "mpmath"

    def __init__(self, dps: Optional[int] = None):
        import mpmath
        self._mp = mpmath.mp.clone()
        if dps is not None:
            self._mp.dps = dps

    @property
    def dps(self) -> int:
        return self._mp.dps

    def from_float(self, x):
        return self._mp.mpf(x)

    def to_float(self, x):
        return float(x)

    def sqrt(self, x):
        return self._mp.sqrt(x)

    def cos(self, x):
        return self._mp.cos(x)

    def sin(self, x):
        return self._mp.sin(x)

    def acos(self, x):
        one = self._mp.mpf(1)
        return self._mp.acos(max(-one, min(one, x)))


FLOAT = FloatBackend()


@dataclass(frozen=True)
class Context:
    """
    Точність + числовий тип, що явно передаються в кожен виклик.
    strict=True: неоднозначні «майже нічиї» у виборі грані/вершини дають AmbiguousTieError.
    """
    eps: float = EPS
    num: NumBackend = FLOAT
    strict: bool = False

    # ---------- скаляри ----------
    def eq(self, a, b=0) -> bool:
        return abs(a - b) < self.eps

    def ne(self, a, b=0) -> bool:
        return not self.eq(a, b)

    def gt(self, a, b=0) -> bool:
        return a - b > self.eps

    def ge(self, a, b=0) -> bool:
        return a - b >= -self.eps

    def lt(self, a, b=0) -> bool:
        return a - b < -self.eps

    def le(self, a, b=0) -> bool:
        return a - b <= self.eps

    def cmp(self, a, b=0) -> int:
        if self.eq(a, b):
            return 0
        return 1 if a > b else -1

    # ---------- точки ----------
    def vec(self, coords: Iterable):
        from .geom import Vec
        return Vec(tuple(self.num.from_float(c) for c in coords))

    def cmp_points(self, a, b) -> int:
        """Лексикографічне порівняння з точністю eps по кожній координаті."""
        for x, y in zip(a, b):
            res = self.cmp(x, y)
            if res != 0:
                return res
        return 0

    def same_point(self, a, b) -> bool:
        return len(a) == len(b) and self.cmp_points(a, b) == 0

    def with_eps(self, eps: float) -> "Context":
        return Context(eps=eps, num=self.num, strict=self.strict)

    @classmethod
    def from_env(cls) -> "Context":
        """
        Конфігурація зі змінних оточення:
          CGND_EPS     — точність (float),
          CGND_STRICT  — "1"/"true" вмикає strict,
          CGND_BACKEND — "float" або "mpmath".
        """
        eps = float(os.environ.get("CGND_EPS", EPS))
        strict = os.environ.get("CGND_STRICT", "").strip().lower() in ("1", "true", "yes")
        backend = os.environ.get("CGND_BACKEND", "float").strip().lower()
        if backend == "float":
            num: NumBackend = FLOAT
        elif backend == "mpmath":
            num = MpmathBackend()
        else:
            raise ValueError(f"Unknown numeric backend: {backend!r}")
        return cls(eps=eps, num=num, strict=strict)


DEFAULT = Context()
