from __future__ import annotations
from typing import Optional, Sequence


class GeometryError(ValueError):
    """Базова помилка побудови. Успадкована від ValueError, як і раніше кидав hull."""

    def __init__(self, message: str, dim: Optional[int] = None, count: Optional[int] = None):
        details = []
        if dim is not None:
            details.append(f"dim={dim}")
        if count is not None:
            details.append(f"points={count}")
        full = message if not details else f"{message} ({', '.join(details)})"
        super().__init__(full)
        self.dim = dim
        self.count = count


class DegenerateInputError(GeometryError):
    """Менше ніж d+1 афінно незалежних точок, або 2D під-оболонка з < 3 вершинами."""


class UnboundedRegionError(GeometryError):
    """Система півпросторів не має скінченної вершини на якомусь промені."""


class AmbiguousTieError(GeometryError):
    """strict-режим: кілька кандидатів у межах eps від переможця, що не лежать в одній площині."""

    def __init__(self, message: str, candidates: Sequence = (), dim: Optional[int] = None):
        super().__init__(message, dim=dim, count=len(candidates) if candidates else None)
        self.candidates = list(candidates)
