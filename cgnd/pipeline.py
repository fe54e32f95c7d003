from __future__ import annotations
import logging
from typing import Dict, FrozenSet, Iterable, List, Sequence, Tuple

from .geom import Vec, unique_points
from .hull import GiftWrapping
from .numeric import DEFAULT, Context

logger = logging.getLogger(__name__)


def _qhull():
    try:
        import numpy as np
        from scipy.spatial import ConvexHull
    except ImportError as e:
        raise RuntimeError(
            "backend='scipy', але SciPy не встановлено. "
            "Встанови scipy або використай backend='internal'."
        ) from e
    return np, ConvexHull


def _as_array(np, pts: List[Vec], ctx: Context):
    return np.array([p.to_floats(ctx) for p in pts], dtype=float)


def hull_vertices(
    points: Iterable[Sequence],
    backend: str = "internal",
    ctx: Context = DEFAULT,
) -> List[Tuple[float, ...]]:
    """
    Вершини опуклої оболонки рою у float-координатах, лексикографічно.
      - backend="internal": наш GiftWrapping;
      - backend="scipy": Qhull через scipy.spatial.ConvexHull (еталон для перевірок).
    Дублікати точок прибираються в обох випадках однаково (unique_points).
    """
    pts: List[Vec] = unique_points(points, ctx)

    if backend.lower() == "internal":
        return [v.to_floats(ctx) for v in GiftWrapping(pts, ctx).vertices]

    if backend.lower() == "scipy":
        np, ConvexHull = _qhull()
        hull = ConvexHull(_as_array(np, pts, ctx))
        # pts вже відсортовані, тож порядок індексів = лексикографічний
        idx = sorted(set(int(i) for i in hull.vertices))
        logger.debug("qhull: %d points, %d vertices", len(pts), len(idx))
        return [pts[i].to_floats(ctx) for i in idx]

    raise ValueError(f"Невідомий backend: {backend}")


def scipy_facets(
    points: Iterable[Sequence],
    ctx: Context = DEFAULT,
    decimals: int = 6,
) -> List[FrozenSet[int]]:
    """
    Фасети Qhull як множини індексів у unique_points(points).
    Qhull тріангулює фасети, тож симплекси з однаковою (округленою) гіперплощиною
    зливаються в одну фасету.
    """
    pts: List[Vec] = unique_points(points, ctx)
    np, ConvexHull = _qhull()
    hull = ConvexHull(_as_array(np, pts, ctx))

    eqs = hull.equations
    eqs = eqs / np.linalg.norm(eqs[:, :-1], axis=1, keepdims=True)
    groups: Dict[Tuple[float, ...], set] = {}
    for simplex, eq in zip(hull.simplices, eqs):
        key = tuple(float(x) for x in np.round(eq, decimals=decimals))
        groups.setdefault(key, set()).update(int(i) for i in simplex)
    return sorted((frozenset(g) for g in groups.values()), key=sorted)
