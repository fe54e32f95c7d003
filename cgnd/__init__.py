"""
cgnd — опуклі многогранники в d-вимірному просторі (Py 3.9+).
Зараз: оболонка загортанням подарунка, решітка граней, Hrep <-> решітка,
сума та різниця Мінковського.
"""

__version__ = "0.1.0"

from cgnd.numeric import EPS, Context, DEFAULT, NumBackend, FloatBackend, MpmathBackend
from cgnd.geom import Vec, centroid, unique_points
from cgnd.errors import GeometryError, DegenerateInputError, UnboundedRegionError, AmbiguousTieError
from cgnd.hyperplane import HyperPlane
from cgnd.lattice import Face, FaceLattice
from cgnd.hull import GiftWrapping, build_hull
from cgnd.hrep import from_half_spaces, vertices_from_half_spaces, hrep_redundancy
from cgnd.polytope import ConvexPolytop
from cgnd.minkowski import minkowski_sum, minkowski_sum_by_hull, minkowski_difference

__all__ = [
    "EPS", "Context", "DEFAULT", "NumBackend", "FloatBackend", "MpmathBackend",
    "Vec", "centroid", "unique_points",
    "GeometryError", "DegenerateInputError", "UnboundedRegionError", "AmbiguousTieError",
    "HyperPlane", "Face", "FaceLattice",
    "GiftWrapping", "build_hull",
    "from_half_spaces", "vertices_from_half_spaces", "hrep_redundancy",
    "ConvexPolytop",
    "minkowski_sum", "minkowski_sum_by_hull", "minkowski_difference",
    "__version__",
]
