import random

from cgnd.geom import unique_points
from cgnd.hull import GiftWrapping
from cgnd.polytope import ConvexPolytop

if __name__ == "__main__":
    raw = [
        (0,0,0), (1,0,0), (1,1,0), (0,1,0),
        (0,0,1), (1,0,1), (1,1,1), (0,1,1),
        (0.5,0.5,0.5), (0.2,0.8,0.3), (0.8,0.2,0.7)
    ]
    # точки всередині граней куба не повинні стати вершинами
    rnd = random.Random(7)
    for axis in range(3):
        for side in (0.0, 1.0):
            for _ in range(20):
                p = [rnd.random(), rnd.random(), rnd.random()]
                p[axis] = side
                raw.append(tuple(p))

    pts = unique_points(raw)
    hull = GiftWrapping(pts)

    report = hull.validate()
    print("VALIDATION:", report)
    print("f-vector:", hull.lattice.f_vector())

    with open("hull.off", "w", encoding="utf-8") as f:
        f.write(ConvexPolytop.from_lattice(hull.lattice).to_off())
    print("Wrote hull.off — можна глянути в MeshLab/ParaView.")
