# examples/demo_pipeline.py
from cgnd.pipeline import hull_vertices, scipy_facets
from cgnd.hull import GiftWrapping

if __name__ == "__main__":
    cube = [
        (0,0,0), (1,0,0), (1,1,0), (0,1,0),
        (0,0,1), (1,0,1), (1,1,1), (0,1,1),
        (0.5,0.5,0.5), (0.2,0.8,0.3), (0.8,0.2,0.7)
    ]

    ours = hull_vertices(cube, backend="internal")
    qhull = hull_vertices(cube, backend="scipy")
    print("Vertices (internal):", len(ours))
    print("Vertices (scipy):   ", len(qhull))
    print("Same vertices:", ours == qhull)

    facets = scipy_facets(cube)
    print("Facets (scipy):   ", len(facets))
    print("Facets (internal):", len(GiftWrapping(cube).lattice.facets()))
