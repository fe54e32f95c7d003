# examples/main.py
from __future__ import annotations
import logging

from cgnd.minkowski import minkowski_difference, minkowski_sum
from cgnd.polytope import ConvexPolytop


def shrink_loop(target: ConvexPolytop, control: ConvexPolytop, noise: ConvexPolytop, steps: int):
    """
    Спрощений крок зворотного часу: W <- (W ⊕ (-control)) ⊖ noise.
    None від різниці означає «множина виродилась» — зупиняємось.
    """
    w = target
    for step in range(1, steps + 1):
        grown = minkowski_sum(w, control, hrep_only=True)
        shrunk = minkowski_difference(grown, noise)
        if shrunk is None:
            print(f"Крок {step}: множина виродилась, зупинка.")
            return w, step - 1
        w = shrunk
        print(f"Крок {step}: вершин {len(w.vrep):3d}, f-vector {w.f_vector}")
    return w, steps


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # --- 1) Вхідні множини ---
    target = ConvexPolytop.ball_oo([0.0, 0.0, 0.0], 2.0)
    control = ConvexPolytop.ball_1([0.0, 0.0, 0.0], 0.1)
    noise = ConvexPolytop.ball_oo([0.0, 0.0, 0.0], 0.35)

    # --- 2) Сума і різниця по черзі ---
    w, done = shrink_loop(target, control, noise, steps=10)
    print(f"Виконано кроків:  {done}")

    # --- 3) result.off: останній многогранник ---
    with open("result.off", "w", encoding="utf-8") as f:
        f.write(w.to_off())
    print("result.off записано.")


if __name__ == "__main__":
    main()
