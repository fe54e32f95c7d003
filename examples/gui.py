# examples/gui.py
from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox

import random

from cgnd.hull import GiftWrapping
from cgnd.minkowski import minkowski_sum
from cgnd.polytope import ConvexPolytop

import matplotlib
matplotlib.use("TkAgg")
from matplotlib.figure import Figure
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401  # потрібен для 'projection="3d"'


def generate_random_points(n: int):
    """
    Генерує n випадкових точок в одиничному кубі [0,1]^3 + вершини куба,
    щоб оболонка була нормальною (опуклий куб).
    """
    pts = [
        (0, 0, 0),
        (1, 0, 0),
        (1, 1, 0),
        (0, 1, 0),
        (0, 0, 1),
        (1, 0, 1),
        (1, 1, 1),
        (0, 1, 1),
    ]
    for _ in range(n):
        pts.append((random.random(), random.random(), random.random()))
    return pts


def parse_points_from_text(text: str):
    """
    Парсить точки з багаторядкового тексту.
    Кожен рядок: x y z або x, y, z.
    Повертає список (x,y,z) як float.
    """
    points = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue  # пропускаємо пусті строки і коментарі
        parts = line.replace(",", " ").split()
        if len(parts) != 3:
            raise ValueError(f"Рядок {lineno}: очікується 3 числа, отримано: {len(parts)}")
        try:
            x, y, z = map(float, parts)
        except ValueError:
            raise ValueError(f"Рядок {lineno}: не вдалось прочитати числа '{line}'")
        points.append((x, y, z))
    if len(points) < 4:
        raise ValueError("Потрібно щонайменше 4 точки для 3D оболонки.")
    return points


class PolytopeApp(tk.Tk):
    def __init__(self):
        super().__init__()
        self.title("cgnd: оболонка і сума Мінковського")
        self.geometry("800x700")

        self.fig = None
        self.ax = None
        self.canvas = None

        self._build_widgets()

    def _build_widgets(self):
        main = ttk.Frame(self, padding=10)
        main.pack(fill="both", expand=True)

        # --- Режим вводу ---
        mode_frame = ttk.LabelFrame(main, text="Режим вводу точок")
        mode_frame.pack(fill="x", pady=5)

        self.input_mode = tk.StringVar(value="random")
        ttk.Radiobutton(
            mode_frame, text="Випадкові точки всередині куба",
            variable=self.input_mode, value="random", command=self._update_mode_state,
        ).grid(row=0, column=0, sticky="w", padx=5, pady=2)
        ttk.Radiobutton(
            mode_frame, text="Ручне введення точок",
            variable=self.input_mode, value="manual", command=self._update_mode_state,
        ).grid(row=0, column=1, sticky="w", padx=5, pady=2)

        # --- Параметри ---
        input_frame = ttk.LabelFrame(main, text="Параметри")
        input_frame.pack(fill="x", pady=5)

        ttk.Label(input_frame, text="Кількість випадкових внутрішніх точок:").grid(
            row=0, column=0, sticky="w", padx=5, pady=5
        )
        self.n_entry = ttk.Entry(input_frame, width=10)
        self.n_entry.insert(0, "20")
        self.n_entry.grid(row=0, column=1, sticky="w", padx=5, pady=5)

        self.add_ball = tk.BooleanVar(value=False)
        ttk.Checkbutton(
            input_frame, text="Додати (⊕) l1-кулю радіуса:", variable=self.add_ball,
        ).grid(row=1, column=0, sticky="w", padx=5, pady=5)
        self.r_entry = ttk.Entry(input_frame, width=10)
        self.r_entry.insert(0, "0.25")
        self.r_entry.grid(row=1, column=1, sticky="w", padx=5, pady=5)

        # --- Поле для ручного вводу ---
        manual_frame = ttk.LabelFrame(main, text="Ручне введення точок (одна точка - один рядок)")
        manual_frame.pack(fill="both", expand=True, pady=5)

        self.points_text = tk.Text(manual_frame, height=6, wrap="none")
        self.points_text.pack(fill="both", expand=True, padx=5, pady=5)
        self.points_text.insert(
            "1.0",
            "# Приклад:\n"
            "# 0 0 0\n"
            "# 1 0 0\n"
            "# 0 1 0\n"
            "# 0 0 1\n"
        )

        run_btn = ttk.Button(main, text="Побудувати", command=self.run_pipeline)
        run_btn.pack(fill="x", pady=10)

        # --- Результати ---
        result_frame = ttk.LabelFrame(main, text="Результати")
        result_frame.pack(fill="x", pady=5)

        self.vertices_var = tk.StringVar(value="—")
        self.fvec_var = tk.StringVar(value="—")
        self.valid_var = tk.StringVar(value="—")

        ttk.Label(result_frame, text="Вершини:").grid(row=0, column=0, sticky="w", padx=5, pady=2)
        ttk.Label(result_frame, textvariable=self.vertices_var).grid(row=0, column=1, sticky="w", padx=5, pady=2)

        ttk.Label(result_frame, text="f-вектор:").grid(row=1, column=0, sticky="w", padx=5, pady=2)
        ttk.Label(result_frame, textvariable=self.fvec_var).grid(row=1, column=1, sticky="w", padx=5, pady=2)

        ttk.Label(result_frame, text="Валідація:").grid(row=2, column=0, sticky="w", padx=5, pady=2)
        ttk.Label(result_frame, textvariable=self.valid_var).grid(row=2, column=1, sticky="w", padx=5, pady=2)

        ttk.Label(
            main,
            text="Файл polytope.off буде записано в поточну директорію.",
            foreground="gray",
            justify="center",
        ).pack(fill="x", pady=5)

        # --- Фрейм для 3D-графіка ---
        plot_frame = ttk.LabelFrame(main, text="3D візуалізація")
        plot_frame.pack(fill="both", expand=True, pady=5)

        self.fig = Figure(figsize=(4, 3))
        self.ax = self.fig.add_subplot(111, projection="3d")
        self.canvas = FigureCanvasTkAgg(self.fig, master=plot_frame)
        self.canvas.draw()
        self.canvas.get_tk_widget().pack(fill="both", expand=True)

        self._update_mode_state()

    def _update_mode_state(self):
        if self.input_mode.get() == "random":
            self.n_entry.configure(state="normal")
        else:  # manual
            self.n_entry.configure(state="disabled")

    def update_plot(self, poly: ConvexPolytop):
        """Перемалювати ребра многогранника (1-грані решітки)."""
        self.ax.clear()
        fl = poly.lattice
        pts = [v.to_floats(poly.ctx) for v in fl.vertices]

        for fid in fl.levels[1]:
            a, b = sorted(fl.faces[fid].verts)
            pa, pb = pts[a], pts[b]
            self.ax.plot([pa[0], pb[0]], [pa[1], pb[1]], [pa[2], pb[2]], linewidth=0.8)

        # однакові масштаби
        lo = [min(p[i] for p in pts) for i in range(3)]
        hi = [max(p[i] for p in pts) for i in range(3)]
        max_range = max(h - l for l, h in zip(lo, hi)) or 1.0
        mid = [0.5 * (l + h) for l, h in zip(lo, hi)]
        self.ax.set_xlim(mid[0] - max_range / 2, mid[0] + max_range / 2)
        self.ax.set_ylim(mid[1] - max_range / 2, mid[1] + max_range / 2)
        self.ax.set_zlim(mid[2] - max_range / 2, mid[2] + max_range / 2)

        self.ax.set_xlabel("X")
        self.ax.set_ylabel("Y")
        self.ax.set_zlabel("Z")
        self.ax.set_title("Polytope (edges)")
        self.canvas.draw()

    def run_pipeline(self):
        # --- Вибір джерела точок ---
        if self.input_mode.get() == "random":
            try:
                n = int(self.n_entry.get())
                if n < 0:
                    raise ValueError
            except ValueError:
                messagebox.showerror("Помилка", "Кількість точок має бути невід’ємним цілим числом.")
                return
            points = generate_random_points(n)
        else:  # manual
            raw_text = self.points_text.get("1.0", "end").strip()
            try:
                points = parse_points_from_text(raw_text)
            except ValueError as e:
                messagebox.showerror("Помилка парсингу точок", str(e))
                return

        try:
            # 1) Опукла оболонка
            hull = GiftWrapping(points)
            poly = ConvexPolytop.from_lattice(hull.lattice)

            # 2) Сума Мінковського з l1-кулею
            if self.add_ball.get():
                r = float(self.r_entry.get())
                poly = minkowski_sum(poly, ConvexPolytop.ball_1([0.0, 0.0, 0.0], r))

            # 3) Валідація та експорт
            report = poly.lattice.validate()
            with open("polytope.off", "w", encoding="utf-8") as f:
                f.write(poly.to_off())

            self.update_plot(poly)

        except ValueError as e:
            messagebox.showerror("Помилка виконання", str(e))
            return

        self.vertices_var.set(str(len(poly.vrep)))
        self.fvec_var.set(str(poly.f_vector))
        if report["bad_union"] or report["bad_count"] or report["bad_affine"] or report["bad_links"]:
            self.valid_var.set("Є проблеми (див. консоль)")
        else:
            self.valid_var.set("OK")

        print("VALIDATION:", report)
        messagebox.showinfo("Готово", "Многогранник побудовано.\nЗаписано файл polytope.off")


if __name__ == "__main__":
    app = PolytopeApp()
    app.mainloop()
