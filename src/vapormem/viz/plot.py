from pathlib import Path
import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import argparse


# 查找最新快照
def find_latest_snapshot(out_dir: Path) -> Path:
    snaps = sorted(out_dir.glob("iter_*.npz"))
    if not snaps:
        raise FileNotFoundError(f"没有找到快照：{out_dir}")
    return snaps[-1]


# 绘制膜面通量沿程分布
def plot_profile(
    npz_path: Path,
    face_zone: str = "membrane",
    out_png: Path | None = None,
) -> Path:
    z = np.load(npz_path)
    keys = list(z.files)
    key = f"profile_{face_zone}"
    if key not in keys:
        raise KeyError(f"'{key}' 不在快照里，包含的键有：{sorted(keys)}")
    J = z[key]
    it = int(z["it"]) if "it" in keys else -1
    nx = int(z["nx"]) if "nx" in keys else J.shape[0]
    dx = float(z["dx"]) if "dx" in keys else 1.0

    # 只画膜面主段，附加的外边界面不参与
    J = J[:nx]
    x = (np.arange(J.shape[0]) + 0.5) * dx

    fig, ax = plt.subplots()
    ax.plot(x, J, marker=".")
    ax.set_xlabel("x [m]")
    ax.set_ylabel("J [kg/(m^2·s)]")
    ax.set_title(f"{face_zone} | it={it}" if it >= 0 else face_zone)
    out_png = out_png or (
        npz_path.with_suffix("").with_name(npz_path.stem + f"_{face_zone}.png")
    )
    fig.savefig(out_png, dpi=160, bbox_inches="tight")
    plt.close(fig)
    return out_png


def main():
    ap = argparse.ArgumentParser(description="Plot membrane flux from latest snapshot.")
    ap.add_argument("out_dir", type=Path, help="输出目录，例如 data/output/run-minimal")
    ap.add_argument("--face-zone", default="membrane")
    args = ap.parse_args()

    snap = find_latest_snapshot(args.out_dir)
    png = plot_profile(snap, face_zone=args.face_zone)
    print("已保存：", png)


if __name__ == "__main__":
    main()
