# tests/test_acceptance_basic.py
from pathlib import Path
import subprocess, sys, json, os

ROOT = Path(__file__).resolve().parents[1]
CONFIG = ROOT / "config.json"


def run_cmd(args, cwd):
    # 确保能找到 src/vapormem
    env = os.environ.copy()
    env["PYTHONPATH"] = str(ROOT / "src")
    return subprocess.run(args, check=True, cwd=cwd, env=env)


def test_main_writes_snapshots(tmp_path):
    assert CONFIG.exists(), "找不到 config.json"
    cfg = json.loads(CONFIG.read_text(encoding="utf-8"))
    cfg["iterate"]["n_iter"] = 5
    cfg["iterate"]["save_every"] = 5
    cfg["run"]["output_dir"] = str(tmp_path / "run")
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text(json.dumps(cfg), encoding="utf-8")

    # 以"包模块"方式运行 main（相对导入才成立）
    run_cmd([sys.executable, "-m", "vapormem.main", str(cfg_path)], cwd=tmp_path)

    out_path = tmp_path / "run"
    assert out_path.exists(), "输出目录未创建"
    snaps = list(out_path.glob("iter_*.npz"))
    assert len(snaps) >= 1, "没有找到快照文件"
    assert (out_path / "profile_membrane.csv").exists()


def test_plot_latest_snapshot(tmp_path):
    from vapormem.config_loader import check_cfg
    from vapormem.engine.simulator import Simulator
    from vapormem.viz.plot import find_latest_snapshot, plot_profile

    cfg = json.loads(CONFIG.read_text(encoding="utf-8"))
    cfg["iterate"]["n_iter"] = 2
    cfg["run"]["output_dir"] = str(tmp_path / "run")
    Simulator(check_cfg(cfg)).run()

    png = plot_profile(find_latest_snapshot(tmp_path / "run"))
    assert png.exists()
