import sys
import logging
from .config_loader import load_cfg
from .engine.simulator import Simulator


def main(cfg_path="config.json", level=logging.INFO):
    # 入口里，第一行就配置日志（只配一次）
    logging.basicConfig(
        level=level,  # 想看逐面区统计就用 DEBUG
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cfg = load_cfg(cfg_path)
    sim = Simulator(cfg)
    sim.run()
    logging.info("main() 运行完成，输出目录：%s", cfg["run"]["output_dir"])


def cli():
    cfg_path = sys.argv[1] if len(sys.argv) > 1 else "config.json"
    main(cfg_path)


if __name__ == "__main__":
    cli()
