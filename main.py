# -*- coding: utf-8 -*-
"""
MPR 浏览器入口。
配置日志，创建 ViewModel 与主窗口；命令行给出目录时直接加载该 DICOM 序列。
"""

import argparse
import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from config import ViewerConfig
from viewmodels import MainViewModel
from views import MainWindow


def setup_logging(level: str = "INFO") -> None:
    """日志输出到 stdout。"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="DICOM MPR 浏览器")
    parser.add_argument("directory", nargs="?", help="启动时加载的 DICOM 序列目录")
    args = parser.parse_args(argv)

    config = ViewerConfig()
    setup_logging(config.log_level)

    app = QApplication(sys.argv[:1])
    view_model = MainViewModel(config)
    window = MainWindow(view_model)
    window.show()
    if args.directory:
        view_model.load_dicom_directory(Path(args.directory))
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
