"""
`ipa-shipit` 的命令行入口模块。

负责收集构建目标选择器与上传/归档开关，并交给 `ipa_shipit.pipeline.Ship` 执行。
"""

import argparse
from collections.abc import Sequence
from importlib.metadata import PackageNotFoundError, version

from .pipeline import Ship
from .types import Selector


def _package_version() -> str:
    """读取已安装分发包的版本号；源码目录直接运行时返回占位值。"""
    try:
        return version("ipa-shipit")
    except PackageNotFoundError:
        return "0.0.0+unknown"


def build_parser() -> argparse.ArgumentParser:
    """构建并返回 `ipa-shipit` 命令行参数解析器。"""
    p = argparse.ArgumentParser(
        prog="ipa-shipit",
        formatter_class=argparse.RawTextHelpFormatter,
        description=(
            "Run the iOS release checklist: confirm bundle id / version, bump the build\n"
            "number, build the .ipa, and optionally upload it and keep its .xcarchive."
        ),
    )

    # workspace/project 不交给 argparse 做互斥与必填校验，便于输出更可操作的提示。
    p.add_argument("-w", "--workspace", default="", help="Workspace path (.xcworkspace may be omitted)")
    p.add_argument("-p", "--project", default="", help="Project path (.xcodeproj may be omitted)")
    p.add_argument("-s", "--scheme", default="", help="Shared scheme to build")
    p.add_argument(
        "-c",
        "--configuration",
        default="",
        help="Build configuration (default: Release)",
    )
    p.add_argument(
        "--upload",
        action="store_true",
        help="Upload the built .ipa to iTunes Connect",
    )
    p.add_argument(
        "--archive",
        action="store_true",
        help="Copy the fresh .xcarchive into the current directory",
    )
    p.add_argument("--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")
    return p


def main(argv: Sequence[str] | None = None) -> int:
    """CLI 入口：解析参数并按顺序执行整个发布流程。"""
    parser = build_parser()
    ns = parser.parse_args(argv)

    selector = Selector(
        workspace=(ns.workspace or "").strip(),
        project=(ns.project or "").strip(),
        scheme=(ns.scheme or "").strip(),
        configuration=(ns.configuration or "").strip(),
    )
    Ship(
        selector,
        upload=bool(ns.upload),
        archive=bool(ns.archive),
        verbose=bool(ns.verbose),
    ).it()
    return 0
