"""
选项解析：规范化 workspace/project 路径并校验选择器。

除 root 路径是否存在外，这里的检查都不读取任何文件。
"""

from __future__ import annotations

import os
from collections.abc import Sequence

from .types import Selector

WORKSPACE_EXT = ".xcworkspace"
PROJECT_EXT = ".xcodeproj"
DEFAULT_CONFIGURATION = "Release"


def normalize_path(path: str, ext: str) -> str:
    """缺少扩展名时补上；已带扩展名则原样返回。"""
    if not path or path.endswith(ext):
        return path
    return path + ext


def resolve_selector(selector: Selector) -> Selector:
    """校验 workspace/project 互斥、root 路径存在与 scheme，并补默认配置名。"""
    if not selector.workspace and not selector.project:
        raise SystemExit("Error: please provide either a workspace or a project.")
    if selector.workspace and selector.project:
        raise SystemExit("Error: please provide a workspace OR a project, not both.")

    selector.workspace = normalize_path(selector.workspace, WORKSPACE_EXT)
    selector.project = normalize_path(selector.project, PROJECT_EXT)

    root = os.path.abspath(os.path.expanduser(selector.root_path))
    if not os.path.exists(root):
        raise SystemExit(f"Error: unable to find file: {root}")

    if not selector.scheme:
        raise SystemExit(
            "Error: missing option: a workspace or project is required, as well as a scheme.\n"
            "Hint: pass the scheme name via -s/--scheme.\n"
        )

    if not selector.configuration:
        selector.configuration = DEFAULT_CONFIGURATION
    return selector


def validate_configuration(configuration: str, known: Sequence[str]) -> None:
    """配置名必须是 target 已声明的配置之一；错误信息逐行列出可选项。"""
    if configuration in known:
        return
    listing = "\n  ".join(known)
    raise SystemExit(
        f"Error: configuration {configuration} does not exist in the scheme's target. "
        f"Possible options are:\n  {listing}"
    )
