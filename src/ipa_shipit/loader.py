"""
元数据加载：从选择器解析出 project/target/构建配置与 `Info.plist` 路径。

所有派生字段按依赖顺序一次性计算并存入 `ResolvedProject`。
"""

from __future__ import annotations

import os

from . import xcode
from .options import validate_configuration
from .types import BuildConfiguration, ResolvedProject, Selector

TARGET_NAME_PLACEHOLDER = "$(TARGET_NAME)"


def _log(verbose: bool, message: str) -> None:
    if verbose:
        print(message)


def find_project_in_workspace(workspace_path: str, scheme: str, *, verbose: bool = False) -> str:
    """线性扫描 workspace 内的工程，返回第一个包含该 scheme 的工程路径。"""
    _log(verbose, f"Loading workspace at: {workspace_path}")
    try:
        project_paths = xcode.workspace_project_paths(workspace_path)
    except RuntimeError as e:
        raise SystemExit(f"Error: failed to read Xcode workspace.\nDetail: {e}") from e
    for project_path in project_paths:
        if not os.path.isdir(project_path):
            continue
        if scheme in xcode.project_schemes(project_path):
            _log(verbose, f"Found project with matching scheme at: {project_path}")
            return project_path
    raise SystemExit(
        f"Error: no project in workspace {os.path.basename(workspace_path)} "
        f"contains scheme {scheme}."
    )


def resolve_project_path(selector: Selector, *, verbose: bool = False) -> str:
    """project 直接使用；workspace 则查找包含目标 scheme 的内嵌工程。"""
    root = os.path.abspath(os.path.expanduser(selector.root_path))
    if selector.workspace:
        path = find_project_in_workspace(root, selector.scheme, verbose=verbose)
    else:
        path = root
    _log(verbose, f"Looking for project file at: {path}")
    return path


def product_name_for(config: BuildConfiguration, target_name: str) -> str:
    """`PRODUCT_NAME` 为 `$(TARGET_NAME)` 或缺失时回退为 target 名。"""
    name = config.product_name
    if not name or name == TARGET_NAME_PLACEHOLDER:
        return target_name
    return name


def load_build_context(selector: Selector, *, verbose: bool = False) -> ResolvedProject:
    """
    解析工程、scheme、target 与配置，并定位 `Info.plist`。

    依次完成：
    1) 工程路径（workspace 时按 scheme 扫描）；
    2) 共享 scheme 文件与其首个构建条目对应的 target；
    3) target 的构建配置映射，并校验所选配置名；
    4) `INFOPLIST_FILE` 的绝对路径与产品名。
    """
    project_path = resolve_project_path(selector, verbose=verbose)

    scheme_path = xcode.shared_scheme_path(project_path, selector.scheme)
    if not os.path.isfile(scheme_path):
        raise SystemExit(
            f"Error: scheme {selector.scheme} does not exist or is not shared.\n"
            f"Expected: {scheme_path}\n"
        )

    try:
        target_name = xcode.scheme_target_name(scheme_path)
        targets = xcode.load_project_targets(project_path)
    except RuntimeError as e:
        raise SystemExit(f"Error: failed to read Xcode project.\nDetail: {e}") from e

    if not target_name:
        raise SystemExit(f"Error: no buildable reference found in scheme: {scheme_path}")
    configurations = targets.get(target_name)
    if configurations is None:
        found = ", ".join(sorted(targets)) or "(none)"
        raise SystemExit(
            f"Error: target {target_name} from scheme {selector.scheme} not found in project. "
            f"Available targets: {found}"
        )

    validate_configuration(selector.configuration, list(configurations))
    config = configurations[selector.configuration]

    if not config.info_plist_file:
        raise SystemExit(
            f"Error: INFOPLIST_FILE is not set for {target_name} ({config.name})."
        )
    plist_path = os.path.join(os.path.dirname(project_path), config.info_plist_file)
    if not os.path.isfile(plist_path):
        raise SystemExit(f"Error: cannot find plist file: {plist_path}")

    return ResolvedProject(
        project_path=project_path,
        target_name=target_name,
        configurations=configurations,
        scheme_path=scheme_path,
        plist_path=plist_path,
        product_name=product_name_for(config, target_name),
    )
