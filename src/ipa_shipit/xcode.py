"""
Xcode 工程文件的读取边界。

- workspace（`contents.xcworkspacedata`）与 scheme（`.xcscheme`）是 XML，用 lxml 解析。
- `project.pbxproj` 交给 `pbxproj` 库解析，这里只提取 target 与构建配置。

解析失败统一抛出 `RuntimeError`，由上层决定如何终止。
"""

from __future__ import annotations

import glob
import os

from lxml import etree
from pbxproj import XcodeProject

from .types import BuildConfiguration

SCHEME_EXT = ".xcscheme"
BUILDABLE_REFERENCE_XPATH = "//BuildAction/BuildActionEntries/BuildActionEntry/BuildableReference"


def _parse_xml(path: str) -> etree._ElementTree:
    """解析 XML 文件，语法错误转换为 `RuntimeError`。"""
    try:
        return etree.parse(path)
    except (OSError, etree.XMLSyntaxError) as e:
        raise RuntimeError(f"Failed to parse XML: {path}\n{e}") from e


def _resolve_location(location: str, *, base_dir: str, container_dir: str) -> str:
    """把 `group:`/`container:`/`absolute:`/`self:` 形式的 location 转成路径。"""
    kind, _, rel = location.partition(":")
    if kind == "absolute":
        return rel
    if kind == "container":
        return os.path.join(container_dir, rel)
    if kind == "self":
        return container_dir
    return os.path.join(base_dir, rel)


def workspace_project_paths(workspace_path: str) -> list[str]:
    """列出 workspace 引用的全部 `.xcodeproj` 路径（含嵌套 Group 内的引用）。"""
    data_path = os.path.join(workspace_path, "contents.xcworkspacedata")
    if not os.path.isfile(data_path):
        raise RuntimeError(f"Workspace data not found: {data_path}")

    container_dir = os.path.dirname(os.path.abspath(workspace_path))
    out: list[str] = []

    def _walk(node: etree._Element, base_dir: str) -> None:
        for child in node:
            if not isinstance(child.tag, str):
                continue
            location = child.get("location", "")
            if child.tag == "Group":
                group_dir = base_dir
                if location:
                    group_dir = _resolve_location(
                        location, base_dir=base_dir, container_dir=container_dir
                    )
                _walk(child, group_dir)
            elif child.tag == "FileRef" and location:
                path = _resolve_location(location, base_dir=base_dir, container_dir=container_dir)
                if path.endswith(".xcodeproj"):
                    out.append(os.path.normpath(path))

    _walk(_parse_xml(data_path).getroot(), container_dir)
    return out


def shared_scheme_dir(project_path: str) -> str:
    return os.path.join(project_path, "xcshareddata", "xcschemes")


def shared_scheme_path(project_path: str, scheme: str) -> str:
    """返回共享 scheme 文件路径（不检查是否存在）。"""
    return os.path.join(shared_scheme_dir(project_path), f"{scheme}{SCHEME_EXT}")


def project_schemes(project_path: str) -> list[str]:
    """
    列出工程中的 scheme 名称。

    同时包含共享 scheme 与各用户目录下的 scheme；都没有时，
    Xcode 会按工程名自动生成一个，这里同样回退为工程名。
    """
    dirs = [shared_scheme_dir(project_path)]
    dirs += sorted(glob.glob(os.path.join(project_path, "xcuserdata", "*.xcuserdatad", "xcschemes")))

    names: list[str] = []
    for d in dirs:
        if not os.path.isdir(d):
            continue
        for name in sorted(os.listdir(d)):
            if name.endswith(SCHEME_EXT):
                scheme = name[: -len(SCHEME_EXT)]
                if scheme not in names:
                    names.append(scheme)

    if not names:
        names.append(os.path.splitext(os.path.basename(project_path))[0])
    return names


def scheme_target_name(scheme_path: str) -> str:
    """读取 scheme 中第一个构建条目的 `BlueprintName`；找不到时返回空串。"""
    refs = _parse_xml(scheme_path).xpath(BUILDABLE_REFERENCE_XPATH)
    if not refs:
        return ""
    return refs[0].get("BlueprintName", "")


def _setting(settings: object, key: str) -> str:
    value = getattr(settings, key, None)
    return value if isinstance(value, str) else ""


def load_project_targets(project_path: str) -> dict[str, dict[str, BuildConfiguration]]:
    """解析 `project.pbxproj`，返回 `target 名 -> (配置名 -> 构建配置)` 映射。"""
    pbxproj_path = os.path.join(project_path, "project.pbxproj")
    if not os.path.isfile(pbxproj_path):
        raise RuntimeError(f"Project file not found: {pbxproj_path}")
    try:
        project = XcodeProject.load(pbxproj_path)
    except Exception as e:
        raise RuntimeError(f"Failed to parse project: {pbxproj_path}\n{e}") from e

    targets: dict[str, dict[str, BuildConfiguration]] = {}
    for target in project.objects.get_targets():
        name = str(target.name)
        configs: dict[str, BuildConfiguration] = {}
        for cfg in project.objects.get_configurations_on_targets(target_name=name):
            settings = getattr(cfg, "buildSettings", None)
            configs[str(cfg.name)] = BuildConfiguration(
                name=str(cfg.name),
                info_plist_file=_setting(settings, "INFOPLIST_FILE"),
                product_name=_setting(settings, "PRODUCT_NAME"),
            )
        targets[name] = configs
    return targets
