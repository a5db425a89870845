"""
元数据确认：交互式确认 bundle id / 版本号，并按需递增 build 号。
"""

from __future__ import annotations

import os
import plistlib
from xml.parsers.expat import ExpatError

from . import prompts
from .plist_edit import load_plist, save_plist_xml
from .runner import CommandRunner, echo_output
from .types import MetadataRecord

AGVTOOL = "/usr/bin/agvtool"
BUNDLE_ID_KEY = "CFBundleIdentifier"
SHORT_VERSION_KEY = "CFBundleShortVersionString"


def read_metadata(plist_obj: dict) -> MetadataRecord:
    """从 plist 字典取出两个标识字段（缺失时为空串）。"""
    bundle_id = plist_obj.get(BUNDLE_ID_KEY, "")
    version = plist_obj.get(SHORT_VERSION_KEY, "")
    return MetadataRecord(
        bundle_identifier=bundle_id if isinstance(bundle_id, str) else str(bundle_id),
        short_version=version if isinstance(version, str) else str(version),
    )


def update_metadata(plist_path: str, *, verbose: bool = False) -> MetadataRecord:
    """
    以当前值为默认值提示确认两个字段；只有值发生变化时才重写文件。

    两个值都确认之后才修改 plist，未变化时文件保持逐字节不变。
    """
    try:
        plist_obj = load_plist(plist_path)
    except (plistlib.InvalidFileException, ExpatError, ValueError) as e:
        raise SystemExit(f"Error: failed to read plist: {plist_path}\nDetail: {e}") from e
    if not isinstance(plist_obj, dict):
        raise SystemExit(f"Error: plist is not a dict: {plist_path}")

    current = read_metadata(plist_obj)
    bundle_id = prompts.ask("Bundle Identifier:", current.bundle_identifier)
    version = prompts.ask("Version String:", current.short_version)
    confirmed = MetadataRecord(bundle_identifier=bundle_id, short_version=version)

    if confirmed == current:
        return current

    plist_obj[BUNDLE_ID_KEY] = confirmed.bundle_identifier
    plist_obj[SHORT_VERSION_KEY] = confirmed.short_version
    if verbose:
        print(f"Updating {os.path.basename(plist_path)}")
    save_plist_xml(plist_path, plist_obj)
    return confirmed


def bump_build_number(runner: CommandRunner, project_dir: str) -> bool:
    """
    询问后在工程目录执行 `agvtool bump -all`。

    不检查退出码：bump 失败不影响后续流程。返回是否发起了调用。
    """
    if not prompts.agree("Bump build number? (y/n)", True):
        return False
    echo_output(runner.run([AGVTOOL, "bump", "-all"], cwd=project_dir))
    return True
