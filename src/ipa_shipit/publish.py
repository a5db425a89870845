"""
发布：上传 `.ipa` 与拷贝本次构建生成的 `.xcarchive`。
"""

from __future__ import annotations

import glob
import os
import shutil
from datetime import datetime

from . import keychain
from .runner import CommandRunner, echo_output
from .types import Credential

XCRUN = "/usr/bin/xcrun"
ARCHIVES_ROOT = os.path.join("~", "Library", "Developer", "Xcode", "Archives")


def upload_command(ipa_path: str, credential: Credential) -> list[str]:
    """组装上传命令；密码由 altool 按服务名从钥匙串读取。"""
    return [
        XCRUN,
        "altool",
        "--upload-app",
        "--type",
        "ios",
        "--file",
        ipa_path,
        "--username",
        credential.account,
        "--password",
        f"@keychain:{credential.service}",
    ]


def upload_ipa(
    runner: CommandRunner, ipa_path: str, *, verbose: bool = False
) -> Credential:
    """确保凭据后执行上传；不检查上传工具的退出码。"""
    credential = keychain.ensure_credential(runner)
    cmd = upload_command(ipa_path, credential)
    if verbose:
        print(f"Upload command:\n {' '.join(cmd)}")
    echo_output(runner.run(cmd))
    return credential


def archive_path_for(
    product_name: str, finished_at: datetime, *, archives_root: str = ""
) -> str:
    """按 Xcode 归档目录约定推导本次构建的 `.xcarchive` 路径。"""
    root = os.path.expanduser(archives_root or ARCHIVES_ROOT)
    day_dir = finished_at.strftime("%Y-%m-%d")
    stamp = finished_at.strftime("%d-%m-%Y %H.%M")
    return os.path.join(root, day_dir, f"{product_name} {stamp}.xcarchive")


def find_archive(
    product_name: str,
    started_at: datetime,
    finished_at: datetime,
    *,
    archives_root: str = "",
) -> str:
    """
    定位本次构建生成的 `.xcarchive`；找不到时返回空串。

    优先使用按完成时间推导的精确路径。Xcode 以归档创建时刻命名，
    可能与完成时间差一分钟，此时在开始与完成两天的目录中查找
    `<product> *.xcarchive`，取构建开始后创建的最新一个。
    """
    expected = archive_path_for(product_name, finished_at, archives_root=archives_root)
    if os.path.isdir(expected):
        return expected

    root = os.path.expanduser(archives_root or ARCHIVES_ROOT)
    # 文件系统时间戳可能只有秒级精度。
    earliest = started_at.replace(microsecond=0).timestamp()
    candidates: list[tuple[float, str]] = []
    for day in sorted({started_at.strftime("%Y-%m-%d"), finished_at.strftime("%Y-%m-%d")}):
        day_dir = glob.escape(os.path.join(root, day))
        pattern = os.path.join(day_dir, f"{glob.escape(product_name)} *.xcarchive")
        for path in glob.glob(pattern):
            if not os.path.isdir(path):
                continue
            mtime = os.path.getmtime(path)
            if mtime >= earliest:
                candidates.append((mtime, path))
    if not candidates:
        return ""
    return max(candidates)[1]


def copy_archive(archive_path: str, product_name: str, *, cwd: str) -> str:
    """把归档拷贝到 `cwd/<product>.xcarchive`；源不存在时返回空串。"""
    if not os.path.isdir(archive_path):
        return ""
    dest = os.path.join(cwd, f"{product_name}.xcarchive")
    shutil.copytree(archive_path, dest, symlinks=True, dirs_exist_ok=True)
    return dest
