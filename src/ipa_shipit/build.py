"""
构建执行：清理旧产物并调用外部构建工具生成 `.ipa`。
"""

from __future__ import annotations

import os
import shutil
from datetime import datetime

from . import prompts
from .runner import CommandRunner, echo_output
from .types import ArtifactSet, Selector

# `ipa build` 会在当前目录产出 `<product>.ipa` 与 `<product>.app.dSYM.zip`。
IPA_TOOL = "ipa"
ARCHIVE_EXT = ".xcarchive"


def stale_artifacts(product_name: str, cwd: str) -> ArtifactSet:
    """收集当前目录下同级的 `.xcarchive` 目录。"""
    archives: list[str] = []
    with os.scandir(cwd) as it:
        for entry in it:
            if entry.is_dir() and entry.name.endswith(ARCHIVE_EXT):
                archives.append(entry.name)
    return ArtifactSet(product_name=product_name, archives=tuple(sorted(archives)))


def existing_files(artifacts: ArtifactSet, cwd: str) -> list[str]:
    """返回实际存在于 `cwd` 的旧产物名（ipa、dSYM、archive 顺序）。"""
    names = [artifacts.ipa_name, artifacts.dsym_name]
    out = [n for n in names if os.path.exists(os.path.join(cwd, n))]
    out += list(artifacts.archives)
    return out


def _remove(path: str) -> None:
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.remove(path)


def cleanup_old_build(artifacts: ArtifactSet, cwd: str) -> tuple[bool, bool]:
    """
    提示删除上一次构建遗留的产物。

    返回 `(keep_old_build, upload_old_build)`：
    - 拒绝删除且 `.ipa` 存在时跳过本次构建；
    - 此时再询问是否上传已有的 `.ipa`（默认否）。
    """
    files = existing_files(artifacts, cwd)
    if not files:
        return False, False

    listing = "\n  ".join(files)
    print(f"The following files look like they may be from a previous build:\n  {listing}")
    if prompts.agree("Delete them and build a new .ipa? (y/n)", True):
        for name in files:
            _remove(os.path.join(cwd, name))
        return False, False

    if artifacts.ipa_name not in files:
        return False, False
    upload_old = prompts.agree(
        "Do you want to upload the existing .ipa to iTunes Connect? (y/n)", False
    )
    return True, upload_old


def build_command(selector: Selector) -> list[str]:
    """按 workspace 或 project 组装构建命令。"""
    cmd = [IPA_TOOL, "build"]
    if selector.workspace:
        cmd += ["--workspace", selector.workspace]
    else:
        cmd += ["--project", selector.project]
    cmd += ["--scheme", selector.scheme]
    if selector.configuration:
        cmd += ["--configuration", selector.configuration]
    return cmd


def build_ipa(
    runner: CommandRunner, selector: Selector, *, cwd: str, verbose: bool = False
) -> datetime:
    """执行构建并返回完成时间；非零退出码直接终止整个流程。"""
    cmd = build_command(selector)
    print("Building .ipa")
    if verbose:
        print(f"Build command:\n{' '.join(cmd)}")
    result = runner.run(cmd, cwd=cwd)
    finished_at = datetime.now()
    echo_output(result)
    if not result.ok:
        detail = result.stderr.strip()
        suffix = f"\n{detail}" if detail else ""
        raise SystemExit(f"Error: build failed (exit {result.returncode}) -- aborting{suffix}")
    return finished_at
