"""
外部命令执行封装。

流程中的所有外部工具（构建、`agvtool`、`security`、上传）都经由
`CommandRunner` 调用，测试时可替换为假的 runner 而不依赖真实进程。
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence

from .types import CommandResult

# 回显命令时需要遮盖取值的参数（如 `security add-generic-password -w`）。
_SECRET_FLAGS = ("-w",)


def display_cmd(args: Sequence[str]) -> str:
    """把命令拼成可打印的字符串，敏感参数的值替换为 `****`。"""
    out: list[str] = []
    hide = False
    for arg in args:
        out.append("****" if hide else arg)
        hide = arg in _SECRET_FLAGS
    return " ".join(out)


class CommandRunner:
    """基于 `subprocess` 的命令执行器：捕获输出并返回退出码，不因失败抛错。"""

    def __init__(self, *, verbose: bool = False) -> None:
        self.verbose = verbose

    def run(self, cmd: Sequence[str], *, cwd: str | None = None) -> CommandResult:
        """执行命令并返回 `CommandResult`。"""
        args = tuple(cmd)
        if self.verbose:
            if cwd:
                print(f"+ (cd {cwd}) {display_cmd(args)}")
            else:
                print(f"+ {display_cmd(args)}")
        try:
            p = subprocess.run(list(args), capture_output=True, cwd=cwd, check=False)
        except FileNotFoundError as e:
            # 工具不存在时按 shell 约定返回 127。
            return CommandResult(args=args, returncode=127, stderr=str(e))
        return CommandResult(
            args=args,
            returncode=p.returncode,
            stdout=p.stdout.decode(errors="replace"),
            stderr=p.stderr.decode(errors="replace"),
        )


def run_cmd(runner: CommandRunner, cmd: Sequence[str], *, cwd: str | None = None) -> str:
    """执行命令并返回 stdout，失败时抛出带 stderr 的异常。"""
    result = runner.run(cmd, cwd=cwd)
    if not result.ok:
        raise RuntimeError(f"Command failed: {display_cmd(result.args)}\n{result.stderr}")
    return result.stdout


def echo_output(result: CommandResult) -> None:
    """把外部工具捕获的输出原样回显到终端。"""
    text = result.stdout.rstrip("\n")
    if text:
        print(text)
