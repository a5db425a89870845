"""
钥匙串凭据辅助模块。

通过 macOS `/usr/bin/security` 按固定服务名查询、删除与新增通用密码项；
密码由 `security` 自行在终端提示输入（`-w` 置于末尾且不带值），
既不出现在进程参数中，也不经过本进程。
"""

from __future__ import annotations

import re

from . import prompts
from .runner import CommandRunner, run_cmd
from .types import Credential

SECURITY = "/usr/bin/security"
# 上传工具通过该服务名从钥匙串读取账号密码。
SERVICE = "Xcode:itunesconnect.apple.com"

_ACCOUNT_LINE_RE = re.compile(r'^\s*"acct"<blob>="(.*)"\s*$')


def parse_account(text: str) -> str:
    """从 `security find-generic-password` 输出中提取 `acct` 属性。"""
    for line in text.splitlines():
        m = _ACCOUNT_LINE_RE.match(line)
        if m:
            return m.group(1)
    return ""


def find_credential(runner: CommandRunner, service: str = SERVICE) -> Credential | None:
    """查询服务名对应的条目；不存在时返回 `None`。"""
    result = runner.run([SECURITY, "find-generic-password", "-s", service])
    if not result.ok:
        return None
    # 属性在不同系统版本上可能输出到 stdout 或 stderr。
    account = parse_account(result.stdout) or parse_account(result.stderr)
    return Credential(service=service, account=account)


def delete_credential(runner: CommandRunner, credential: Credential) -> None:
    """删除已有条目（失败不抛错）。"""
    cmd = [SECURITY, "delete-generic-password", "-s", credential.service]
    if credential.account:
        cmd += ["-a", credential.account]
    runner.run(cmd)


def add_credential(runner: CommandRunner, account: str, service: str = SERVICE) -> Credential:
    """新增一条通用密码项（由 `security` 提示输入密码），失败时抛出 `RuntimeError`。"""
    run_cmd(runner, [SECURITY, "add-generic-password", "-s", service, "-a", account, "-w"])
    return Credential(service=service, account=account)


def ensure_credential(runner: CommandRunner, service: str = SERVICE) -> Credential:
    """
    确保钥匙串中存在可用凭据。

    已有条目时展示账号并询问是否沿用（默认是）；否则删除旧条目，
    交互式收集新的用户名后写入，密码由 `security` 提示输入。
    """
    existing = find_credential(runner, service)
    if existing is not None:
        label = existing.account or "(unknown account)"
        if prompts.agree(f"Use saved iTunes Connect account {label}? (y/n)", True):
            return existing
        delete_credential(runner, existing)

    account = ""
    while not account:
        account = prompts.ask("iTunes Connect username:").strip()
    print("Enter the iTunes Connect password when the keychain prompts for it.")
    try:
        return add_credential(runner, account, service)
    except RuntimeError as e:
        raise SystemExit(f"Error: failed to store credentials in keychain.\nDetail: {e}") from e
