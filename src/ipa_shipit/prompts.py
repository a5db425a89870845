"""
阻塞式交互提示：带默认值的文本输入与是/否确认。
"""

from __future__ import annotations

_YES = ("y", "yes")
_NO = ("n", "no")


def ask(question: str, default: str = "") -> str:
    """提示输入文本；直接回车时返回默认值。"""
    suffix = f" |{default}| " if default else " "
    raw = input(f"{question.rstrip()}{suffix}").strip()
    return raw or default


def agree(question: str, default: bool) -> bool:
    """提示 y/n 确认；直接回车时返回默认值，非法输入会重复提示。"""
    hint = "Y/n" if default else "y/N"
    while True:
        raw = input(f"{question.rstrip()} [{hint}] ").strip().lower()
        if not raw:
            return default
        if raw in _YES:
            return True
        if raw in _NO:
            return False
        print("Please enter \"yes\" or \"no\".")
