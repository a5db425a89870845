"""
`Info.plist` 读写工具。

写入时先落到同目录临时文件再替换，避免中途失败留下半个文件。
"""

from __future__ import annotations

import os
import plistlib
import tempfile
from typing import Any


def load_plist(path: str) -> Any:
    """从磁盘读取 plist（自动识别 XML/Binary）并返回对象。"""
    with open(path, "rb") as f:
        return plistlib.load(f)


def save_plist_xml(path: str, obj: Any) -> None:
    """将对象以 XML plist 格式整体替换写回磁盘。"""
    data = plistlib.dumps(obj, fmt=plistlib.FMT_XML, sort_keys=False)
    fd, tmp_path = tempfile.mkstemp(
        prefix=".plist_", suffix=".tmp", dir=os.path.dirname(os.path.abspath(path))
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
