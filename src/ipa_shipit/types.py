"""
发布流程各阶段共享的轻量类型定义。
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Selector:
    """用户指定的构建目标选择器（workspace 与 project 二选一）。"""

    workspace: str = ""
    project: str = ""
    scheme: str = ""
    # 未指定时由选项解析阶段补为 `Release`。
    configuration: str = ""

    @property
    def root_path(self) -> str:
        return self.workspace or self.project


@dataclass(frozen=True)
class BuildConfiguration:
    """目标上单个构建配置中关心的 build settings。"""

    name: str
    info_plist_file: str = ""
    product_name: str = ""


@dataclass
class ResolvedProject:
    """解析完成的 project/target/配置三元组及其派生字段。"""

    project_path: str
    target_name: str
    # 配置名 -> 配置记录，按 target 中声明的顺序。
    configurations: dict[str, BuildConfiguration]
    scheme_path: str = ""
    plist_path: str = ""
    product_name: str = ""

    @property
    def project_dir(self) -> str:
        return os.path.dirname(self.project_path)

    @property
    def configuration_names(self) -> list[str]:
        return list(self.configurations)


@dataclass
class MetadataRecord:
    """`Info.plist` 中需要确认的两个标识字段。"""

    bundle_identifier: str
    short_version: str


@dataclass(frozen=True)
class ArtifactSet:
    """由产品名推导的构建产物集合，每次运行重新计算。"""

    product_name: str
    archives: tuple[str, ...] = ()

    @property
    def ipa_name(self) -> str:
        return f"{self.product_name}.ipa"

    @property
    def dsym_name(self) -> str:
        return f"{self.product_name}.app.dSYM.zip"


@dataclass(frozen=True)
class Credential:
    """钥匙串中按固定服务名保存的账号记录（不含密码）。"""

    service: str
    account: str


@dataclass(frozen=True)
class CommandResult:
    """一次外部命令执行的结果。"""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class Stage(enum.Enum):
    """一次发布运行所处的阶段；只向前推进。"""

    IDLE = "idle"
    VALIDATED = "validated"
    RESOLVED = "resolved"
    METADATA_CONFIRMED = "metadata_confirmed"
    BUILT = "built"
    SKIPPED = "skipped"
    PUBLISHED = "published"
    NOT_PUBLISHED = "not_published"
    ARCHIVED = "archived"
    NOT_ARCHIVED = "not_archived"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class RunState:
    """编排器在单次运行内持有的可变状态。"""

    stage: Stage = Stage.IDLE
    keep_old_build: bool = False
    upload_old_build: bool = False
    build_started_at: datetime | None = None
    build_finished_at: datetime | None = None
    history: list[Stage] = field(default_factory=list)
