"""核心数据模型

进程内的瞬时描述对象：命令执行结果、补丁操作、包定义、流水线步骤。
均不持久化，只用于即时上报和错误传递。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable


class OutputMode(Enum):
    """子进程输出策略"""

    QUIET = "quiet"    # 捕获输出，失败时才转储
    STREAM = "stream"  # 继承父进程 stdout/stderr，实时输出


@dataclass
class CommandResult:
    """单次命令执行结果（与 subprocess 解耦）"""

    returncode: int
    duration: float = 0.0
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 包定义
# =========================================================================


class PatchKind(Enum):
    """源码补丁类型"""

    VERSION_ACCESSOR = "version_accessor"
    TORCH_LOAD = "torch_load"


@dataclass(frozen=True)
class PatchOp:
    """对检出目录内某个文件的一次补丁操作"""

    kind: PatchKind
    path: str  # 相对 checkout 目录


@dataclass(frozen=True)
class PackageSpec:
    """受管包定义：进程启动时确定，之后不可变"""

    name: str
    version: str
    url: str
    checkout_dir: str
    patches: tuple[PatchOp, ...] = ()

    @property
    def tag(self) -> str:
        return f"v{self.version}"

    @property
    def requirement(self) -> str:
        return f"{self.name}=={self.version}"


# =========================================================================
# 流水线
# =========================================================================


@dataclass
class Step:
    """流水线中的一个具名步骤"""

    name: str
    action: Callable[[], None]
    streams: bool = False  # 步骤本身会直接输出到终端


@dataclass
class StepOutcome:
    """步骤执行记录"""

    name: str
    index: int
    total: int
    elapsed: float
    success: bool
    error: str = ""


@dataclass
class PipelineReport:
    """一次流水线运行的汇总"""

    outcomes: list[StepOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(o.success for o in self.outcomes)

    @property
    def elapsed(self) -> float:
        return sum(o.elapsed for o in self.outcomes)


@dataclass
class BuildResult:
    """单个包的构建/安装结果"""

    spec: PackageSpec
    status: str  # "cached" (产物已存在，跳过构建) / "built"
    wheels: list[str] = field(default_factory=list)
    duration: float = 0.0
    patched_files: int = 0

    @property
    def cached(self) -> bool:
        return self.status == "cached"
