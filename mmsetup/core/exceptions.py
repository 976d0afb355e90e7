"""统一异常体系

所有业务异常继承 SetupError，CLI 层据此输出单行错误摘要。
异常通过 ``raise ... from exc`` 串联，chain() 按 __cause__ 展开完整因果链。
"""

from __future__ import annotations


class SetupError(Exception):
    """安装流程基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)

    def chain(self) -> str:
        """沿 __cause__ 展开错误链: ``外层: 内层: 根因``"""
        parts = [str(self)]
        cause = self.__cause__
        while cause is not None:
            text = str(cause) or type(cause).__name__
            if text not in parts:
                parts.append(text)
            cause = cause.__cause__
        return ": ".join(parts)


class ConfigError(SetupError):
    """配置文件无效，或内置 glob 模式非法"""

    code = "CONFIG_ERROR"


class ExecutionError(SetupError):
    """外部命令执行失败"""

    code = "EXECUTION_ERROR"


class SpawnError(ExecutionError):
    """子进程无法启动（可执行文件不存在、无权限等）"""

    code = "SPAWN_ERROR"

    def __init__(self, label: str) -> None:
        super().__init__(f"failed to spawn command: {label}")
        self.label = label


class CommandFailedError(ExecutionError):
    """子进程运行结束但返回非零状态"""

    code = "COMMAND_FAILED"

    def __init__(self, label: str, returncode: int) -> None:
        super().__init__(f"command failed ({label}) with status {returncode}")
        self.label = label
        self.returncode = returncode


class FileSystemError(SetupError):
    """目录创建/删除、文件读写失败"""

    code = "FS_ERROR"

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class ToolchainError(SetupError):
    """uv 缺失且无法自动安装"""

    code = "TOOLCHAIN_ERROR"


class StepFailedError(SetupError):
    """流水线步骤失败，携带步骤名与耗时"""

    code = "STEP_FAILED"

    def __init__(self, step: str, elapsed: float = 0.0) -> None:
        super().__init__(f"step failed: {step}")
        self.step = step
        self.elapsed = elapsed
