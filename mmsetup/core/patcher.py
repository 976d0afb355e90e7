"""源码补丁：构建前改写新检出的第三方源码

两个相互独立、可重复执行的文本变换:

  patch_get_version_function
      把 ``def get_version():`` 及其后 3 行替换为直接返回固定版本号的两行。
      找不到标记行、或其后不足 3 行时不做任何修改。

  patch_torch_load_calls
      为每个 ``torch.load(...)`` 调用追加 ``, weights_only=False``。
      括号匹配是朴素扫描：取开括号后的第一个 ``)``，不处理嵌套。
      参数中已含 ``weights_only=`` 的调用跳过。

两者都整文件读入、变换、整文件写回（末尾保证换行）；
没有任何改动时不写文件，保留修改时间。
"""

from __future__ import annotations

import logging
from pathlib import Path

from mmsetup.core.models import PackageSpec, PatchKind, PatchOp
from mmsetup.utils.fs import atomic_write, read_text

logger = logging.getLogger(__name__)

VERSION_MARKER = "def get_version():"
VERSION_BODY_LINES = 3

TORCH_LOAD_CALL = "torch.load("
WEIGHTS_ONLY_MARKER = "weights_only="
WEIGHTS_ONLY_ARG = ", weights_only=False"


def split_lines(text: str) -> list[str]:
    """按 \\n 切行并去掉行尾 \\r；末尾换行不产生空行"""
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def rewrite_get_version(lines: list[str], version: str) -> list[str] | None:
    """对行列表做版本函数替换，无需修改时返回 None"""
    index = next(
        (i for i, line in enumerate(lines) if line.rstrip() == VERSION_MARKER),
        None,
    )
    if index is None:
        return None
    if len(lines) < index + 1 + VERSION_BODY_LINES:
        return None
    return [
        *lines[:index],
        VERSION_MARKER,
        f"    return '{version}'",
        *lines[index + 1 + VERSION_BODY_LINES:],
    ]


def inject_weights_only(line: str) -> tuple[str, int]:
    """为单行中的每个 torch.load 调用注入 weights_only=False

    返回:
        (新行, 注入次数)
    """
    current = line
    inserted = 0
    search_from = 0
    while True:
        start = current.find(TORCH_LOAD_CALL, search_from)
        if start < 0:
            break
        open_paren = start + len(TORCH_LOAD_CALL) - 1
        close_idx = current.find(")", open_paren + 1)
        if close_idx < 0:
            break
        args = current[open_paren + 1:close_idx]
        if WEIGHTS_ONLY_MARKER in args:
            search_from = close_idx + 1
            continue
        current = current[:close_idx] + WEIGHTS_ONLY_ARG + current[close_idx:]
        inserted += 1
        search_from = close_idx + len(WEIGHTS_ONLY_ARG) + 1
    return current, inserted


def patch_get_version_function(path: str | Path, version: str) -> bool:
    """改写 setup.py 中的 get_version()，返回文件是否被修改"""
    p = Path(path)
    lines = split_lines(read_text(p))
    patched = rewrite_get_version(lines, version)
    if patched is None:
        logger.info("未找到 %s 或函数体不足 %d 行，跳过: %s",
                    VERSION_MARKER, VERSION_BODY_LINES, p)
        return False
    atomic_write(p, "\n".join(patched) + "\n")
    logger.info("已固定版本号 %s: %s", version, p)
    return True


def patch_torch_load_calls(path: str | Path) -> bool:
    """为文件中所有 torch.load 调用补 weights_only=False，返回文件是否被修改"""
    p = Path(path)
    total = 0
    patched: list[str] = []
    for line in split_lines(read_text(p)):
        new_line, count = inject_weights_only(line)
        patched.append(new_line)
        total += count
    if total == 0:
        logger.info("torch.load 无需修改: %s", p)
        return False
    atomic_write(p, "\n".join(patched) + "\n")
    logger.info("torch.load 已注入 weights_only=False (%d 处): %s", total, p)
    return True


def apply_patch(op: PatchOp, checkout: str | Path, spec: PackageSpec) -> bool:
    """对检出目录应用一个补丁操作"""
    target = Path(checkout) / op.path
    if op.kind is PatchKind.VERSION_ACCESSOR:
        return patch_get_version_function(target, spec.version)
    if op.kind is PatchKind.TORCH_LOAD:
        return patch_torch_load_calls(target)
    raise ValueError(f"未知补丁类型: {op.kind}")


def apply_patches(spec: PackageSpec, checkout: str | Path) -> int:
    """按顺序应用包定义中的全部补丁，返回实际修改的文件数"""
    return sum(1 for op in spec.patches if apply_patch(op, checkout, spec))
