"""受管包常量表

三个包按固定顺序构建：mmcv → mmaction2 → mmengine。
版本号同时决定检出的 tag 和期望的 wheel 文件名。
"""

from __future__ import annotations

from mmsetup.core.models import PackageSpec, PatchKind, PatchOp

MMCV_VERSION = "2.1.0"
MMACTION_VERSION = "1.2.0"
MMENGINE_VERSION = "0.10.7"

MMCV = PackageSpec(
    name="mmcv",
    version=MMCV_VERSION,
    url="https://github.com/open-mmlab/mmcv.git",
    checkout_dir=".mmcv",
)

# mmaction2 issue #2714: 发布的 sdist 缺文件，只能从源码构建
MMACTION2 = PackageSpec(
    name="mmaction2",
    version=MMACTION_VERSION,
    url="https://github.com/open-mmlab/mmaction2.git",
    checkout_dir=".mmaction2",
    patches=(
        PatchOp(PatchKind.TORCH_LOAD, "mmaction/apis/inference.py"),
        PatchOp(PatchKind.VERSION_ACCESSOR, "setup.py"),
    ),
)

MMENGINE = PackageSpec(
    name="mmengine",
    version=MMENGINE_VERSION,
    url="https://github.com/open-mmlab/mmengine",
    checkout_dir=".mmengine",
    patches=(
        PatchOp(PatchKind.VERSION_ACCESSOR, "setup.py"),
        PatchOp(PatchKind.TORCH_LOAD, "mmengine/runner/checkpoint.py"),
    ),
)

PACKAGES: tuple[PackageSpec, ...] = (MMCV, MMACTION2, MMENGINE)


def checkout_dirs() -> list[str]:
    """所有包的本地检出目录"""
    return [p.checkout_dir for p in PACKAGES]
