"""mmsetup - 本地构建并安装 mmaction 工具栈的 provisioning CLI"""

__version__ = "0.1.0"
