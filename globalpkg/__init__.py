"""globalpkg - 离线优先的全局包管理器"""

__version__ = "0.1.0"
