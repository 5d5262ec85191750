"""CloudQA 表单探测包

包含各个模块：
- models: 数据模型
- errors: 异常定义
- config: 运行配置
- session: 浏览器会话与 iframe 焦点
- perception: 感知模块（定位元素）
- controller: 执行模块（交互与回读）
- report: 报告模块
- core: 核心 FormProbe 类
"""

from .models import ElementSnapshot, FieldProbeResult, FrameContext, LocatorStrategy, Selector
from .errors import (
    ElementNotFound,
    FrameSwitchError,
    InteractionTimeout,
    NavigationTimeout,
    ProbeError,
    ScriptExecutionError,
    StartupError,
)
from .config import Settings
from .session import BrowserSession, open_session
from .perception import Perception
from .controller import Controller, email_looks_valid
from .report import Report
from .core import FormProbe, run_probe

__all__ = [
    "ElementSnapshot",
    "FieldProbeResult",
    "FrameContext",
    "LocatorStrategy",
    "Selector",
    "ProbeError",
    "ElementNotFound",
    "InteractionTimeout",
    "NavigationTimeout",
    "ScriptExecutionError",
    "FrameSwitchError",
    "StartupError",
    "Settings",
    "BrowserSession",
    "open_session",
    "Perception",
    "Controller",
    "email_looks_valid",
    "Report",
    "FormProbe",
    "run_probe",
]
