"""异常定义

除 StartupError 外，所有异常都在单个检查步骤内被捕获并输出，不会中断整个流程。
"""


class ProbeError(Exception):
    """所有探测异常的基类"""


class ElementNotFound(ProbeError):
    """所有定位规则都未命中可见元素"""


class InteractionTimeout(ProbeError):
    """等待元素可见 / 可点击超时"""


class NavigationTimeout(InteractionTimeout):
    """页面在限定时间内没有就绪"""


class ScriptExecutionError(ProbeError):
    """原生操作与脚本兜底都失败"""

    def __init__(self, action: str, cause: BaseException):
        super().__init__(f"{action} failed (native and script): {cause}")
        self.action = action
        self.cause = cause


class FrameSwitchError(ProbeError):
    """无法切换进 iframe，或焦点状态不允许切换"""


class StartupError(ProbeError):
    """浏览器启动失败，整个运行终止"""
