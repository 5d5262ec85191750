"""数据模型定义"""

from dataclasses import dataclass, field
from typing import List, Optional


# 支持的定位方式，顺序与原始表单测试保持一致
SELECTOR_KINDS = ("name", "id", "xpath", "css", "tag")


@dataclass(frozen=True)
class Selector:
    """单条定位规则：定位方式 + 值"""
    kind: str
    value: str

    def __post_init__(self):
        if self.kind not in SELECTOR_KINDS:
            raise ValueError(f"unknown selector kind: {self.kind!r}")

    @classmethod
    def name(cls, value: str) -> "Selector":
        return cls("name", value)

    @classmethod
    def id(cls, value: str) -> "Selector":
        return cls("id", value)

    @classmethod
    def xpath(cls, value: str) -> "Selector":
        return cls("xpath", value)

    @classmethod
    def css(cls, value: str) -> "Selector":
        return cls("css", value)

    @classmethod
    def tag(cls, value: str) -> "Selector":
        return cls("tag", value)

    def to_playwright(self) -> str:
        """转换为 Playwright 可识别的 selector 字符串"""
        if self.kind == "name":
            return f'[name="{self.value}"]'
        if self.kind == "id":
            return f'[id="{self.value}"]'
        if self.kind == "xpath":
            return f"xpath={self.value}"
        # css 与 tag 都走 css 引擎
        return f"css={self.value}"

    def __str__(self) -> str:
        return f"By.{self.kind}: {self.value}"


# 有序的定位链，第一条命中且可见的规则胜出
LocatorStrategy = List[Selector]


@dataclass
class FieldProbeResult:
    """单个字段测试的结果"""
    field: str
    expected: str
    actual: Optional[str]
    passed: bool
    method: Optional[str] = None  # native|script
    error: Optional[str] = None

    @classmethod
    def compare(cls, field: str, expected: str, actual: Optional[str], method: Optional[str] = None) -> "FieldProbeResult":
        passed = bool(actual) and actual == expected
        return cls(field=field, expected=expected, actual=actual, passed=passed, method=method)

    @classmethod
    def failure(cls, field: str, expected: str, error: str) -> "FieldProbeResult":
        return cls(field=field, expected=expected, actual=None, passed=False, error=error)

    @property
    def shown_actual(self) -> str:
        return "null" if self.actual is None else self.actual


@dataclass(frozen=True)
class FrameContext:
    """当前驱动焦点：主文档或某个 iframe"""
    frame_id: Optional[str] = None
    src: Optional[str] = None
    index: Optional[int] = None

    @classmethod
    def main_document(cls) -> "FrameContext":
        return cls()

    @property
    def is_main_document(self) -> bool:
        return self.index is None

    def __str__(self) -> str:
        if self.is_main_document:
            return "MainDocument"
        return f"InsideFrame({self.frame_id or self.index})"


@dataclass
class ElementSnapshot:
    """单个元素的描述，用于日志输出"""
    tag: str
    element_id: Optional[str] = None
    name: Optional[str] = None
    input_type: Optional[str] = None
    src: Optional[str] = None
    classes: List[str] = field(default_factory=list)

    def label(self) -> str:
        type_str = f"[{self.input_type}]" if self.input_type else ""
        id_str = f"#{self.element_id}" if self.element_id else ""
        return f"{self.tag}{id_str}{type_str}"
