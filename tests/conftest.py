"""Playwright 页面 / frame / 元素句柄的内存替身，测试无需真实浏览器"""

from typing import Dict, List, Optional

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from probe.config import Settings
from probe.controller import (
    CLEAR_JS,
    CLICK_JS,
    READ_VALUE_JS,
    SCROLL_INTO_VIEW_JS,
    SELECTED_TEXT_JS,
    SET_VALUE_JS,
    TAG_NAME_JS,
)
from probe.perception import (
    DESCRIBE_JS,
    FIRST_ELEMENTS_JS,
    HAS_SHADOW_ROOT_JS,
    SCAN_SHADOW_HOSTS_JS,
    SHADOW_INPUTS_JS,
)
from probe.session import BrowserSession


class FakePropertyHandle:
    def __init__(self, element=None):
        self._element = element

    def as_element(self):
        return self._element


class FakeJSHandle:
    """模拟 evaluate_handle 返回的数组句柄"""

    def __init__(self, items):
        self.items = list(items)
        self.disposed = False

    async def get_properties(self):
        props = {str(i): FakePropertyHandle(item) for i, item in enumerate(self.items)}
        props["length"] = FakePropertyHandle(None)
        return props

    async def dispose(self):
        self.disposed = True


class FakeElement:
    """
    模拟 ElementHandle。

    fail 中列出的操作会抛异常："click" / "fill" / "type" / "input_value" / "script"。
    max_length 模拟 maxlength 属性：键盘输入超出部分被截断。
    """

    def __init__(
        self,
        tag: str = "input",
        attrs: Optional[Dict[str, str]] = None,
        value: str = "",
        visible: bool = True,
        enabled: bool = True,
        fail=(),
        options: Optional[List[str]] = None,
        shadow: Optional[list] = None,
        frame=None,
        max_length: Optional[int] = None,
    ):
        self.tag = tag
        self.attrs = attrs or {}
        self.value = value
        self.visible = visible
        self.enabled = enabled
        self.fail = set(fail)
        self.options = options or []
        self.selected: Optional[int] = 0 if self.options else None
        self.shadow = shadow
        self.frame = frame
        self.max_length = max_length
        self.page = None
        self.clicks = 0
        self.events: List[str] = []
        self.scrolled = False

    def _maybe_fail(self, op: str):
        if op in self.fail:
            raise Exception(f"{op} rejected")

    async def is_visible(self):
        return self.visible

    async def get_attribute(self, name):
        return self.attrs.get(name)

    async def content_frame(self):
        return self.frame

    async def wait_for_element_state(self, state, timeout=None):
        if state == "visible" and not self.visible:
            raise PlaywrightTimeoutError("Timeout waiting for visible")
        if state == "enabled" and not self.enabled:
            raise PlaywrightTimeoutError("Timeout waiting for enabled")

    async def scroll_into_view_if_needed(self, timeout=None):
        self.scrolled = True

    async def click(self, timeout=None):
        self._maybe_fail("click")
        self.clicks += 1

    async def fill(self, value, timeout=None):
        self._maybe_fail("fill")
        self.value = value

    async def focus(self):
        if self.page is not None:
            self.page.focused = self

    async def input_value(self):
        self._maybe_fail("input_value")
        return self.value

    async def select_option(self, label=None, timeout=None):
        if self.tag != "select":
            raise Exception("Element is not a <select> element")
        if label not in self.options:
            raise PlaywrightTimeoutError(f"Timeout waiting for option {label!r}")
        self.selected = self.options.index(label)

    async def evaluate(self, script, arg=None):
        self._maybe_fail("script")
        if script == SCROLL_INTO_VIEW_JS:
            self.scrolled = True
            return None
        if script == CLICK_JS:
            self.clicks += 1
            return None
        if script == CLEAR_JS:
            self.value = ""
            return None
        if script == SET_VALUE_JS:
            self.value = arg
            self.events.append("input")
            return None
        if script == READ_VALUE_JS:
            return self.value
        if script == TAG_NAME_JS:
            return self.tag
        if script == SELECTED_TEXT_JS:
            return None if self.selected is None else self.options[self.selected]
        if script == HAS_SHADOW_ROOT_JS:
            return self.shadow is not None
        if script == DESCRIBE_JS:
            return {
                "tag": self.tag,
                "id": self.attrs.get("id"),
                "name": self.attrs.get("name"),
                "type": self.attrs.get("type"),
                "src": self.attrs.get("src"),
                "classes": self.attrs.get("class", "").split(),
            }
        raise NotImplementedError(script)

    async def evaluate_handle(self, script, arg=None):
        self._maybe_fail("script")
        if script == SHADOW_INPUTS_JS:
            return FakeJSHandle(self.shadow or [])
        raise NotImplementedError(script)


class FakeFrame:
    """模拟 Frame：selector 字符串 -> 元素列表"""

    def __init__(self, selectors: Optional[Dict[str, list]] = None, errors: Optional[Dict[str, Exception]] = None):
        self.selectors = selectors or {}
        self.errors = errors or {}
        self.waited: List[str] = []

    def _check(self, selector):
        if selector in self.errors:
            raise self.errors[selector]

    async def wait_for_selector(self, selector, state=None, timeout=None):
        self.waited.append(selector)
        self._check(selector)
        items = self.selectors.get(selector)
        if not items:
            raise PlaywrightTimeoutError(f"Timeout waiting for {selector}")
        return items[0]

    async def query_selector_all(self, selector):
        self._check(selector)
        return list(self.selectors.get(selector, []))

    async def evaluate_handle(self, script, arg=None):
        if script == FIRST_ELEMENTS_JS:
            # "*" 存放文档顺序的全部元素
            self._check("*")
            return FakeJSHandle(self.selectors.get("*", [])[:arg])
        if script == SCAN_SHADOW_HOSTS_JS:
            hosts = []
            for items in self.selectors.values():
                for el in items:
                    if el.shadow is not None and el not in hosts:
                        hosts.append(el)
            return FakeJSHandle(hosts)
        raise NotImplementedError(script)


class FakeKeyboard:
    def __init__(self, page):
        self.page = page

    async def type(self, text, delay=None):
        el = self.page.focused
        if el is None:
            raise Exception("nothing focused")
        el._maybe_fail("type")
        el.value += text
        if el.max_length is not None:
            el.value = el.value[: el.max_length]


class FakePage:
    def __init__(self, main_frame: Optional[FakeFrame] = None, ready: bool = True):
        self.main_frame = main_frame or FakeFrame()
        self.keyboard = FakeKeyboard(self)
        self.focused = None
        self.ready = ready
        self.visited: List[str] = []
        self.goto_error: Optional[Exception] = None

    async def goto(self, url, timeout=None):
        if self.goto_error is not None:
            raise self.goto_error
        self.visited.append(url)

    async def wait_for_selector(self, selector, state=None, timeout=None):
        if not self.ready:
            raise PlaywrightTimeoutError(f"Timeout waiting for {selector}")
        return FakeElement(tag=selector)

    def adopt(self, *elements):
        """让元素能通过 focus() 成为键盘输入目标"""
        for el in elements:
            el.page = self
        return elements


@pytest.fixture
def settings():
    return Settings(
        url="https://forms.test/practice",
        locator_timeout=0.01,
        interaction_timeout=0.01,
        page_timeout=0.01,
        settle_seconds=0,
        action_delay=0,
        hold=False,
    )


@pytest.fixture
def make_session(settings):
    def _make(page: FakePage) -> BrowserSession:
        return BrowserSession(page, settings)

    return _make
