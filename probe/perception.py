"""感知模块：在当前焦点（主文档或 iframe）中定位元素"""

from typing import Dict, List, Optional

from playwright.async_api import ElementHandle, JSHandle
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .errors import ElementNotFound
from .models import ElementSnapshot, LocatorStrategy
from .session import BrowserSession

# 可能挂载 shadow root 的元素（启发式，不保证命中）
SHADOW_HOST_XPATH = "xpath=//*[@shadow-root or contains(@class, 'shadow') or contains(@id, 'shadow')]"

HAS_SHADOW_ROOT_JS = "el => !!el.shadowRoot"

SHADOW_INPUTS_JS = """
el => el.shadowRoot
    ? Array.from(el.shadowRoot.querySelectorAll('input, select, textarea'))
    : []
"""

FIRST_ELEMENTS_JS = "limit => Array.from(document.querySelectorAll('*')).slice(0, limit)"

SCAN_SHADOW_HOSTS_JS = """
() => {
    const hosts = [];
    for (const el of document.querySelectorAll('*')) {
        if (el.shadowRoot) hosts.push(el);
    }
    return hosts;
}
"""

DESCRIBE_JS = """
el => ({
    tag: el.tagName.toLowerCase(),
    id: el.id || null,
    name: el.getAttribute('name'),
    type: el.getAttribute('type'),
    src: el.getAttribute('src'),
    classes: Array.from(el.classList || []),
})
"""


async def _elements_of(handle: JSHandle) -> List[ElementHandle]:
    """把 JS 返回的元素数组拆成 ElementHandle 列表"""
    props = await handle.get_properties()
    elements = []
    for key in sorted(props, key=lambda k: int(k) if k.isdigit() else -1):
        if not key.isdigit():
            continue
        element = props[key].as_element()
        if element is not None:
            elements.append(element)
    await handle.dispose()
    return elements


class Perception:
    """
    感知模块：按定位链查找元素，枚举 iframe / shadow host。

    shadow DOM 内的元素无法用普通 selector 访问，一律通过注入 JS 获取。
    """

    def __init__(self, session: BrowserSession):
        self.session = session

    async def find_with_fallback(self, strategy: LocatorStrategy) -> Optional[ElementHandle]:
        """
        依次尝试定位链中的每条规则，返回第一个存在且可见的元素。

        每条规则最多等待 locator_timeout 秒；全部失败返回 None，不抛异常。
        """
        settings = self.session.settings
        timeout = settings.ms(settings.locator_timeout)
        for selector in strategy:
            try:
                element = await self.session.frame.wait_for_selector(
                    selector.to_playwright(), state="attached", timeout=timeout
                )
            except PlaywrightTimeoutError:
                continue
            except Exception as e:
                print(f"  ⚠️ Locator {selector} errored: {e}")
                continue

            if element is None:
                continue
            try:
                visible = await element.is_visible()
            except Exception as e:
                print(f"  ⚠️ Visibility check for {selector} errored: {e}")
                continue
            if visible:
                print(f"  ✅ Element found using: {selector}")
                return element
        return None

    async def find_required(self, strategy: LocatorStrategy, field: str) -> ElementHandle:
        element = await self.find_with_fallback(strategy)
        if element is None:
            raise ElementNotFound(f"{field} field not found")
        return element

    async def interactive_elements(self) -> Dict[str, List[ElementHandle]]:
        """当前焦点下的 input / select / textarea"""
        frame = self.session.frame
        return {
            "input": await frame.query_selector_all("input"),
            "select": await frame.query_selector_all("select"),
            "textarea": await frame.query_selector_all("textarea"),
        }

    async def iframes(self) -> List[ElementHandle]:
        return await self.session.frame.query_selector_all("iframe")

    async def first_elements(self, limit: int) -> List[ElementHandle]:
        """文档中前 limit 个元素（只把这几个元素的句柄传回 Python）"""
        handle = await self.session.frame.evaluate_handle(FIRST_ELEMENTS_JS, limit)
        return await _elements_of(handle)

    async def describe(self, element: ElementHandle) -> ElementSnapshot:
        data = await element.evaluate(DESCRIBE_JS)
        return ElementSnapshot(
            tag=data["tag"],
            element_id=data.get("id"),
            name=data.get("name"),
            input_type=data.get("type"),
            src=data.get("src"),
            classes=data.get("classes") or [],
        )

    # -------------------- shadow DOM --------------------

    async def heuristic_shadow_hosts(self) -> List[ElementHandle]:
        return await self.session.frame.query_selector_all(SHADOW_HOST_XPATH)

    async def scan_shadow_hosts(self) -> List[ElementHandle]:
        """遍历整个文档，找出所有挂载了 shadow root 的元素"""
        handle = await self.session.frame.evaluate_handle(SCAN_SHADOW_HOSTS_JS)
        return await _elements_of(handle)

    async def has_shadow_root(self, host: ElementHandle) -> bool:
        return bool(await host.evaluate(HAS_SHADOW_ROOT_JS))

    async def shadow_inputs(self, host: ElementHandle) -> List[ElementHandle]:
        handle = await host.evaluate_handle(SHADOW_INPUTS_JS)
        return await _elements_of(handle)
