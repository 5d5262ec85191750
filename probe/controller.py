"""执行模块：对元素执行点击 / 清空 / 输入，并回读结果"""

from email.utils import parseaddr
from typing import Any, Awaitable, Callable, Optional, Tuple

from playwright.async_api import ElementHandle
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .errors import InteractionTimeout, ProbeError, ScriptExecutionError
from .models import FieldProbeResult
from .session import BrowserSession

SCROLL_INTO_VIEW_JS = "el => el.scrollIntoView({behavior: 'smooth', block: 'center'})"
CLICK_JS = "el => el.click()"
CLEAR_JS = "el => { el.value = ''; }"
SET_VALUE_JS = """
(el, value) => {
    el.value = value;
    el.dispatchEvent(new Event('input', { bubbles: true }));
}
"""
READ_VALUE_JS = "el => (el.value === undefined || el.value === null) ? null : String(el.value)"
TAG_NAME_JS = "el => el.tagName.toLowerCase()"
SELECTED_TEXT_JS = "el => el.selectedIndex >= 0 ? el.options[el.selectedIndex].text.trim() : null"

Action = Callable[[], Awaitable[Any]]


def email_looks_valid(address: Optional[str]) -> bool:
    """语法层面的邮箱检查：能被解析为邮件地址，且形如 local@domain"""
    if not address or any(c.isspace() for c in address):
        return False
    _, parsed = parseaddr(address)
    if parsed != address:
        return False
    local, sep, domain = parsed.rpartition("@")
    if not sep or not local or not domain or "@" in local:
        return False
    return not (domain.startswith(".") or domain.endswith(".") or ".." in domain)


class Controller:
    """
    执行模块。

    每个交互步骤先走原生操作，失败后换成等价的 DOM 脚本操作；
    两者都失败才算该步骤失败（自动化浏览器可能拒绝某些元素上的合成事件）。
    """

    def __init__(self, session: BrowserSession):
        self.session = session

    async def with_fallback(self, action: str, primary: Action, secondary: Action) -> Tuple[str, Any]:
        """返回 (使用的方式, 结果)；native 与 script 都失败时抛 ScriptExecutionError"""
        try:
            return "native", await primary()
        except Exception as e:
            print(f"  ⚠️ {action} native failed, using script: {e}")
        try:
            return "script", await secondary()
        except Exception as e:
            raise ScriptExecutionError(action, e) from e

    async def read_value(self, element: ElementHandle) -> Optional[str]:
        _, value = await self.with_fallback(
            "read value",
            element.input_value,
            lambda: element.evaluate(READ_VALUE_JS),
        )
        return value

    async def _type_keys(self, element: ElementHandle, value: str) -> None:
        """模拟键盘逐字输入"""
        await element.focus()
        await self.session.page.keyboard.type(value)

    async def _wait_clickable(self, element: ElementHandle, field: str) -> None:
        timeout = self.session.settings.ms(self.session.settings.interaction_timeout)
        try:
            await element.wait_for_element_state("visible", timeout=timeout)
            await element.wait_for_element_state("enabled", timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise InteractionTimeout(f"{field} never became clickable") from e

    async def interact(self, element: ElementHandle, value: str, field: str) -> FieldProbeResult:
        """
        滚动 → 等待可点击 → 点击 → 清空 → 输入 → 回读并比较。

        任何失败都在本步骤内消化，返回 passed=False 的结果，不向外抛。
        """
        try:
            result = await self._interact(element, value, field)
        except Exception as e:
            print(f"  ❌ {field} field interaction failed: {e}")
            return FieldProbeResult.failure(field, value, str(e))

        if result.passed:
            print(f"  ✅ {field} field test PASSED - Value: '{result.actual}'")
            if "email" in field.lower():
                if email_looks_valid(result.actual):
                    print("  ✅ Email format validation PASSED")
                else:
                    print("  ⚠️ Email format validation FAILED")
        else:
            print(f"  ❌ {field} field test FAILED - Expected: '{value}', Got: '{result.shown_actual}'")
        return result

    async def _interact(self, element: ElementHandle, value: str, field: str) -> FieldProbeResult:
        settings = self.session.settings
        native_timeout = settings.ms(settings.locator_timeout)

        await self.with_fallback(
            "scroll",
            lambda: element.evaluate(SCROLL_INTO_VIEW_JS),
            element.scroll_into_view_if_needed,
        )
        await self.session.pause()

        await self._wait_clickable(element, field)

        await self.with_fallback(
            "click",
            lambda: element.click(timeout=native_timeout),
            lambda: element.evaluate(CLICK_JS),
        )
        await self.session.pause()

        await self.with_fallback(
            "clear",
            lambda: element.fill("", timeout=native_timeout),
            lambda: element.evaluate(CLEAR_JS),
        )
        await self.session.pause()

        method, _ = await self.with_fallback(
            "type",
            lambda: self._type_keys(element, value),
            lambda: element.evaluate(SET_VALUE_JS, value),
        )
        await self.session.pause()

        actual = await self.read_value(element)
        return FieldProbeResult.compare(field, value, actual, method=method)

    async def select_option(self, element: ElementHandle, text: str, field: str) -> FieldProbeResult:
        """按可见文本选择下拉项，并确认选中项文本完全一致"""
        settings = self.session.settings
        try:
            tag = await element.evaluate(TAG_NAME_JS)
            if tag != "select":
                raise ProbeError(f"{field} is a <{tag}>, not a <select>")
            await element.select_option(label=text, timeout=settings.ms(settings.locator_timeout))
            await self.session.pause()
            selected = await element.evaluate(SELECTED_TEXT_JS)
        except Exception as e:
            print(f"  ❌ {field} test failed: {e}")
            return FieldProbeResult.failure(field, text, str(e))

        result = FieldProbeResult.compare(field, text, selected, method="native")
        if result.passed:
            print(f"  ✅ {field} test PASSED - Selected: '{selected}'")
        else:
            print(f"  ❌ {field} test FAILED - Expected: '{text}', Got: '{result.shown_actual}'")
        return result

    async def set_shadow_value(self, element: ElementHandle, value: str, field: str) -> FieldProbeResult:
        """shadow DOM 内的元素只能通过脚本写值"""
        try:
            await element.evaluate(SET_VALUE_JS, value)
            await self.session.pause()
            actual = await element.evaluate(READ_VALUE_JS)
        except Exception as e:
            print(f"    ❌ Shadow DOM element interaction failed: {e}")
            return FieldProbeResult.failure(field, value, str(e))

        result = FieldProbeResult.compare(field, value, actual, method="script")
        if result.passed:
            print(f"    ✅ Shadow DOM element test PASSED - Value: '{actual}'")
        else:
            print(f"    ❌ Shadow DOM element test FAILED - Expected: '{value}', Got: '{result.shown_actual}'")
        return result
