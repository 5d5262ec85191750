"""表单探测核心类"""

import asyncio
import sys
import threading
import traceback
from datetime import datetime
from typing import Optional

from playwright.async_api import ElementHandle
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import Settings
from .controller import Controller
from .errors import ElementNotFound, NavigationTimeout
from .models import LocatorStrategy, Selector
from .perception import Perception
from .report import Report
from .session import BrowserSession, open_session

# 定位链：越具体越靠前
FIRST_NAME_LOCATORS: LocatorStrategy = [
    Selector.name("fname"),
    Selector.id("fname"),
    Selector.xpath("//input[@placeholder='First Name' or @name='fname']"),
    Selector.css("input[name='fname'], input[placeholder*='First']"),
]

EMAIL_LOCATORS: LocatorStrategy = [
    Selector.name("email"),
    Selector.name("emailid"),
    Selector.xpath("//input[@type='email' or contains(@placeholder, 'Email')]"),
    Selector.css("input[type='email'], input[name*='email']"),
]

COUNTRY_LOCATORS: LocatorStrategy = [
    Selector.name("country"),
    Selector.id("country"),
    Selector.xpath("//select[contains(@name, 'country')]"),
    Selector.css("select[name*='country'], select[id*='country']"),
]

FRAME_INPUT_LIMIT = 2
SHADOW_INPUT_LIMIT = 3
NESTED_SCAN_LIMIT = 10


class FormProbe:
    """表单探测：依次执行基础字段、iframe、shadow DOM、嵌套场景检查"""

    def __init__(self, session: BrowserSession, report: Optional[Report] = None):
        self.session = session
        self.settings = session.settings
        self.perception = Perception(session)
        self.controller = Controller(session)
        self.report = report or Report()

    async def navigate(self, url: Optional[str] = None):
        """打开页面并等待 body 可见，超时抛 NavigationTimeout"""
        url = url or self.settings.url
        print(f"\n1. Navigating to: {url}")
        timeout = self.settings.ms(self.settings.page_timeout)
        try:
            await self.session.page.goto(url, timeout=timeout)
            await self.session.page.wait_for_selector("body", state="visible", timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeout(f"page not ready within {self.settings.page_timeout:g}s: {url}") from e
        print("✅ Page loaded successfully")

        await self.session.pause(self.settings.settle_seconds)

    # -------------------- 基础表单 --------------------

    async def check_text_field(self, field: str, locators: LocatorStrategy, value: str):
        print(f"\n➤ Testing {field} Field:")
        try:
            element = await self.perception.find_required(locators, field)
            self.report.record(await self.controller.interact(element, value, field))
        except ElementNotFound as e:
            print(f"❌ {e}")
            self.report.record_failure(field, str(e))
        except Exception as e:
            print(f"❌ {field} test failed: {e}")
            self.report.record_failure(field, str(e))

    async def check_dropdown(self, field: str, locators: LocatorStrategy, text: str):
        print(f"\n➤ Testing {field}:")
        try:
            element = await self.perception.find_required(locators, field)
            self.report.record(await self.controller.select_option(element, text, field))
        except ElementNotFound as e:
            print(f"❌ {e}")
            self.report.record_failure(field, str(e))
        except Exception as e:
            print(f"❌ {field} test failed: {e}")
            self.report.record_failure(field, str(e))

    async def check_basic_fields(self) -> bool:
        await self.check_text_field("First Name", FIRST_NAME_LOCATORS, self.settings.first_name)
        await self.check_text_field("Email", EMAIL_LOCATORS, self.settings.email)
        await self.check_dropdown("Country Dropdown", COUNTRY_LOCATORS, self.settings.country)
        return True

    # -------------------- iframe --------------------

    async def probe_context(self, label: str):
        """统计当前焦点下的可交互元素，并尝试填写前两个 text/email 输入框"""
        try:
            found = await self.perception.interactive_elements()
        except Exception as e:
            print(f"  ⚠️ {label} element testing failed: {e}")
            self.report.record_failure(f"{label} elements", str(e))
            return

        total = sum(len(elements) for elements in found.values())
        print(f"  Found {total} interactive element(s) in {label}")

        for i, element in enumerate(found["input"][:FRAME_INPUT_LIMIT], start=1):
            field = f"{label} Input {i}"
            try:
                input_type = (await element.get_attribute("type") or "text").lower()
                if input_type not in ("text", "email"):
                    continue
                print(f"  🔸 Testing {label} input[{input_type}] #{i}")
                self.report.record(await self.controller.interact(element, f"{label}Test{i}", field))
            except Exception as e:
                print(f"  ⚠️ {label} input {i} test failed: {e}")
                self.report.record_failure(field, str(e))

    async def probe_frames(self) -> bool:
        """逐个进入 iframe 执行 probe_context；单个 iframe 失败不影响其余"""
        print("\n➤ Testing iFrame Elements:")
        try:
            iframes = await self.perception.iframes()
        except Exception as e:
            print(f"❌ iFrame test failed: {e}")
            self.report.record_failure("iframes", str(e))
            return False

        if not iframes:
            print("ℹ️ 0 iframes found on this page")
            return True
        print(f"Found {len(iframes)} iframe(s) on the page")

        for index, iframe in enumerate(iframes):
            try:
                snap = await self.perception.describe(iframe)
                print(f"📍 Processing iframe: ID='{snap.element_id or 'No id'}', Src='{snap.src or 'No src attribute'}'")
                async with self.session.frame_scope(iframe, index):
                    print("✅ Successfully switched to iframe")
                    await self.probe_context("iframe")
                print("✅ Switched back to main content")
            except Exception as e:
                print(f"⚠️ iFrame processing error: {e}")
                self.report.record_failure(f"iframe #{index + 1}", str(e))
        return True

    # -------------------- shadow DOM --------------------

    async def probe_shadow_host(self, host: ElementHandle):
        try:
            snap = await self.perception.describe(host)
            print(f"📍 Checking element: {snap.label()} for Shadow DOM")
            if not await self.perception.has_shadow_root(host):
                print("  ℹ️ No shadow DOM attached to this element")
                return

            print("✅ Shadow DOM found! Attempting to interact with shadow elements")
            inputs = await self.perception.shadow_inputs(host)
            if not inputs:
                print("  ℹ️ No interactive elements found in Shadow DOM")
                return
            print(f"Found {len(inputs)} input element(s) in Shadow DOM")
        except Exception as e:
            print(f"  ⚠️ Shadow DOM check failed: {e}")
            self.report.record_failure("shadow host", str(e))
            return

        for i, element in enumerate(inputs[:SHADOW_INPUT_LIMIT], start=1):
            field = f"Shadow Input {i}"
            try:
                inner = await self.perception.describe(element)
                input_type = (inner.input_type or "text").lower()
                print(f"  🔸 Testing Shadow DOM {inner.tag}[{input_type}]")
                if inner.tag == "input" and input_type == "text":
                    self.report.record(await self.controller.set_shadow_value(element, f"ShadowTest{i}", field))
            except Exception as e:
                print(f"  ⚠️ Shadow element {i} interaction failed: {e}")
                self.report.record_failure(field, str(e))

    async def scan_for_shadow_hosts(self):
        print("🔍 Scanning page for Shadow DOM using JavaScript...")
        try:
            hosts = await self.perception.scan_shadow_hosts()
        except Exception as e:
            print(f"⚠️ JavaScript Shadow DOM scan failed: {e}")
            self.report.record_failure("shadow scan", str(e))
            return []

        if hosts:
            print(f"✅ Found {len(hosts)} Shadow DOM host(s) via JavaScript scan")
        else:
            print("ℹ️ No Shadow DOM elements found on this page")
        return hosts

    async def probe_shadow_hosts(self) -> bool:
        """
        先用启发式 XPath 找 shadow host，一个都没有时退回整页脚本扫描。
        扫描到的 host 与启发式结果走同一套检查。
        """
        print("\n➤ Testing Shadow DOM Elements:")
        try:
            hosts = await self.perception.heuristic_shadow_hosts()
        except Exception as e:
            print(f"❌ Shadow DOM test failed: {e}")
            self.report.record_failure("shadow hosts", str(e))
            return False

        print(f"Found {len(hosts)} potential shadow DOM host(s)")
        if not hosts:
            print("ℹ️ No potential Shadow DOM hosts found")
            hosts = await self.scan_for_shadow_hosts()

        for host in hosts:
            await self.probe_shadow_host(host)
        return True

    # -------------------- iframe + shadow DOM --------------------

    async def probe_nested(self) -> bool:
        """在每个 iframe 的前若干个元素中查找 shadow root"""
        print("\n➤ Testing Nested Scenarios (iFrame + Shadow DOM):")
        try:
            iframes = await self.perception.iframes()
        except Exception as e:
            print(f"❌ Nested scenarios test failed: {e}")
            self.report.record_failure("nested", str(e))
            return False

        if not iframes:
            print("ℹ️ 0 iframes found, no nested scenarios to check")
            return True

        for index, iframe in enumerate(iframes):
            try:
                found = False
                async with self.session.frame_scope(iframe, index):
                    for element in await self.perception.first_elements(NESTED_SCAN_LIMIT):
                        if await self.perception.has_shadow_root(element):
                            found = True
                            break

                if found:
                    print("✅ Found nested Shadow DOM inside iframe!")
                    self.report.note(f"iframe #{index + 1} hosts shadow DOM")
                else:
                    print("ℹ️ No Shadow DOM found inside this iframe")
            except Exception as e:
                print(f"⚠️ Nested scenario test error: {e}")
                self.report.record_failure(f"nested iframe #{index + 1}", str(e))
        return True

    async def run(self) -> Report:
        """
        执行完整流程。

        启动之后的任何异常都在这里被捕获并输出，汇总总会打印。
        """
        print("=== CloudQA COMPLETE Automation Practice Test ===")
        print(f"Starting comprehensive test at: {datetime.now()}")
        try:
            await self.navigate()

            print("\n🔸 SECTION 1: Basic Form Testing")
            self.report.section_done("basic", await self.check_basic_fields())

            print("\n🔸 SECTION 2: Advanced Scenarios")
            self.report.section_done("iframe", await self.probe_frames())
            self.report.section_done("shadow", await self.probe_shadow_hosts())
            self.report.section_done("nested", await self.probe_nested())
        except Exception as e:
            print(f"❌ Test suite failed with error: {e}")
            print(f"Stack trace: {traceback.format_exc()}")
            self.report.record_failure("run", str(e))
        finally:
            print("\n" + self.report.format_summary())
            print(f"\nComplete test execution finished at: {datetime.now()}")
        return self.report


HOLD_PROMPT = "Press Enter to close the browser..."


async def hold_until_keypress():
    """
    等待用户按回车；非交互终端直接返回。

    input() 放在守护线程里执行：Ctrl-C 时事件循环退出，不会卡在等待回车的线程上。
    """
    if not sys.stdin or not sys.stdin.isatty():
        return

    loop = asyncio.get_running_loop()
    pressed = loop.create_future()

    def _settle():
        if not pressed.done():
            pressed.set_result(None)

    def _wait_for_enter():
        try:
            input(HOLD_PROMPT)
        except EOFError:
            pass
        try:
            loop.call_soon_threadsafe(_settle)
        except RuntimeError:
            # 事件循环已关闭
            return

    threading.Thread(target=_wait_for_enter, name="hold-until-keypress", daemon=True).start()
    await pressed


async def run_probe(settings: Settings) -> Report:
    """启动浏览器、执行探测，结束后无条件关闭浏览器"""
    async with open_session(settings) as session:
        report = await FormProbe(session).run()
        if settings.hold:
            await hold_until_keypress()
    return report
