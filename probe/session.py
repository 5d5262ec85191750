"""浏览器会话：启动 / 关闭浏览器，并管理 iframe 焦点"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import ElementHandle, Frame, Page, async_playwright

from .config import CHROMIUM_ARGS, Settings
from .errors import FrameSwitchError, StartupError
from .models import FrameContext


class BrowserSession:
    """
    持有唯一的 Page，并显式记录当前焦点（主文档 / iframe）。

    所有查询都通过 self.frame 进行，因此切换焦点只需替换 frame。
    状态机：MainDocument --enter_frame--> InsideFrame --exit_frame--> MainDocument
    """

    def __init__(self, page: Page, settings: Settings):
        self.page = page
        self.settings = settings
        self.frame: Frame = page.main_frame
        self.context = FrameContext.main_document()
        self.frame_switches = 0

    @property
    def in_main_document(self) -> bool:
        return self.context.is_main_document

    async def enter_frame(self, iframe: ElementHandle, index: int = 0) -> Frame:
        """切换焦点到指定 iframe；失败时焦点保持在主文档"""
        if not self.in_main_document:
            raise FrameSwitchError(f"already inside {self.context}, exit before entering another frame")

        frame = await iframe.content_frame()
        if frame is None:
            raise FrameSwitchError("element has no content frame")

        frame_id = await iframe.get_attribute("id")
        src = await iframe.get_attribute("src")
        self.frame = frame
        self.context = FrameContext(frame_id=frame_id, src=src, index=index)
        self.frame_switches += 1
        return frame

    def exit_frame(self) -> None:
        """回到主文档（幂等）"""
        self.frame = self.page.main_frame
        self.context = FrameContext.main_document()

    @asynccontextmanager
    async def frame_scope(self, iframe: ElementHandle, index: int = 0) -> AsyncIterator[Frame]:
        """进入 iframe，无论内部成功与否，退出时都回到主文档"""
        frame = await self.enter_frame(iframe, index)
        try:
            yield frame
        finally:
            self.exit_frame()

    async def pause(self, seconds: Optional[float] = None) -> None:
        """固定等待，给页面渲染 / 事件处理留时间"""
        delay = self.settings.action_delay if seconds is None else seconds
        if delay > 0:
            await asyncio.sleep(delay)


@asynccontextmanager
async def open_session(settings: Settings) -> AsyncIterator[BrowserSession]:
    """
    启动 Chromium 并返回会话，退出时无条件关闭浏览器。

    启动阶段的任何异常都包装为 StartupError 向外抛出。
    """
    async with async_playwright() as p:
        try:
            browser = await p.chromium.launch(headless=settings.headless, args=CHROMIUM_ARGS)
        except Exception as e:
            raise StartupError(f"could not launch Chromium: {e}") from e

        try:
            context = await browser.new_context(viewport={"width": 1920, "height": 1080})
            page = await context.new_page()
            page.set_default_timeout(settings.ms(settings.page_timeout))
        except Exception as e:
            await browser.close()
            raise StartupError(f"could not open a page: {e}") from e

        try:
            yield BrowserSession(page, settings)
        finally:
            await browser.close()
            print("✓ Browser closed")
