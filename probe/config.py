"""运行配置：从环境变量 / .env 文件读取"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

BASE_URL = "https://app.cloudqa.io/home/AutomationPracticeForm"

# 与原始表单测试一致的 Chromium 启动参数
CHROMIUM_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-extensions",
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--window-size=1920,1080",
    "--disable-web-security",
    "--allow-running-insecure-content",
]

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


@dataclass
class Settings:
    """探测运行参数（时间单位：秒）"""
    url: str = BASE_URL
    headless: bool = False
    page_timeout: float = 20.0
    locator_timeout: float = 5.0
    interaction_timeout: float = 20.0
    settle_seconds: float = 3.0
    action_delay: float = 0.5
    first_name: str = "CloudQA"
    email: str = "cloudqa.advanced@test.com"
    country: str = "India"
    hold: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        defaults = cls()
        return cls(
            url=os.getenv("PROBE_URL") or defaults.url,
            headless=_env_bool("PROBE_HEADLESS", defaults.headless),
            page_timeout=_env_float("PROBE_PAGE_TIMEOUT", defaults.page_timeout),
            locator_timeout=_env_float("PROBE_LOCATOR_TIMEOUT", defaults.locator_timeout),
            interaction_timeout=_env_float("PROBE_INTERACTION_TIMEOUT", defaults.interaction_timeout),
            settle_seconds=_env_float("PROBE_SETTLE_SECONDS", defaults.settle_seconds),
            action_delay=_env_float("PROBE_ACTION_DELAY", defaults.action_delay),
            first_name=os.getenv("PROBE_FIRST_NAME") or defaults.first_name,
            email=os.getenv("PROBE_EMAIL") or defaults.email,
            country=os.getenv("PROBE_COUNTRY") or defaults.country,
            hold=_env_bool("PROBE_HOLD", defaults.hold),
        )

    def ms(self, seconds: float) -> float:
        """Playwright 的超时参数以毫秒为单位"""
        return seconds * 1000
