"""
CloudQA Automation Practice Form 探测脚本 - 基于 Playwright

依次检查：基础字段（姓名 / 邮箱 / 国家下拉框）、iframe、shadow DOM、iframe 内嵌 shadow DOM，
最后打印汇总。所有失败都以文本形式输出，进程始终以 0 退出（浏览器启动失败除外）。

依赖安装：
    pip install -e .
    playwright install chromium

运行示例：
    python cloudqa_probe.py

可选配置见 .env.example（PROBE_URL、PROBE_HEADLESS 等）。
"""

import asyncio

from probe import Settings, run_probe


def main() -> int:
    print("CloudQA Automation Practice Form - COMPLETE Automation Test")
    print("Including: Basic Forms + iFrames + Shadow DOM + Nested Scenarios")
    print("=" * 70)

    settings = Settings.from_env()
    asyncio.run(run_probe(settings))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
