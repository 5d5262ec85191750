"""报告模块：记录每个检查的结果并生成最终汇总"""

from typing import Dict, List

from .models import FieldProbeResult

SECTIONS = [
    ("basic", "Basic Form Fields Testing"),
    ("iframe", "iFrame Element Testing"),
    ("shadow", "Shadow DOM Testing"),
    ("nested", "Nested Scenarios Testing"),
]

BANNER = "=" * 60


class Report:
    """报告模块：保存字段结果、分区状态和步骤失败信息"""

    def __init__(self):
        self.results: List[FieldProbeResult] = []
        self.sections: Dict[str, str] = {}  # key -> completed|failed
        self.failures: List[str] = []
        self.notes: List[str] = []

    def record(self, result: FieldProbeResult) -> FieldProbeResult:
        self.results.append(result)
        return result

    def record_failure(self, step: str, message: str):
        """记录没有产生字段结果的失败（定位失败、iframe 切换失败等）"""
        self.failures.append(f"{step}: {message}")

    def note(self, message: str):
        self.notes.append(message)

    def section_done(self, key: str, ok: bool = True):
        self.sections[key] = "completed" if ok else "failed"

    @property
    def passed(self) -> List[FieldProbeResult]:
        return [r for r in self.results if r.passed]

    @property
    def failed(self) -> List[FieldProbeResult]:
        return [r for r in self.results if not r.passed]

    def format_summary(self) -> str:
        lines = [BANNER, "🎯 CLOUDQA COMPLETE AUTOMATION TEST SUMMARY", BANNER]
        for key, title in SECTIONS:
            status = self.sections.get(key)
            if status == "completed":
                lines.append(f"✅ {title} - COMPLETED")
            elif status == "failed":
                lines.append(f"❌ {title} - FAILED")
            else:
                lines.append(f"⏭️ {title} - NOT RUN")

        lines.append(BANNER)
        lines.append(f"Checks: {len(self.results)} | Passed: {len(self.passed)} | Failed: {len(self.failed)}")
        for r in self.results:
            mark = "✅" if r.passed else "❌"
            method_str = f" via {r.method}" if r.method else ""
            lines.append(f"  {mark} {r.field}: expected '{r.expected}', got '{r.shown_actual}'{method_str}")
        if self.failures:
            lines.append("Step failures:")
            lines.extend(f"  ⚠️ {f}" for f in self.failures)
        if self.notes:
            lines.append("Notes:")
            lines.extend(f"  ℹ️ {n}" for n in self.notes)
        lines.append(BANNER)
        return "\n".join(lines)
