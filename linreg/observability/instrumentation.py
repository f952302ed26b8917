#!filepath: linreg/observability/instrumentation.py
from __future__ import annotations

from dataclasses import dataclass
from contextlib import contextmanager
from collections import OrderedDict
from typing import Dict

from linreg.observability.timer import Timer
from linreg.utils.logger import logs


@dataclass
class Instrumentation:
    """
    Instrumentation (leaf-only accounting + parent scope).

    Rules:
    1. The timeline only records leaf timers (record=True)
    2. Parent timers (record=False) only bound wall time
    3. record=False has no side effect
    4. Nothing is logged on the hot path
    """

    enabled: bool = True

    def __post_init__(self):
        self._timer = Timer(enabled=self.enabled)

        # timeline: OrderedDict[leaf_name, elapsed_seconds]
        self.timeline: Dict[str, float] = OrderedDict()

    # ---------------------------------------------------------
    # Context manager timer (single entry point)
    # ---------------------------------------------------------
    def timer(self, name: str, *, record: bool = True):
        inst = self

        @contextmanager
        def _ctx():
            if not inst.enabled:
                yield
                return

            inst._timer.start(name)
            try:
                yield
            finally:
                elapsed = inst._timer.end(name)
                if record:
                    inst.timeline[name] = elapsed

        return _ctx()

    # ---------------------------------------------------------
    # Timeline report (cold path)
    # ---------------------------------------------------------
    def report_timeline(self, title: str) -> None:
        if not self.timeline:
            return
        total = sum(self.timeline.values())
        logs.info(f"[Timeline] {title} total={total:.4f}s")
        for name, elapsed in self.timeline.items():
            logs.info(f"[Timeline]   {name:<24} {elapsed:.4f}s")


# -------------------------------------------------------------
# No-op Instrumentation (observability disabled)
# -------------------------------------------------------------
class NoOpInstrumentation:

    @property
    def timeline(self) -> Dict[str, float]:
        return {}

    def timer(self, name: str, *, record: bool = True):
        return _NoOpTimer()

    def report_timeline(self, title: str) -> None:
        pass


class _NoOpTimer:
    def __enter__(self):
        pass

    def __exit__(self, exc_type, exc, tb):
        pass
