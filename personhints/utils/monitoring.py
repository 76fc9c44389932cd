"""Monitoring utilities leveraging Prometheus client."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

hint_runs_total = Counter(
    "person_hints_runs_total",
    "Pipeline runs by outcome",
    ["outcome"],
)

hints_emitted_total = Counter(
    "person_hints_emitted_total",
    "Hints handed to the registry",
)

anchor_misses_total = Counter(
    "person_hints_anchor_misses_total",
    "Word groups whose text could not be located at their anchor",
)

snapshot_loads_total = Counter(
    "person_hints_snapshot_loads_total",
    "Directory snapshot loads by outcome",
    ["outcome"],
)

hint_run_latency_seconds = Histogram(
    "person_hints_run_latency_seconds",
    "Pipeline run latency, debounce included",
)


def observe_run(outcome: str, duration_seconds: float, hint_count: int = 0) -> None:
    hint_runs_total.labels(outcome=outcome).inc()
    hint_run_latency_seconds.observe(duration_seconds)
    if hint_count:
        hints_emitted_total.inc(hint_count)
