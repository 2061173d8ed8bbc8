"""
Tabular summaries of orchestrator output for callers and operators.

Nothing here is used on the request path; these helpers turn lists of
``TaskResult`` objects, provider stats and health maps into DataFrames and
console summaries.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy import stats

from .models import ProviderConfig, ProviderId, TaskResult

# Row label for results that could not be attributed to any provider
UNATTRIBUTED = "unattributed"

RESULT_COLUMNS: list[str] = [
    "success",
    "provider",
    "elapsed_ms",
    "tokens_used",
    "attempts",
    "error_category",
    "error",
]


def wilson_confidence_interval(
    p: float,
    n: int,
    confidence: float = 0.95,
) -> tuple[float, float]:
    """
    Bounds on a provider's true success rate given a small sample.

    Uses the Wilson score method, which stays inside [0, 1] and behaves
    sensibly for the handful of requests a single batch usually sends to
    one provider.

    Args:
        p: Fraction of that provider's requests that succeeded.
        n: How many requests the provider handled.
        confidence: Coverage of the interval.

    Returns:
        ``(low, high)`` success-rate bounds; ``(0.0, 0.0)`` when ``n`` is 0.
    """
    if n == 0:
        return (0.0, 0.0)

    z_sq = stats.norm.ppf(0.5 + confidence / 2) ** 2
    scale = 1 + z_sq / n
    midpoint = (p + z_sq / (2 * n)) / scale
    half_width = np.sqrt(z_sq * (p * (1 - p) / n + z_sq / (4 * n * n))) / scale

    return (max(0.0, midpoint - half_width), min(1.0, midpoint + half_width))


def results_to_frame(results: list[TaskResult]) -> pd.DataFrame:
    """
    One row per result, in input order.

    ``provider`` is the provider's string id, or :data:`UNATTRIBUTED`.
    Generated payloads are left out to keep the frame small.
    """
    rows = []
    for result in results:
        row = result.to_dict()
        row["provider"] = row["provider"] or UNATTRIBUTED
        rows.append({col: row[col] for col in RESULT_COLUMNS})
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def summarize_by_provider(results: list[TaskResult]) -> pd.DataFrame:
    """
    Aggregate results per provider.

    Args:
        results: Results from ``execute`` / ``execute_batch``.

    Returns:
        DataFrame indexed by provider with columns ``requests``,
        ``succeeded``, ``failed``, ``success_rate``, ``ci_lower_95``,
        ``ci_upper_95``, ``mean_elapsed_ms`` and ``estimated_tokens``.
        Empty input gives an empty frame with those columns.
    """
    columns = [
        "requests",
        "succeeded",
        "failed",
        "success_rate",
        "ci_lower_95",
        "ci_upper_95",
        "mean_elapsed_ms",
        "estimated_tokens",
    ]
    df = results_to_frame(results)
    if df.empty:
        return pd.DataFrame(columns=columns).rename_axis("provider")

    records: list[dict] = []
    for provider, subset in df.groupby("provider", sort=False):
        n = len(subset)
        succeeded = int(subset["success"].sum())
        rate = succeeded / n
        ci_lo, ci_hi = wilson_confidence_interval(rate, n)
        records.append({
            "provider": provider,
            "requests": n,
            "succeeded": succeeded,
            "failed": n - succeeded,
            "success_rate": round(rate, 4),
            "ci_lower_95": round(ci_lo, 4),
            "ci_upper_95": round(ci_hi, 4),
            "mean_elapsed_ms": round(float(subset["elapsed_ms"].mean()), 1),
            "estimated_tokens": int(subset["tokens_used"].sum()),
        })

    return pd.DataFrame(records).set_index("provider")[columns]


def stats_to_frame(
    stats_map: dict[ProviderId, ProviderConfig],
    health: dict[ProviderId, bool] | None = None,
) -> pd.DataFrame:
    """
    Provider configuration table from ``get_model_stats()``.

    Args:
        stats_map: Provider id → config.
        health: Optional output of ``health_check()``; adds a ``healthy``
            column when given.

    Returns:
        DataFrame indexed by provider id, in declaration order.
    """
    rows = []
    for provider_id, config in stats_map.items():
        row = {
            "provider": provider_id.value,
            "display_name": config.display_name,
            "available": config.is_available,
            "cost_per_request": config.cost_per_request,
            "expected_latency_ms": config.expected_latency_ms,
            "strengths": ", ".join(sorted(c.value for c in config.capabilities)),
        }
        if health is not None:
            row["healthy"] = bool(health.get(provider_id, False))
        rows.append(row)
    return pd.DataFrame(rows).set_index("provider")


def print_batch_summary(results: list[TaskResult]) -> pd.DataFrame:
    """
    Print a console summary of a batch and return the per-provider table.
    """
    summary = summarize_by_provider(results)
    total = len(results)
    succeeded = sum(1 for r in results if r.success)

    sep = "=" * 60
    print(f"\n{sep}")
    print("BATCH SUMMARY")
    print(f"  Requests:  {total:,}")
    print(f"  Succeeded: {succeeded:,}")
    print(f"  Failed:    {total - succeeded:,}")
    if not summary.empty:
        print()
        print(summary.to_string())
    print(f"{sep}\n")

    return summary
