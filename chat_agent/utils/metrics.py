"""
Fail-soft metrics - count every failure that was swallowed and degraded.

The agent favours conversational availability: tool errors, ceiling hits and
synthesis failures become degraded-but-successful replies. Counting each of
them here keeps that policy observable:
- Which tools fail most often
- How often the iteration ceiling is reached
- How often voice replies lose their audio
"""

from collections import Counter
from typing import Any, Dict
from loguru import logger


# Global metrics (in-memory; one process)
degradation_metrics: Dict[str, Counter] = {}


def record_degradation(component: str, reason: str) -> None:
    """
    Record one swallowed failure.

    Args:
        component: Where the failure was absorbed ("tool:sendEmail", "orchestrator", "voice")
        reason: Short machine-readable cause ("exception", "timeout", "ceiling")

    Example:
        >>> record_degradation("orchestrator", "ceiling")
        >>> degradation_metrics["orchestrator"]["ceiling"]
        1
    """
    degradation_metrics.setdefault(component, Counter())[reason] += 1
    logger.bind(event="degradation", component=component, reason=reason).debug(
        f"Recorded degradation: {component} ({reason})"
    )


def get_metrics_summary() -> Dict[str, Any]:
    """
    Get a summary of fail-soft metrics.

    Returns:
        Dict with total count and per-component breakdown
    """
    by_component = {name: dict(counter) for name, counter in degradation_metrics.items()}
    total = sum(sum(counter.values()) for counter in degradation_metrics.values())
    return {
        "total_degradations": total,
        "by_component": by_component,
    }


def log_metrics_summary() -> None:
    """Log a summary of fail-soft metrics at INFO level."""
    summary = get_metrics_summary()

    if summary["total_degradations"] == 0:
        logger.info("No degradations recorded yet")
        return

    logger.info("=" * 60)
    logger.info("FAIL-SOFT METRICS")
    logger.info("=" * 60)
    logger.info(f"Total degradations: {summary['total_degradations']}")

    all_reasons = Counter()
    for component, reasons in summary["by_component"].items():
        for reason, count in reasons.items():
            all_reasons[f"{component}/{reason}"] += count

    logger.info("Top causes:")
    for cause, count in all_reasons.most_common(5):
        logger.info(f"  - {cause}: {count}")


def reset_metrics() -> None:
    """Reset all metrics (useful for testing)."""
    degradation_metrics.clear()
    logger.debug("Fail-soft metrics reset")
