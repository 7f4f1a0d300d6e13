"""
Percentage and average helpers used by the report builders.

Rates are percentages as floats. They are neither rounded nor clamped;
an undefined rate (zero denominator) is 0.0.
"""

from statistics import fmean


def rate(numerator, denominator):
    """
    Percentage of ``numerator`` over ``denominator``.

    Examples:
        rate(3, 4) -> 75.0
        rate(5, 0) -> 0.0
    """
    if denominator > 0:
        return numerator / denominator * 100
    return 0.0


def efficiency(created, completed):
    """
    Completion efficiency for a period.

    A period that completed work without creating any counts as fully
    efficient (100.0); otherwise it is the completed/created rate.
    """
    if created == 0 and completed > 0:
        return 100.0
    return rate(completed, created)


def average_hours(durations):
    """Arithmetic mean of ``durations`` (hours), 0.0 for an empty sample."""
    durations = list(durations)
    if not durations:
        return 0.0
    return fmean(durations)
