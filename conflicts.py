# conflicts.py
# Pairwise time-overlap test between two sections.

from sections import Section

__all__ = ["section_conflicts"]


def section_conflicts(a: Section, b: Section) -> bool:
    """Return True if the two sections meet at overlapping times on a shared day.

    A section whose schedule string cannot be parsed is treated as never
    conflicting: overlap cannot be proven, so none is reported. Intervals
    are half-open, so a class ending at 11:30 and one starting at 11:30 do
    not clash.
    """
    pa, pb = a.parsed, b.parsed
    if pa is None or pb is None:
        return False
    if set(pa.days).isdisjoint(pb.days):
        return False
    return pa.start_time < pb.end_time and pb.start_time < pa.end_time
