"""
Decision emission.

Turns a finished accumulator into the immutable decision for its group.
"""
from domain.decisions import TriggerDecision
from .accumulator import GroupAccumulator


def emit_decision(accumulator: GroupAccumulator) -> TriggerDecision:
    """
    Build the decision of the accumulator's group.

    Raises:
        ValueError: If the accumulator has never been opened
    """
    if not accumulator.is_open:
        raise ValueError("Cannot emit a decision for an accumulator that holds no group")

    return TriggerDecision(
        group_key=accumulator.group_key,
        flags=accumulator.flags,
        n_records=accumulator.n_records,
        n_malformed=accumulator.n_malformed,
    )
