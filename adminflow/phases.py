"""Group a flat step list into ordered phase buckets."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .constants import DEFAULT_FALLBACK_PHASE
from .models import PhaseBucket, Step


def group_phases(
    steps: Sequence[Step],
    phase_order: Sequence[str],
    fallback_label: str = DEFAULT_FALLBACK_PHASE,
) -> List[PhaseBucket]:
    """Partition ``steps`` into buckets following ``phase_order``.

    Steps keep their workflow order inside a bucket. Steps whose phase is
    missing or absent from ``phase_order`` are gathered into one bucket
    named ``fallback_label`` placed after every known phase, or into the
    declared phase of that name when there is one. Phases without steps
    produce no bucket.
    """

    positions = {name: pos for pos, name in enumerate(phase_order)}
    known: Dict[str, PhaseBucket] = {}
    fallback: Optional[PhaseBucket] = None

    for index, step in enumerate(steps):
        label = step.phase if step.phase in positions else None
        if label is None and fallback_label in positions:
            # A declared phase named like the fallback absorbs unknown steps.
            label = fallback_label
        if label is not None:
            bucket = known.get(label)
            if bucket is None:
                bucket = PhaseBucket(name=label, position=positions[label])
                known[label] = bucket
            bucket.entries.append((index, step))
        else:
            if fallback is None:
                fallback = PhaseBucket(name=fallback_label, position=len(phase_order))
            fallback.entries.append((index, step))

    buckets = sorted(known.values(), key=lambda b: b.position)
    if fallback is not None:
        buckets.append(fallback)
    return buckets


def find_bucket(buckets: Sequence[PhaseBucket], name: str) -> Optional[PhaseBucket]:
    for bucket in buckets:
        if bucket.name == name:
            return bucket
    return None


def phase_names(buckets: Sequence[PhaseBucket]) -> List[str]:
    return [bucket.name for bucket in buckets]
