"""Translation of repository events into pipeline triggers."""

from __future__ import annotations

from typing import Optional, Sequence

from .models import Trigger

_HEADS_PREFIX = "refs/heads/"


def branch_from_ref(ref: str) -> str:
    """Return the branch name for a ``refs/heads/...`` ref (or the ref itself)."""
    ref = ref.strip()
    if ref.startswith(_HEADS_PREFIX):
        return ref[len(_HEADS_PREFIX):]
    return ref


def trigger_for_push(ref: str, branches: Sequence[str]) -> Optional[Trigger]:
    """Return a trigger when ``ref`` is one of the watched branches."""
    branch = branch_from_ref(ref)
    if not branch or branch not in branches:
        return None
    return Trigger(kind="push", ref=branch)


def trigger_for_dispatch(ref: str | None = None) -> Trigger:
    """Return a trigger for a manual run."""
    return Trigger(kind="dispatch", ref=branch_from_ref(ref) if ref else None)


__all__ = ["branch_from_ref", "trigger_for_dispatch", "trigger_for_push"]
