"""Tests for push and dispatch triggers."""

from __future__ import annotations

from notespub.triggers import branch_from_ref, trigger_for_dispatch, trigger_for_push


def test_push_to_watched_branch_triggers_run() -> None:
    trigger = trigger_for_push("refs/heads/main", ["main"])

    assert trigger is not None
    assert trigger.kind == "push"
    assert trigger.ref == "main"


def test_push_to_other_branch_is_ignored() -> None:
    assert trigger_for_push("refs/heads/feature/notes", ["main"]) is None
    assert trigger_for_push("refs/tags/v1.0", ["main"]) is None
    assert trigger_for_push("", ["main"]) is None


def test_dispatch_always_triggers() -> None:
    trigger = trigger_for_dispatch("refs/heads/release")

    assert trigger.kind == "dispatch"
    assert trigger.ref == "release"
    assert trigger_for_dispatch().ref is None


def test_branch_from_ref_passes_through_plain_names() -> None:
    assert branch_from_ref("main") == "main"
    assert branch_from_ref("refs/heads/gh-pages") == "gh-pages"
