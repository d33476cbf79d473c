"""Post-run result reconciliation.

Build tools without live events (Maven with stock Surefire) only leave a
structured report behind. Report entries and test nodes use different naming
schemes, so each node is matched through four lookups, first hit wins:

1. exact node id            == report ``testId``
2. node id                  == report ``className.name``
3. normalized node id       == normalized report id / ``className.name``
4. node display name        == report ``name``

Two report entries producing the same key in one lookup is a collision: it
is logged and the later entry wins.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from jvmtest.core.logging import get_logger
from jvmtest.testing.models import TestNode, TestResultItem, TestResultsReport
from jvmtest.testing.session import RunSession

log = get_logger("testing.reconcile")

_NON_ID_CHARS = re.compile(r"[^A-Za-z0-9_.]")
_UNDERSCORE_RUNS = re.compile(r"_+")


def normalize_id(value: str) -> str:
    """Replace characters outside ``[A-Za-z0-9_.]`` with ``_``, collapse runs, trim."""
    replaced = _NON_ID_CHARS.sub("_", value)
    return _UNDERSCORE_RUNS.sub("_", replaced).strip("_")


def _qualified_name(item: TestResultItem) -> str | None:
    if item.class_name:
        return f"{item.class_name}.{item.name}"
    return None


@dataclass
class Collision:
    strategy: str
    key: str
    replaced: str
    winner: str


@dataclass
class ReconcileSummary:
    matched: dict[str, str] = field(default_factory=dict)  # node id -> strategy
    unmatched: list[str] = field(default_factory=list)
    collisions: list[Collision] = field(default_factory=list)


class _Lookup:
    """One key -> report entry table; later entries win on collision."""

    def __init__(self, strategy: str, collisions: list[Collision]) -> None:
        self.strategy = strategy
        self._entries: dict[str, TestResultItem] = {}
        self._collisions = collisions

    def add(self, key: str | None, item: TestResultItem) -> None:
        if not key:
            return
        previous = self._entries.get(key)
        if previous is not None and previous is not item:
            self._collisions.append(
                Collision(
                    strategy=self.strategy,
                    key=key,
                    replaced=previous.test_id,
                    winner=item.test_id,
                )
            )
            log.warning(
                "report_key_collision",
                strategy=self.strategy,
                key=key,
                replaced=previous.test_id,
                winner=item.test_id,
            )
        self._entries[key] = item

    def get(self, key: str) -> TestResultItem | None:
        return self._entries.get(key)


class ResultReconciler:
    """Applies structured report entries to registered nodes."""

    def reconcile(
        self,
        session: RunSession,
        nodes: Iterable[TestNode],
        report: TestResultsReport,
    ) -> ReconcileSummary:
        summary = ReconcileSummary()
        if not report.results:
            log.info("report_empty")
            session.log("[REPORT] No test results found in report")
            return summary

        session.log(f"[REPORT] Retrieved {len(report.results)} test results")

        by_id = _Lookup("id", summary.collisions)
        by_qualified = _Lookup("qualified_name", summary.collisions)
        by_normalized = _Lookup("normalized_id", summary.collisions)
        by_name = _Lookup("display_name", summary.collisions)

        for item in report.results:
            qualified = _qualified_name(item)
            by_id.add(item.test_id, item)
            by_qualified.add(qualified, item)
            by_normalized.add(normalize_id(item.test_id), item)
            if qualified and normalize_id(qualified) != normalize_id(item.test_id):
                by_normalized.add(normalize_id(qualified), item)
            by_name.add(item.name, item)

        for node in nodes:
            item, strategy = self._match(node, by_id, by_qualified, by_normalized, by_name)
            if item is None:
                summary.unmatched.append(node.id)
                log.debug("report_match_miss", node_id=node.id)
                continue
            summary.matched[node.id] = strategy
            self._apply(session, node, item)

        log.info(
            "report_reconciled",
            matched=len(summary.matched),
            unmatched=len(summary.unmatched),
            collisions=len(summary.collisions),
        )
        return summary

    @staticmethod
    def _match(
        node: TestNode,
        by_id: _Lookup,
        by_qualified: _Lookup,
        by_normalized: _Lookup,
        by_name: _Lookup,
    ) -> tuple[TestResultItem | None, str]:
        candidates = (
            (by_id, node.id),
            (by_qualified, node.id),
            (by_normalized, normalize_id(node.id)),
            (by_name, node.display_name),
        )
        for lookup, key in candidates:
            if not key:
                continue
            item = lookup.get(key)
            if item is not None:
                return item, lookup.strategy
        return None, ""

    @staticmethod
    def _apply(session: RunSession, node: TestNode, item: TestResultItem) -> None:
        if item.output:
            session.append_output(f"--- Output for {item.name} ---", node.id)
            session.append_output(item.output, node.id)

        match item.status:
            case "SUCCESS":
                session.passed(node.id, item.duration_ms)
            case "FAILURE":
                session.failed(
                    node.id,
                    _compose_message(item.failure_message or "Test failed", item.stack_trace),
                    stack_trace=item.stack_trace,
                    duration_ms=item.duration_ms,
                )
            case "SKIPPED":
                session.skipped(node.id)
            case "ERROR":
                session.errored(
                    node.id,
                    _compose_message(item.failure_message or "Test error", item.stack_trace),
                    stack_trace=item.stack_trace,
                    duration_ms=item.duration_ms,
                )


def _compose_message(message: str, stack_trace: str | None) -> str:
    if stack_trace:
        return f"{message}\n\n{stack_trace}"
    return message
