"""Stages of the edition pipeline: assign, reconcile, deduplicate, resequence."""

from __future__ import annotations

from .assign import EditionAssignment, assign_edition_numbers
from .audit import RecordOutcome, record_sync_run
from .certificates import CertificateIssuer
from .deduplicate import (
    DEFAULT_DUPLICATE_BUCKET,
    DEFAULT_SURVIVOR_RULES,
    DeduplicationResult,
    DuplicateCandidate,
    DuplicateRemoval,
    PreferHighestLineItemId,
    PreferValidProductAndSku,
    SkuLookup,
    SurvivorRule,
    group_duplicates,
    lookup_skus,
    remove_duplicate_line_items,
    removal_reason,
    select_survivor,
)
from .integrity import IntegrityReport, check_edition_integrity
from .reconcile import ReconcileResult, reconcile_assignments
from .resequence import ResequenceResult, resequence_editions, sequence_key

__all__ = [
    "DEFAULT_DUPLICATE_BUCKET",
    "DEFAULT_SURVIVOR_RULES",
    "CertificateIssuer",
    "DeduplicationResult",
    "DuplicateCandidate",
    "DuplicateRemoval",
    "EditionAssignment",
    "IntegrityReport",
    "PreferHighestLineItemId",
    "PreferValidProductAndSku",
    "ReconcileResult",
    "RecordOutcome",
    "ResequenceResult",
    "SkuLookup",
    "SurvivorRule",
    "assign_edition_numbers",
    "check_edition_integrity",
    "group_duplicates",
    "lookup_skus",
    "reconcile_assignments",
    "record_sync_run",
    "remove_duplicate_line_items",
    "removal_reason",
    "resequence_editions",
    "select_survivor",
    "sequence_key",
]
