"""
Request-scoped context for operations.

Every operation function receives an :class:`OperationContext` as its first
argument. The context carries the two stores (the read-only ledger and the
analytics store), caller identity, dry-run flag and arbitrary metadata.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from tradespine.core.adapters import DatabaseAdapter
from tradespine.core.protocols import RowSource
from tradespine.core.settings import DEFAULT_INTERCOMPANY_NAMES
from tradespine.core.watermarks import ExtractionRunStore


@dataclass
class OperationContext:
    """Context passed to every operation function.

    Attributes:
        ledger: Row source for the ledger (an adapter, or a fake in tests).
        analytics: Analytics-store adapter; ``None`` keeps extraction runs in
            memory and disables the processed-trade and reference operations.
        request_id: Unique ID for this operation invocation (auto-generated).
        caller: Origin of the request: ``"api"``, ``"cli"`` or ``"sdk"``.
        user: Optional authenticated user identifier.
        dry_run: When ``True``, write operations report what they would do.
        intercompany_names: Short names treated as in-house entities.
        reference_source_system: Source-system tag of the ledger in the
            reference tables.
        runs: Extraction-run store; built from *analytics* when not given.
        metadata: Arbitrary key/value pairs forwarded to logging.
    """

    ledger: RowSource | None = None
    analytics: DatabaseAdapter | None = None
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    caller: str = "sdk"
    user: str | None = None
    dry_run: bool = False
    intercompany_names: tuple[str, ...] = DEFAULT_INTERCOMPANY_NAMES
    reference_source_system: str = "NUCLEUS"
    runs: ExtractionRunStore | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.runs is None:
            self.runs = ExtractionRunStore(self.analytics)
