"""
Aggregator - pull many spokes' declarations into one fleet report.

Spokes are processed concurrently up to a fixed limit. Every spoke ends in
exactly one SpokeState; a failure in one spoke is recorded for that spoke
and never cancels the others. Results are merged and sorted only after all
spokes finish.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence

from hivespoke.config.defaults import DEFAULT_CONCURRENCY, FETCH_TOTAL_TIMEOUT_SECONDS
from hivespoke.documents import MANIFEST_PATH, STATUS_PATH, decode_yaml
from hivespoke.errors import DocumentUnparseableError
from hivespoke.schemas.manifest import Manifest
from hivespoke.schemas.status import SpokeStatus
from hivespoke.schemas.validation import parse_document

from .models import FleetReport, SpokeEntry, SpokeFailure, SpokeOutcome, SpokeState
from .sources import DocumentNotFound, DocumentSource, RetrievalError, SpokeRef
from .staleness import DEFAULT_STALE_THRESHOLD, status_is_stale, utc_now

logger = logging.getLogger(__name__)


class Aggregator:
    """Compute per-spoke compliance facts and the fleet summary."""

    def __init__(
        self,
        source: DocumentSource,
        clock: Callable[[], datetime] = utc_now,
        threshold: timedelta = DEFAULT_STALE_THRESHOLD,
        concurrency: int = DEFAULT_CONCURRENCY,
        fetch_timeout: float = FETCH_TOTAL_TIMEOUT_SECONDS,
    ):
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.source = source
        self.clock = clock
        self.threshold = threshold
        self.concurrency = concurrency
        self.fetch_timeout = fetch_timeout

    async def aggregate(self, spokes: Sequence[SpokeRef]) -> FleetReport:
        start = time.monotonic()
        now = self.clock()
        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(spoke: SpokeRef) -> SpokeOutcome:
            async with semaphore:
                return await self.collect(spoke, now)

        results = await asyncio.gather(
            *(bounded(s) for s in spokes), return_exceptions=True
        )

        outcomes = []
        for spoke, result in zip(spokes, results):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            if isinstance(result, Exception):
                logger.error(f"Aggregation error for {spoke.name}: {result}")
                result = SpokeOutcome(
                    spoke=spoke.name,
                    state=SpokeState.UNPARSEABLE,
                    failure=SpokeFailure(project=spoke.name, reason=str(result)),
                )
            outcomes.append(result)

        report = FleetReport.from_outcomes(outcomes)
        duration_ms = (time.monotonic() - start) * 1000
        logger.info(
            f"Aggregated {len(spokes)} spoke(s) in {duration_ms:.0f}ms: "
            f"{report.with_collab} declared, {report.without_collab} without, "
            f"{len(report.failures)} invalid"
        )
        return report

    async def collect(self, spoke: SpokeRef, now: Optional[datetime] = None) -> SpokeOutcome:
        """Process one spoke through to its terminal state."""
        now = now or self.clock()

        try:
            manifest_text = await self._fetch(spoke, MANIFEST_PATH)
        except DocumentNotFound:
            logger.debug(f"{spoke.name}: no declaration")
            return SpokeOutcome(spoke=spoke.name, state=SpokeState.NO_DECLARATION)
        except RetrievalError as e:
            logger.warning(f"{spoke.name}: unreachable ({e.message})")
            return SpokeOutcome(
                spoke=spoke.name,
                state=SpokeState.UNREACHABLE,
                failure=SpokeFailure(project=spoke.name, reason=e.message),
            )
        except DocumentUnparseableError as e:
            logger.warning(f"{spoke.name}: unreadable manifest ({e.message})")
            return SpokeOutcome(
                spoke=spoke.name,
                state=SpokeState.UNPARSEABLE,
                failure=SpokeFailure(project=spoke.name, reason=e.message),
            )

        try:
            manifest = parse_document(Manifest, decode_yaml(manifest_text, MANIFEST_PATH))
        except DocumentUnparseableError as e:
            logger.warning(f"{spoke.name}: invalid manifest ({e.message})")
            return SpokeOutcome(
                spoke=spoke.name,
                state=SpokeState.UNPARSEABLE,
                failure=SpokeFailure(
                    project=spoke.name,
                    reason=e.message,
                    violations=tuple(e.violations),
                ),
            )

        status = await self._load_status(spoke)
        stale = status_is_stale(status, now, self.threshold)
        entry = SpokeEntry.from_documents(spoke.name, manifest, status, stale)
        return SpokeOutcome(
            spoke=spoke.name,
            state=SpokeState.STALE if stale else SpokeState.FRESH,
            entry=entry,
        )

    async def _fetch(self, spoke: SpokeRef, path: str) -> str:
        try:
            return await asyncio.wait_for(
                self.source.fetch(spoke, path), timeout=self.fetch_timeout
            )
        except asyncio.TimeoutError:
            raise RetrievalError(spoke.name, f"timed out fetching {path}")

    async def _load_status(self, spoke: SpokeRef) -> Optional[SpokeStatus]:
        # A missing or broken status leaves the spoke declared but stale
        try:
            text = await self._fetch(spoke, STATUS_PATH)
        except DocumentNotFound:
            return None
        except (RetrievalError, DocumentUnparseableError) as e:
            logger.warning(f"{spoke.name}: status unavailable ({e.message})")
            return None

        try:
            return parse_document(SpokeStatus, decode_yaml(text, STATUS_PATH))
        except DocumentUnparseableError as e:
            logger.warning(f"{spoke.name}: ignoring invalid status ({e.message})")
            return None
