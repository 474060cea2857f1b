"""
Chunked, progress-reporting detection pipeline

Runs signature generation, duplicate grouping and categorization over a
photo library as one cooperative asyncio task. The task suspends between
chunks so an interactive caller stays responsive during long scans.

Progress bands:
    5        starting
    5 - 50   signatures, after every chunk
    50       signature index built
    50 - 95  categorization, every `categorize_yield_every` photos
    100      done
"""

import asyncio
import logging
import math
import time
from concurrent.futures import Executor
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..config import DetectionSettings
from ..utils.logging import ScanStats
from .categorizer import Categorizer
from .grouping import DuplicateIndex
from .models import CategorizedPhoto, PhotoMetadata
from .scanner import SimilarityScanner
from .signature import fallback_signature, filename_base, generate_signature

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]
PhotoInput = Union[PhotoMetadata, Mapping[str, Any]]

PROGRESS_START = 5
PROGRESS_SIGNATURES_DONE = 50
PROGRESS_CATEGORIZE_END = 95
PROGRESS_DONE = 100


class ProgressReporter:
    """
    Forwards integer progress to a caller's callback.

    Values are rounded, clamped to [0, 100] and never go backwards.
    Exceptions raised by the callback are logged and dropped so a broken
    observer cannot abort a scan.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self.callback = callback
        self.last: Optional[int] = None

    def report(self, value: float) -> int:
        percent = min(PROGRESS_DONE, max(0, math.floor(value + 0.5)))
        if self.last is not None and percent < self.last:
            percent = self.last
        self.last = percent

        if self.callback is not None:
            try:
                self.callback(percent)
            except Exception as e:
                logger.warning(f"Progress callback error: {e}")
        return percent

    def finish(self) -> int:
        return self.report(PROGRESS_DONE)


SignedChunk = Tuple[int, List[Tuple[str, str, Optional[str]]]]


class PhotoDetectionPipeline:
    """
    Classifies photos into duplicate, similar, burst, screenshot,
    low-quality and old-unused categories.

    All indexing state is local to one `run()` call, so one pipeline
    instance can serve concurrent runs over different inputs.
    """

    def __init__(self,
                 settings: Optional[DetectionSettings] = None,
                 executor: Optional[Executor] = None):
        """
        Initialize detection pipeline

        Args:
            settings: Detection settings (defaults if None)
            executor: Optional thread pool used to sign chunks in parallel
        """
        self.settings = settings or DetectionSettings()
        self.executor = executor

    @staticmethod
    def _coerce(photos: Optional[Iterable[PhotoInput]]) -> List[PhotoMetadata]:
        if not photos:
            return []
        return [p if isinstance(p, PhotoMetadata) else PhotoMetadata.from_dict(p) for p in photos]

    def _sign_chunk(self, start: int, chunk: Sequence[PhotoMetadata]) -> SignedChunk:
        """
        Sign one chunk of photos

        Returns:
            (start, [(signature, filename_base, error_or_None), ...])
        """
        signed = []
        for photo in chunk:
            try:
                signed.append((generate_signature(photo, self.settings), filename_base(photo.uri), None))
            except Exception as e:
                logger.warning(f"Error generating signature for photo {photo.id}: {e}; using fallback")
                signed.append((fallback_signature(photo), '', str(e)))
        return start, signed

    async def _generate_signatures(self,
                                   photos: List[PhotoMetadata],
                                   progress: ProgressReporter,
                                   stats: ScanStats) -> Tuple[List[str], List[str]]:
        total = len(photos)
        chunk_size = max(1, self.settings.signature_chunk_size)
        bounds = [(s, min(s + chunk_size, total)) for s in range(0, total, chunk_size)]
        signatures: List[str] = [''] * total
        bases: List[str] = [''] * total
        band = PROGRESS_SIGNATURES_DONE - PROGRESS_START

        def merge(signed_chunk: SignedChunk) -> int:
            start, signed = signed_chunk
            for offset, (signature, base, error) in enumerate(signed):
                signatures[start + offset] = signature
                bases[start + offset] = base
                if error is not None:
                    stats.add_fallback(photos[start + offset].id, error)
            return len(signed)

        if self.executor is None:
            for start, end in bounds:
                merge(self._sign_chunk(start, photos[start:end]))
                progress.report(PROGRESS_START + end / total * band)
                if end < total:
                    await asyncio.sleep(0)
        else:
            loop = asyncio.get_running_loop()
            futures = [
                loop.run_in_executor(self.executor, self._sign_chunk, start, photos[start:end])
                for start, end in bounds
            ]
            done = 0
            for future in asyncio.as_completed(futures):
                done += merge(await future)
                progress.report(PROGRESS_START + done / total * band)

        return signatures, bases

    async def run(self,
                  photos: Optional[Iterable[PhotoInput]],
                  on_progress: Optional[ProgressCallback] = None,
                  reference_time_ms: Optional[int] = None,
                  stats: Optional[ScanStats] = None) -> List[CategorizedPhoto]:
        """
        Categorize a photo library

        Args:
            photos: Photos in the order they should be returned. Similarity
                scanning sorts by creation time internally.
            on_progress: Called with integer progress, non-decreasing, ending at 100
            reference_time_ms: "Now" for age checks (current time if None)
            stats: Optional statistics collector to fill in

        Returns:
            One CategorizedPhoto per input photo, in input order
        """
        progress = ProgressReporter(on_progress)
        stats = stats if stats is not None else ScanStats()
        records = self._coerce(photos)
        total = len(records)
        stats.set_total(total)

        if total == 0:
            progress.finish()
            return []

        logger.info(f"Categorizing {total} photos")
        progress.report(PROGRESS_START)

        phase_start = time.perf_counter()
        signatures, bases = await self._generate_signatures(records, progress, stats)
        stats.record_phase('signatures', time.perf_counter() - phase_start)

        phase_start = time.perf_counter()
        index = DuplicateIndex.build([p.id for p in records], signatures, bases, self.settings)
        scanner = SimilarityScanner(records, self.settings)
        stats.record_phase('grouping', time.perf_counter() - phase_start)
        progress.report(PROGRESS_SIGNATURES_DONE)

        phase_start = time.perf_counter()
        categorizer = Categorizer(self.settings, reference_time_ms)
        yield_every = max(1, self.settings.categorize_yield_every)
        band = PROGRESS_CATEGORIZE_END - PROGRESS_SIGNATURES_DONE
        categorized: List[CategorizedPhoto] = []

        for i, photo in enumerate(records):
            if i > 0 and i % yield_every == 0:
                await asyncio.sleep(0)

            duplicate_ids = index.duplicates_for(i)
            # Duplicates take priority over similarity
            similar = [] if duplicate_ids else scanner.similar_for(i, exclude_ids=duplicate_ids)

            result = categorizer.categorize(
                photo,
                signatures[i],
                duplicate_ids=duplicate_ids,
                similar_count=len(similar),
                similarity=scanner.classify(len(similar)),
            )
            categorized.append(result)
            stats.add_result([c.value for c in result.categories], result.is_duplicate)

            if i % yield_every == 0 or i == total - 1:
                progress.report(PROGRESS_SIGNATURES_DONE + (i + 1) / total * band)

        stats.record_phase('categorize', time.perf_counter() - phase_start)
        progress.finish()

        logger.info(f"Categorized {total} photos: {stats.duplicate_photos} with duplicates, "
                    f"{len(stats.fallback_signatures)} fallback signatures")
        return categorized


async def categorize_photos_async(photos: Optional[Iterable[PhotoInput]],
                                  on_progress: Optional[ProgressCallback] = None,
                                  settings: Optional[DetectionSettings] = None,
                                  reference_time_ms: Optional[int] = None,
                                  stats: Optional[ScanStats] = None) -> List[CategorizedPhoto]:
    """Run the detection pipeline inside an existing event loop."""
    pipeline = PhotoDetectionPipeline(settings)
    return await pipeline.run(photos, on_progress, reference_time_ms, stats)


def categorize_photos(photos: Optional[Iterable[PhotoInput]],
                      on_progress: Optional[ProgressCallback] = None,
                      settings: Optional[DetectionSettings] = None,
                      reference_time_ms: Optional[int] = None,
                      stats: Optional[ScanStats] = None) -> List[CategorizedPhoto]:
    """
    Run the detection pipeline to completion from synchronous code

    Must not be called from inside a running event loop; use
    categorize_photos_async there.
    """
    return asyncio.run(categorize_photos_async(photos, on_progress, settings,
                                               reference_time_ms, stats))
