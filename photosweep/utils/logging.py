"""
Logging utilities for PhotoSweep
Provides console logging setup and scan statistics
"""

import logging
import sys
from collections import Counter
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import colorlog

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ScanStats:
    """Tracks statistics for one detection run"""

    def __init__(self):
        """Initialize scan statistics"""
        self.start_time = datetime.now()
        self.total_photos = 0
        self.processed_photos = 0
        self.category_counts: Counter = Counter()
        self.duplicate_photos = 0
        self.fallback_signatures: List[Dict[str, Any]] = []
        self.phase_times: Dict[str, float] = {}

    def set_total(self, total: int):
        """Set total number of photos to process"""
        self.total_photos = total

    def add_result(self, categories: Iterable[str], is_duplicate: bool = False):
        """
        Add one categorized photo

        Args:
            categories: Category values assigned to the photo
            is_duplicate: Whether the photo has duplicates
        """
        self.processed_photos += 1
        self.category_counts.update(categories)
        if is_duplicate:
            self.duplicate_photos += 1

    def add_fallback(self, photo_id: str, error: str):
        """Record a photo that fell back to the coarse signature"""
        self.fallback_signatures.append({
            'photo_id': photo_id,
            'error': error,
            'time': datetime.now()
        })

    def record_phase(self, phase: str, seconds: float):
        self.phase_times[phase] = self.phase_times.get(phase, 0.0) + seconds

    def get_elapsed_time(self) -> float:
        """Get elapsed time in seconds"""
        return (datetime.now() - self.start_time).total_seconds()

    def get_summary(self) -> Dict[str, Any]:
        """Get scan summary"""
        elapsed = self.get_elapsed_time()

        return {
            'total_photos': self.total_photos,
            'processed_photos': self.processed_photos,
            'duplicate_photos': self.duplicate_photos,
            'category_counts': dict(self.category_counts),
            'fallback_signatures': len(self.fallback_signatures),
            'phase_times': dict(self.phase_times),
            'elapsed_time': elapsed,
            'photos_per_second': self.processed_photos / elapsed if elapsed > 0 else 0
        }

    def format_summary(self) -> str:
        """Render the summary as console text"""
        summary = self.get_summary()

        lines = [
            "=" * 60,
            "SCAN SUMMARY",
            "=" * 60,
            f"Total photos:     {summary['total_photos']}",
            f"Processed:        {summary['processed_photos']}",
            f"With duplicates:  {summary['duplicate_photos']}",
        ]

        if summary['category_counts']:
            lines.append("")
            lines.append("Categories:")
            for category, count in sorted(summary['category_counts'].items()):
                lines.append(f"  - {category}: {count}")

        lines.append("")
        lines.append(f"Fallback signatures: {summary['fallback_signatures']}")
        for phase, seconds in summary['phase_times'].items():
            lines.append(f"Phase {phase}:          {seconds:.3f}s")
        lines.append(f"Elapsed time:     {summary['elapsed_time']:.2f}s")
        lines.append("=" * 60)

        if self.fallback_signatures:
            lines.append("")
            lines.append("FALLBACK SIGNATURES:")
            for entry in self.fallback_signatures[:10]:  # First 10 only
                lines.append(f"  - {entry['photo_id']}: {entry['error']}")
            if len(self.fallback_signatures) > 10:
                lines.append(f"  ... and {len(self.fallback_signatures) - 10} more")

        return "\n".join(lines)


def setup_console_logging(level: str = "INFO", color: bool = True,
                          fmt: Optional[str] = None,
                          stream=None) -> logging.Handler:
    """
    Setup console logging with optional color support

    Args:
        level: Logging level name
        color: Whether to use colored output (only applied on a TTY)
        fmt: Log format, without color markers
        stream: Output stream (defaults to stderr)

    Returns:
        The handler attached to the root logger
    """
    stream = stream or sys.stderr
    fmt = fmt or DEFAULT_FORMAT
    console_handler = logging.StreamHandler(stream)

    if color and hasattr(stream, 'isatty') and stream.isatty():
        formatter = colorlog.ColoredFormatter(
            '%(log_color)s' + fmt,
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            }
        )
    else:
        formatter = logging.Formatter(fmt)

    console_handler.setFormatter(formatter)
    console_handler.photosweep_console = True

    root_logger = logging.getLogger()
    # Replace the handler from an earlier call instead of stacking another
    for handler in list(root_logger.handlers):
        if getattr(handler, 'photosweep_console', False):
            root_logger.removeHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.addHandler(console_handler)
    return console_handler
