"""
Signature index for near-linear duplicate discovery
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import DetectionSettings

logger = logging.getLogger(__name__)


class DuplicateIndex:
    """
    Maps signatures (and normalized filenames) to photo positions.

    Exact signature matches are the primary duplicate relation. A secondary
    filename pass recovers variants whose quantized size or time differ,
    but only for photos with fewer than `filename_pass_max_existing`
    signature matches, and never past `filename_pass_cap` duplicates.

    The relation is symmetrized after both passes, so if B is listed as a
    duplicate of A then A is listed as a duplicate of B.
    """

    def __init__(self,
                 ids: Sequence[str],
                 signatures: Sequence[str],
                 filename_bases: Sequence[str],
                 settings: Optional[DetectionSettings] = None):
        if not (len(ids) == len(signatures) == len(filename_bases)):
            raise ValueError("ids, signatures and filename_bases must have the same length")

        self.ids = list(ids)
        self.signatures = list(signatures)
        self.filename_bases = list(filename_bases)
        self.settings = settings or DetectionSettings()

        self._by_signature: Dict[str, List[int]] = defaultdict(list)
        self._by_filename: Dict[str, List[int]] = defaultdict(list)
        self._duplicates: List[Dict[int, None]] = []

    @classmethod
    def build(cls,
              ids: Sequence[str],
              signatures: Sequence[str],
              filename_bases: Sequence[str],
              settings: Optional[DetectionSettings] = None) -> 'DuplicateIndex':
        """
        Build the index in a single pass and resolve every photo's duplicates

        Args:
            ids: Photo ids in input order
            signatures: Signature per photo, same order
            filename_bases: Normalized filename per photo ('' if unknown)
            settings: Detection settings

        Returns:
            Fully resolved DuplicateIndex
        """
        index = cls(ids, signatures, filename_bases, settings)
        index._index()
        index._resolve()
        return index

    def _index(self) -> None:
        for position, (signature, base) in enumerate(zip(self.signatures, self.filename_bases)):
            self._by_signature[signature].append(position)
            if base:
                self._by_filename[base].append(position)

    def _candidates(self, position: int) -> Dict[int, None]:
        """Ordered, de-duplicated duplicate positions for one photo."""
        own_id = self.ids[position]
        found: Dict[int, None] = {}
        found_ids = set()

        for other in self._by_signature[self.signatures[position]]:
            other_id = self.ids[other]
            if other == position or other_id == own_id or other_id in found_ids:
                continue
            found[other] = None
            found_ids.add(other_id)

        # Filename pass, skipped when the signature already found plenty
        base = self.filename_bases[position]
        if base and len(found) < self.settings.filename_pass_max_existing:
            for other in self._by_filename[base]:
                if len(found) >= self.settings.filename_pass_cap:
                    break
                other_id = self.ids[other]
                if other == position or other_id == own_id or other_id in found_ids:
                    continue
                found[other] = None
                found_ids.add(other_id)

        return found

    def _resolve(self) -> None:
        self._duplicates = [self._candidates(p) for p in range(len(self.ids))]

        added = 0
        for position, others in enumerate(self._duplicates):
            for other in list(others):
                if position not in self._duplicates[other]:
                    self._duplicates[other][position] = None
                    added += 1

        if added:
            logger.debug(f"Added {added} reverse duplicate links cut off by filename caps")

        logger.debug(f"Indexed {len(self.ids)} photos into {len(self._by_signature)} signatures")

    def __len__(self) -> int:
        return len(self.ids)

    def bucket(self, signature: str) -> List[int]:
        """Positions of all photos sharing a signature."""
        return list(self._by_signature.get(signature, []))

    def duplicates_for(self, position: int) -> Tuple[str, ...]:
        """Ids of the photos considered duplicates of the photo at position."""
        ids = []
        seen = set()
        for other in self._duplicates[position]:
            other_id = self.ids[other]
            if other_id not in seen:
                seen.add(other_id)
                ids.append(other_id)
        return tuple(ids)

    def duplicate_positions(self, position: int) -> List[int]:
        return list(self._duplicates[position])

    def signature_groups(self) -> Dict[str, List[str]]:
        """Signatures shared by more than one photo, mapped to their ids."""
        return {
            signature: [self.ids[p] for p in positions]
            for signature, positions in self._by_signature.items()
            if len(positions) > 1
        }
