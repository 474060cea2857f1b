"""
Post-processing views over categorized photos
"""

import logging
from collections import defaultdict
from typing import Dict, List, Sequence

from .models import CategorizedPhoto, DuplicateGroup, PhotoCategory

logger = logging.getLogger(__name__)


def group_by_category(photos: Sequence[CategorizedPhoto]) -> Dict[PhotoCategory, List[CategorizedPhoto]]:
    """
    Group photos by category for batch operations

    A photo appears under every category it carries. Every category is
    present in the result, possibly with an empty list.

    Args:
        photos: Categorized photos

    Returns:
        Mapping of category to member photos, in input order
    """
    grouped: Dict[PhotoCategory, List[CategorizedPhoto]] = {category: [] for category in PhotoCategory}
    for photo in photos:
        for category in photo.categories:
            grouped[category].append(photo)
    return grouped


def _find_connected_components(edges: List[tuple], n: int) -> List[List[int]]:
    """Union-find over node indices 0..n-1; components sorted by smallest index."""
    parent = list(range(n))
    rank = [0] * n

    def find(x):
        root = x
        while parent[root] != root:
            root = parent[root]
        while parent[x] != root:
            parent[x], x = root, parent[x]
        return root

    def union(x, y):
        rx, ry = find(x), find(y)
        if rx == ry:
            return
        if rank[rx] < rank[ry]:
            parent[rx] = ry
        elif rank[rx] > rank[ry]:
            parent[ry] = rx
        else:
            parent[ry] = rx
            rank[rx] += 1

    for i, j in edges:
        union(i, j)

    components = defaultdict(list)
    for i in range(n):
        components[find(i)].append(i)

    return sorted(components.values(), key=lambda members: members[0])


def get_duplicate_groups(photos: Sequence[CategorizedPhoto]) -> List[DuplicateGroup]:
    """
    Extract maximal groups of photos linked by duplicate references

    Duplicate references are treated as undirected edges and groups are
    the connected components with more than one member, so every photo
    lands in at most one group. References to ids outside `photos` are
    ignored.

    Args:
        photos: Categorized photos

    Returns:
        Duplicate groups ordered by the input position of their first member
    """
    position_by_id: Dict[str, int] = {}
    for position, photo in enumerate(photos):
        position_by_id.setdefault(photo.id, position)

    edges = []
    for position, photo in enumerate(photos):
        for duplicate_id in photo.duplicate_ids:
            other = position_by_id.get(duplicate_id)
            if other is not None and other != position:
                edges.append((position, other))

    components = _find_connected_components(edges, len(photos))
    groups = [
        DuplicateGroup(group_id=group_id, photos=[photos[i] for i in members])
        for group_id, members in enumerate(m for m in components if len(m) > 1)
    ]

    logger.debug(f"Found {len(groups)} duplicate groups among {len(photos)} photos")
    return groups
