"""
Sector Tree Assembler for Store Map Service.

Builds a store's full sector hierarchy (root sectors plus every descendant)
with each sector's products attached, ready for JSON serialization to the
map renderer.

The build is a depth-first walk driven by two repository reads per node:
``find_sectors(store_id, parent_id)`` for the children and
``find_products(sector_id)`` for the products. A visited-id set and a depth
ceiling are carried through the recursion, so inconsistent data (a cycle,
or a tree rewritten mid-build) raises instead of recursing without bound.

A cycle stored in the table has no root and is never reached by the walk.
After the walk, every sector of the store that was not reached has its
parent chain followed, and the build fails with the sector that closes the
loop (or the one whose parent is missing).

Usage:
    repository = StoreRepository(db.session)
    assembler = SectorTreeAssembler(repository, max_depth=64)
    tree = [node.to_dict() for node in assembler.build_sector_tree(store.id)]
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Set


logger = logging.getLogger(__name__)


class SectorTreeError(Exception):
    """Base exception for sector hierarchies that cannot be assembled."""
    pass


class SectorCycleError(SectorTreeError):
    """Raised when the same sector is reached twice during one build."""

    def __init__(self, store_id, sector_id):
        self.store_id = store_id
        self.sector_id = sector_id
        super().__init__(
            f'Sector {sector_id} was reached twice while building the tree '
            f'for store {store_id}; the sector hierarchy contains a cycle'
        )


class SectorTreeDepthError(SectorTreeError):
    """Raised when the hierarchy is deeper than the configured ceiling."""

    def __init__(self, store_id, sector_id, max_depth):
        self.store_id = store_id
        self.sector_id = sector_id
        self.max_depth = max_depth
        super().__init__(
            f'Sector {sector_id} in store {store_id} is deeper than the '
            f'maximum of {max_depth} levels'
        )


class SectorOrphanError(SectorTreeError):
    """Raised when a sector is cut off from every root of its store."""

    def __init__(self, store_id, sector_id, parent_id):
        self.store_id = store_id
        self.sector_id = sector_id
        self.parent_id = parent_id
        super().__init__(
            f'Sector {sector_id} in store {store_id} is not reachable from a '
            f'root sector (parent {parent_id} is missing or belongs to another store)'
        )


@dataclass
class SectorNode:
    """
    One sector in an assembled tree.

    Attributes:
        sector: The sector record (anything with ``id`` and ``to_dict()``)
        level: Computed depth, i.e. number of edges up to the root
        products: Products placed directly in this sector
        sub_sectors: Child nodes, in repository order
    """

    sector: Any
    level: int
    products: List[Any] = field(default_factory=list)
    sub_sectors: List['SectorNode'] = field(default_factory=list)

    @property
    def id(self):
        return self.sector.id

    def iter_nodes(self) -> Iterator['SectorNode']:
        """Yield this node and all descendants, depth-first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.sub_sectors))

    def to_dict(self):
        """Serialize the node, its products and its subtree."""
        data = self.sector.to_dict()
        data['level'] = self.level
        data['products'] = [product.to_dict() for product in self.products]
        data['sub_sectors'] = [child.to_dict() for child in self.sub_sectors]
        return data


class SectorTreeAssembler:
    """
    Assembles the sector forest of a store.

    The assembler is read-only and keeps no state between builds; each call
    to build_sector_tree() runs its own sequence of repository reads. Any
    exception raised by the repository propagates and aborts the build.

    Args:
        repository: Object providing ``find_sectors(store_id, parent_id)``,
            ``find_all_sectors(store_id)`` and ``find_products(sector_id)``
        max_depth: Deepest level allowed (roots are level 0)
    """

    DEFAULT_MAX_DEPTH = 64

    def __init__(self, repository, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 0:
            raise ValueError('max_depth must be zero or greater')
        self.repository = repository
        self.max_depth = max_depth

    def build_sector_tree(self, store_id) -> List[SectorNode]:
        """
        Build the populated sector forest for a store.

        The caller is responsible for checking that the store exists; an
        unknown store simply has no root sectors and yields an empty list.

        Args:
            store_id: Store whose sectors are assembled

        Returns:
            Root SectorNode list, in repository order

        Raises:
            SectorCycleError: A sector was reached twice, or a stored parent
                chain loops back on itself
            SectorTreeDepthError: The hierarchy exceeds max_depth
            SectorOrphanError: A sector's parent is missing from the store
        """
        visited: Set[Any] = set()
        roots = [
            self._build_node(store_id, sector, 0, visited)
            for sector in self.repository.find_sectors(store_id, None)
        ]
        self._check_unreached(store_id, visited)

        logger.debug(
            'Built sector tree for store %s: %d root sectors, %d sectors total',
            store_id, len(roots), len(visited),
        )
        return roots

    def _build_node(self, store_id, sector, depth: int, visited: Set[Any]) -> SectorNode:
        if sector.id in visited:
            raise SectorCycleError(store_id, sector.id)
        if depth > self.max_depth:
            raise SectorTreeDepthError(store_id, sector.id, self.max_depth)
        visited.add(sector.id)

        stored_level = getattr(sector, 'level', None)
        if stored_level is not None and stored_level != depth:
            logger.warning(
                'Sector %s in store %s has stored level %s but sits at depth %d',
                sector.id, store_id, stored_level, depth,
            )

        children = self.repository.find_sectors(store_id, sector.id)
        products = list(self.repository.find_products(sector.id))

        sub_sectors = [
            self._build_node(store_id, child, depth + 1, visited)
            for child in children
        ]

        logger.debug(
            'Sector %s (%s): %d products, %d sub-sectors',
            sector.id, getattr(sector, 'name', ''), len(products), len(sub_sectors),
        )
        return SectorNode(sector=sector, level=depth, products=products, sub_sectors=sub_sectors)

    def _check_unreached(self, store_id, visited: Set[Any]):
        """Raise for the first stored sector the walk from the roots missed."""
        sectors = self.repository.find_all_sectors(store_id)
        by_id = {sector.id: sector for sector in sectors}

        for sector in sectors:
            if sector.id in visited:
                continue

            chain: Set[Any] = set()
            current = sector
            while True:
                if current.id in chain:
                    raise SectorCycleError(store_id, current.id)
                chain.add(current.id)

                parent = by_id.get(current.parent_id)
                if parent is None or parent.id in visited:
                    # Parent missing, or reached without listing this child
                    raise SectorOrphanError(store_id, current.id, current.parent_id)
                current = parent


def build_sector_tree(repository, store_id, max_depth: int = SectorTreeAssembler.DEFAULT_MAX_DEPTH) -> List[SectorNode]:
    """Shortcut for ``SectorTreeAssembler(repository, max_depth).build_sector_tree(store_id)``."""
    return SectorTreeAssembler(repository, max_depth=max_depth).build_sector_tree(store_id)
