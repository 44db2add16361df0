"""
Sector Service for Store Map Service.

Provides the write-side business logic for the sector hierarchy:
- Parent validation: same store, no self-parenting, no cycles
- Level derivation: ``level`` always follows from the parent chain
- Cascading delete: removing a sector removes its whole subtree and the
  products attached anywhere in it

Methods stage changes on the Flask-SQLAlchemy session; callers commit.
"""

import logging
from collections import deque
from typing import List, Optional, Tuple

from storemap.models import db, Sector, Product, MapElement


logger = logging.getLogger(__name__)


class SectorValidationError(ValueError):
    """Raised when a sector write would break the hierarchy invariants."""
    pass


class SectorService:
    """
    Service class for maintaining the sector hierarchy.

    All methods are class methods using the Flask-SQLAlchemy db session.
    """

    # Editable scalar fields and their types
    FLOAT_FIELDS = ('position_x', 'position_y', 'width', 'height')
    TEXT_FIELDS = ('name', 'description')

    # ==========================================================================
    # Hierarchy helpers
    # ==========================================================================

    @classmethod
    def resolve_parent(cls, store_id: int, parent_id: Optional[int]) -> Optional[Sector]:
        """
        Look up and validate a prospective parent sector.

        Args:
            store_id: Store the child sector belongs to
            parent_id: Requested parent id, or None for a root sector

        Returns:
            The parent Sector, or None for a root sector

        Raises:
            SectorValidationError: Parent missing or in another store
        """
        if parent_id is None:
            return None

        parent = db.session.get(Sector, parent_id)
        if parent is None:
            raise SectorValidationError(f'Parent sector {parent_id} not found')
        if parent.store_id != store_id:
            raise SectorValidationError(
                f'Parent sector {parent_id} belongs to a different store'
            )
        return parent

    @classmethod
    def collect_subtree(cls, sector: Sector) -> List[Sector]:
        """
        Return the sector and all of its descendants, breadth-first.

        Each sector is returned once even if the stored data is cyclic.
        """
        subtree = [sector]
        seen = {sector.id}
        queue = deque([sector])
        while queue:
            current = queue.popleft()
            children = (
                Sector.query
                .filter(Sector.parent_id == current.id)
                .order_by(Sector.id)
                .all()
            )
            for child in children:
                if child.id in seen:
                    continue
                seen.add(child.id)
                subtree.append(child)
                queue.append(child)
        return subtree

    @classmethod
    def assign_parent(cls, sector: Sector, parent_id: Optional[int]) -> Sector:
        """
        Attach a sector under a new parent (or make it a root) and derive levels.

        Rejects moves that would create a cycle: a sector can be neither its
        own parent nor a child of one of its descendants. The sector's level
        and the levels of its whole subtree are recomputed.

        Args:
            sector: Sector being (re)parented; may be new and unflushed
            parent_id: New parent id, or None for root

        Returns:
            The updated sector

        Raises:
            SectorValidationError: Invalid parent or cycle
        """
        parent = cls.resolve_parent(sector.store_id, parent_id)

        if parent is not None and sector.id is not None:
            if parent.id == sector.id:
                raise SectorValidationError('A sector cannot be its own parent')
            descendant_ids = {s.id for s in cls.collect_subtree(sector)}
            if parent.id in descendant_ids:
                raise SectorValidationError(
                    f'Sector {parent.id} is a descendant of sector {sector.id}; '
                    'moving it there would create a cycle'
                )

        sector.parent_id = parent.id if parent is not None else None
        sector.level = parent.level + 1 if parent is not None else 0

        if sector.id is not None:
            cls._relevel_descendants(sector)
        return sector

    @classmethod
    def _relevel_descendants(cls, sector: Sector) -> None:
        queue = deque([sector])
        seen = {sector.id}
        while queue:
            current = queue.popleft()
            for child in Sector.query.filter(Sector.parent_id == current.id).all():
                if child.id in seen:
                    continue
                seen.add(child.id)
                child.level = current.level + 1
                queue.append(child)

    # ==========================================================================
    # CRUD
    # ==========================================================================

    @classmethod
    def create_sector(cls, store_id: int, name: str, parent_id: Optional[int] = None, **fields) -> Sector:
        """
        Create a sector in a store.

        Args:
            store_id: Owning store id (must already exist)
            name: Sector name (required)
            parent_id: Optional parent sector id in the same store
            **fields: Optional description, position_x, position_y, width, height

        Returns:
            The new Sector, added to the session and flushed

        Raises:
            SectorValidationError: Missing name or invalid parent
        """
        if not name or not isinstance(name, str):
            raise SectorValidationError('name is required')

        sector = Sector(store_id=store_id, name=name)
        cls._apply_fields(sector, fields)
        cls.assign_parent(sector, parent_id)

        db.session.add(sector)
        db.session.flush()

        logger.info(f'Created sector {sector.id} ({sector.name}) in store {store_id} at level {sector.level}')
        return sector

    @classmethod
    def update_sector(cls, sector: Sector, data: dict) -> Sector:
        """
        Apply a partial update to a sector.

        ``parent_id`` is only touched when the key is present in ``data``;
        ``level`` in the payload is ignored since it follows from the parent.

        Raises:
            SectorValidationError: Invalid values or cycle
        """
        if 'name' in data and not data['name']:
            raise SectorValidationError('name cannot be empty')

        cls._apply_fields(sector, data)
        if 'parent_id' in data:
            cls.assign_parent(sector, data['parent_id'])

        db.session.flush()
        return sector

    @classmethod
    def delete_sector(cls, sector: Sector) -> Tuple[int, int]:
        """
        Delete a sector together with its descendants and their products.

        Map elements pointing at a deleted sector are unlinked.

        Returns:
            Tuple of (sectors_deleted, products_deleted)
        """
        subtree = cls.collect_subtree(sector)
        sector_ids = [s.id for s in subtree]

        products_deleted = (
            Product.query
            .filter(Product.sector_id.in_(sector_ids))
            .delete(synchronize_session=False)
        )
        MapElement.query.filter(MapElement.sector_id.in_(sector_ids)).update(
            {'sector_id': None}, synchronize_session=False
        )

        # Deepest sectors first so no row outlives its parent
        for item in reversed(subtree):
            db.session.delete(item)
        db.session.flush()

        logger.info(
            f'Deleted sector {sector_ids[0]} with {len(sector_ids) - 1} descendants '
            f'and {products_deleted} products'
        )
        return len(sector_ids), products_deleted

    @classmethod
    def _apply_fields(cls, sector: Sector, data: dict) -> None:
        for key in cls.TEXT_FIELDS:
            if key in data and data[key] is not None:
                if not isinstance(data[key], str):
                    raise SectorValidationError(f'{key} must be a string')
                setattr(sector, key, data[key])
        for key in cls.FLOAT_FIELDS:
            if key in data and data[key] is not None:
                value = data[key]
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise SectorValidationError(f'{key} must be a number')
                setattr(sector, key, float(value))
