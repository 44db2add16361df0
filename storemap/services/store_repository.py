"""
Store Repository for Store Map Service.

Read-side access to stores and everything hanging off them. The repository
wraps an explicitly passed SQLAlchemy session so callers (and tests) decide
which session it reads through.

All sequence-returning queries are ordered by ascending primary key, which
pins child and product order in the assembled sector tree.
"""

from typing import List, Optional

from storemap.models import (
    Store,
    Sector,
    Product,
    Wall,
    Beacon,
    MapElement,
    StoreMapConfig,
)


class StoreRepository:
    """
    Query layer over the store-mapping tables.

    Args:
        session: SQLAlchemy session to read through (normally ``db.session``)
    """

    def __init__(self, session):
        self.session = session

    # ==========================================================================
    # Stores
    # ==========================================================================

    def get_store(self, store_id: int) -> Optional[Store]:
        """Return the store with this id, or None."""
        return self.session.get(Store, store_id)

    def list_stores(self) -> List[Store]:
        """Return all stores ordered by id."""
        return self.session.query(Store).order_by(Store.id).all()

    # ==========================================================================
    # Sector hierarchy
    # ==========================================================================

    def find_sectors(self, store_id: int, parent_id: Optional[int] = None) -> List[Sector]:
        """
        Return the sectors of a store that sit directly under ``parent_id``.

        Args:
            store_id: Store the sectors belong to
            parent_id: Parent sector id, or None to select root sectors

        Returns:
            List of Sector ordered by id
        """
        query = self.session.query(Sector).filter(Sector.store_id == store_id)
        if parent_id is None:
            query = query.filter(Sector.parent_id.is_(None))
        else:
            query = query.filter(Sector.parent_id == parent_id)
        return query.order_by(Sector.id).all()

    def find_all_sectors(self, store_id: int) -> List[Sector]:
        """Return every sector of a store as a flat list ordered by id."""
        return (
            self.session.query(Sector)
            .filter(Sector.store_id == store_id)
            .order_by(Sector.id)
            .all()
        )

    def find_products(self, sector_id: int) -> List[Product]:
        """Return the products placed directly in a sector, ordered by id."""
        return (
            self.session.query(Product)
            .filter(Product.sector_id == sector_id)
            .order_by(Product.id)
            .all()
        )

    def search_products(self, store_id: int, query: Optional[str] = None, limit: int = 100) -> List[Product]:
        """
        Search a store's products by name (case-insensitive substring).

        Args:
            store_id: Store to search within
            query: Substring to match; None or empty returns all products
            limit: Maximum number of rows returned

        Returns:
            List of Product ordered by name, then id
        """
        stmt = (
            self.session.query(Product)
            .join(Sector, Product.sector_id == Sector.id)
            .filter(Sector.store_id == store_id)
        )
        if query:
            pattern = query.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
            stmt = stmt.filter(Product.name.ilike(f'%{pattern}%', escape='\\'))
        return stmt.order_by(Product.name, Product.id).limit(limit).all()

    # ==========================================================================
    # Flat map records
    # ==========================================================================

    def find_walls(self, store_id: int) -> List[Wall]:
        return self.session.query(Wall).filter(Wall.store_id == store_id).order_by(Wall.id).all()

    def find_beacons(self, store_id: int) -> List[Beacon]:
        return self.session.query(Beacon).filter(Beacon.store_id == store_id).order_by(Beacon.id).all()

    def find_map_elements(self, store_id: int) -> List[MapElement]:
        return (
            self.session.query(MapElement)
            .filter(MapElement.store_id == store_id)
            .order_by(MapElement.id)
            .all()
        )

    def get_map_config(self, store_id: int) -> Optional[StoreMapConfig]:
        return self.session.query(StoreMapConfig).filter(StoreMapConfig.store_id == store_id).first()
