"""
Sector Model for Store Map Service.

Represents a labeled rectangular region of a store's floor plan. Sectors
nest: a sector with no parent is a root sector (level 0), and every other
sector sits one level below its parent.
"""

from storemap.models import db


class Sector(db.Model):
    """
    SQLAlchemy model representing a store sector.

    Positions and sizes are in store-local metres. The parent/child relation
    forms a forest scoped to one store; ``level`` equals the number of
    ancestor links up to a root.

    Attributes:
        id: Auto-increment identifier
        store_id: Foreign key to the owning store
        name: Sector name
        description: Optional description
        position_x: X coordinate of the sector origin
        position_y: Y coordinate of the sector origin
        width: Sector width
        height: Sector height
        level: Depth in the hierarchy (0 = root)
        parent_id: ID of the parent sector (None for root sectors)
    """

    __tablename__ = 'sectors'

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey('stores.id'), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True, default='')
    position_x = db.Column(db.Float, nullable=False, default=0.0)
    position_y = db.Column(db.Float, nullable=False, default=0.0)
    width = db.Column(db.Float, nullable=False, default=0.0)
    height = db.Column(db.Float, nullable=False, default=0.0)
    level = db.Column(db.Integer, nullable=False, default=0)
    parent_id = db.Column(
        db.Integer,
        db.ForeignKey('sectors.id', ondelete='SET NULL'),
        nullable=True,
        index=True,
    )

    # Products are owned by the sector; children are resolved through
    # StoreRepository so the tree can be assembled with a cycle guard.
    products = db.relationship(
        'Product',
        backref='sector',
        lazy='dynamic',
        cascade='all, delete-orphan',
    )

    def to_dict(self):
        """
        Serialize the sector's own attributes (no products or children).

        Returns:
            Dictionary containing sector fields
        """
        return {
            'id': self.id,
            'store_id': self.store_id,
            'name': self.name,
            'description': self.description,
            'position_x': self.position_x,
            'position_y': self.position_y,
            'width': self.width,
            'height': self.height,
            'level': self.level,
            'parent_id': self.parent_id,
        }

    def __repr__(self):
        """String representation for debugging."""
        return f'<Sector {self.id} {self.name!r} level={self.level} parent={self.parent_id}>'
