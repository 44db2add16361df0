"""
Store Model for Store Map Service.

Represents a physical retail store. A store is the top-level unit that owns
the sector hierarchy and all flat map records (walls, beacons, map elements,
map configuration).
"""

from storemap.models import db, DateTimeUTC, utcnow


class Store(db.Model):
    """
    SQLAlchemy model representing a retail store.

    Deleting a store cascades to its sectors (and through them, their
    products), beacons, walls, map elements and map configuration.

    Attributes:
        id: Auto-increment identifier
        name: Human-readable store name
        address: Street address
        created_at: Timestamp when the store was created
        updated_at: Timestamp of last update
    """

    __tablename__ = 'stores'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    address = db.Column(db.String(500), nullable=True, default='')
    created_at = db.Column(DateTimeUTC, default=utcnow)
    updated_at = db.Column(DateTimeUTC, nullable=True, onupdate=utcnow)

    # Relationships
    sectors = db.relationship(
        'Sector',
        backref='store',
        lazy='dynamic',
        cascade='all, delete-orphan',
    )
    beacons = db.relationship(
        'Beacon',
        backref='store',
        lazy='dynamic',
        cascade='all, delete-orphan',
    )
    walls = db.relationship(
        'Wall',
        backref='store',
        lazy='dynamic',
        cascade='all, delete-orphan',
    )
    map_elements = db.relationship(
        'MapElement',
        backref='store',
        lazy='dynamic',
        cascade='all, delete-orphan',
    )
    map_config = db.relationship(
        'StoreMapConfig',
        backref='store',
        uselist=False,
        cascade='all, delete-orphan',
    )

    def to_dict(self):
        """
        Serialize the store to a dictionary for API responses.

        Returns:
            Dictionary containing store fields (without sectors)
        """
        return {
            'id': self.id,
            'name': self.name,
            'address': self.address,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        """String representation for debugging."""
        return f'<Store {self.id} {self.name!r}>'
