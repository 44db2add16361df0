"""
MapElement Model for Store Map Service.

A map element is a generic renderable shape on the store plan (cashier,
entrance, passage, etc.). Elements are independent of the sector hierarchy
but may point at a sector or beacon for the renderer's convenience.
"""

import json

from storemap.models import db


# Element kinds understood by the map renderer
MAP_ELEMENT_TYPES = ['sector', 'wall', 'cashier', 'beacon', 'entrance', 'exit', 'passage']


class MapElement(db.Model):
    """
    SQLAlchemy model representing a renderable map element.

    Attributes:
        id: Auto-increment identifier
        store_id: Foreign key to the owning store
        type: Element kind (see MAP_ELEMENT_TYPES)
        name: Display name
        position_x, position_y: Element origin (metres)
        width, height: Element size (metres)
        rotation: Rotation in degrees
        color: Display color (hex)
        element_metadata: Free-form JSON text, exposed as ``metadata``
        sector_id: Optional linked sector
        beacon_id: Optional linked beacon
    """

    __tablename__ = 'map_elements'

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey('stores.id'), nullable=False, index=True)
    type = db.Column(db.String(20), nullable=False)
    name = db.Column(db.String(200), nullable=True, default='')
    position_x = db.Column(db.Float, nullable=False, default=0.0)
    position_y = db.Column(db.Float, nullable=False, default=0.0)
    width = db.Column(db.Float, nullable=False, default=0.0)
    height = db.Column(db.Float, nullable=False, default=0.0)
    rotation = db.Column(db.Float, nullable=False, default=0.0)
    color = db.Column(db.String(20), nullable=True)
    # 'metadata' is reserved on declarative classes
    element_metadata = db.Column('metadata', db.Text, nullable=True)
    sector_id = db.Column(db.Integer, db.ForeignKey('sectors.id', ondelete='SET NULL'), nullable=True)
    beacon_id = db.Column(db.Integer, db.ForeignKey('beacons.id', ondelete='SET NULL'), nullable=True)

    def get_metadata(self):
        """
        Decode the stored metadata JSON.

        Returns:
            Decoded metadata (dict/list), or None if unset or not valid JSON
        """
        if not self.element_metadata:
            return None
        try:
            return json.loads(self.element_metadata)
        except (TypeError, ValueError):
            return None

    def set_metadata(self, value):
        """Encode and store metadata; None clears it."""
        self.element_metadata = json.dumps(value) if value is not None else None

    def to_dict(self):
        """Convert map element to dictionary."""
        return {
            'id': self.id,
            'store_id': self.store_id,
            'type': self.type,
            'name': self.name,
            'position_x': self.position_x,
            'position_y': self.position_y,
            'width': self.width,
            'height': self.height,
            'rotation': self.rotation,
            'color': self.color,
            'metadata': self.get_metadata(),
            'sector_id': self.sector_id,
            'beacon_id': self.beacon_id,
        }

    def __repr__(self):
        return f'<MapElement {self.id} {self.type} store={self.store_id}>'
