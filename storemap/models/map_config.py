"""
StoreMapConfig Model for Store Map Service.

Holds the mapping between a store's real-world dimensions (metres) and the
rendered map (pixels). A store has at most one config row; when none is
stored, DEFAULT_MAP_CONFIG is served.
"""

from storemap.models import db


# Served when a store has no stored configuration
DEFAULT_MAP_CONFIG = {
    'real_width': 50.0,
    'real_height': 30.0,
    'map_width': 1200.0,
    'map_height': 800.0,
    'scale': 20.0,  # pixels per metre
    'origin_x': 0.0,
    'origin_y': 0.0,
}


class StoreMapConfig(db.Model):
    """
    SQLAlchemy model representing a store's map scaling configuration.

    Attributes:
        id: Auto-increment identifier
        store_id: Foreign key to the owning store (unique)
        real_width, real_height: Store dimensions in metres
        map_width, map_height: Map dimensions in pixels
        scale: Pixels per metre
        origin_x, origin_y: Coordinate origin offset
    """

    __tablename__ = 'store_map_configs'

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey('stores.id'), nullable=False, unique=True, index=True)
    real_width = db.Column(db.Float, nullable=False, default=DEFAULT_MAP_CONFIG['real_width'])
    real_height = db.Column(db.Float, nullable=False, default=DEFAULT_MAP_CONFIG['real_height'])
    map_width = db.Column(db.Float, nullable=False, default=DEFAULT_MAP_CONFIG['map_width'])
    map_height = db.Column(db.Float, nullable=False, default=DEFAULT_MAP_CONFIG['map_height'])
    scale = db.Column(db.Float, nullable=False, default=DEFAULT_MAP_CONFIG['scale'])
    origin_x = db.Column(db.Float, nullable=False, default=DEFAULT_MAP_CONFIG['origin_x'])
    origin_y = db.Column(db.Float, nullable=False, default=DEFAULT_MAP_CONFIG['origin_y'])

    @classmethod
    def default_dict(cls, store_id=None):
        """
        Build the response served for a store without a stored config.

        Args:
            store_id: Store the defaults are served for

        Returns:
            Dictionary with default values and ``is_default`` set
        """
        result = {'id': None, 'store_id': store_id}
        result.update(DEFAULT_MAP_CONFIG)
        result['is_default'] = True
        return result

    def to_dict(self):
        """Convert map config to dictionary."""
        return {
            'id': self.id,
            'store_id': self.store_id,
            'real_width': self.real_width,
            'real_height': self.real_height,
            'map_width': self.map_width,
            'map_height': self.map_height,
            'scale': self.scale,
            'origin_x': self.origin_x,
            'origin_y': self.origin_y,
            'is_default': False,
        }

    def __repr__(self):
        return f'<StoreMapConfig store={self.store_id} scale={self.scale}>'
