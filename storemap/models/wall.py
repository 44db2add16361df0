"""
Wall Model for Store Map Service.

A wall is a straight line segment on the store floor plan.
"""

from storemap.models import db


DEFAULT_WALL_THICKNESS = 0.1


class Wall(db.Model):
    """
    SQLAlchemy model representing a wall segment.

    Attributes:
        id: Auto-increment identifier
        store_id: Foreign key to the owning store
        start_x, start_y: Segment start point (metres)
        end_x, end_y: Segment end point (metres)
        thickness: Wall thickness (metres, default 0.1)
    """

    __tablename__ = 'walls'

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey('stores.id'), nullable=False, index=True)
    start_x = db.Column(db.Float, nullable=False, default=0.0)
    start_y = db.Column(db.Float, nullable=False, default=0.0)
    end_x = db.Column(db.Float, nullable=False, default=0.0)
    end_y = db.Column(db.Float, nullable=False, default=0.0)
    thickness = db.Column(db.Float, nullable=False, default=DEFAULT_WALL_THICKNESS)

    def to_dict(self):
        """Convert wall to dictionary."""
        return {
            'id': self.id,
            'store_id': self.store_id,
            'start_x': self.start_x,
            'start_y': self.start_y,
            'end_x': self.end_x,
            'end_y': self.end_y,
            'thickness': self.thickness,
        }

    def __repr__(self):
        return f'<Wall {self.id} store={self.store_id}>'
