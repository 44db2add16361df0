"""
Beacon Model for Store Map Service.

Represents a Bluetooth beacon mounted in a store. Beacons are stored for the
map renderer only; no positioning is computed from them.
"""

from storemap.models import db


# Supported beacon protocols
BEACON_TYPES = ['ibeacon', 'eddystone']


class Beacon(db.Model):
    """
    SQLAlchemy model representing a store beacon.

    Attributes:
        id: Auto-increment identifier
        store_id: Foreign key to the owning store
        mac: Unique hardware MAC address
        position_x, position_y: Floor position (metres)
        position_z: Mounting height (metres)
        type: Beacon protocol ('ibeacon' or 'eddystone')
        uuid: Beacon proximity UUID
        major: iBeacon major value (0..65535)
        minor: iBeacon minor value (0..65535)
        tx_power: Calibrated transmit power (-128..127)
        is_active: Whether the beacon is currently in service
    """

    __tablename__ = 'beacons'

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey('stores.id'), nullable=False, index=True)
    mac = db.Column(db.String(32), unique=True, nullable=False, index=True)
    position_x = db.Column(db.Float, nullable=False, default=0.0)
    position_y = db.Column(db.Float, nullable=False, default=0.0)
    position_z = db.Column(db.Float, nullable=False, default=0.0)
    type = db.Column(db.String(20), nullable=False, default='ibeacon')
    uuid = db.Column(db.String(36), nullable=True)
    major = db.Column(db.Integer, nullable=False, default=0)
    minor = db.Column(db.Integer, nullable=False, default=0)
    tx_power = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self):
        """
        Serialize the beacon to a dictionary for API responses.

        Returns:
            Dictionary containing all beacon fields
        """
        return {
            'id': self.id,
            'store_id': self.store_id,
            'mac': self.mac,
            'position_x': self.position_x,
            'position_y': self.position_y,
            'position_z': self.position_z,
            'type': self.type,
            'uuid': self.uuid,
            'major': self.major,
            'minor': self.minor,
            'tx_power': self.tx_power,
            'is_active': self.is_active,
        }

    def __repr__(self):
        """String representation for debugging."""
        return f'<Beacon {self.mac} store={self.store_id}>'
