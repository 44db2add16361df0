"""
Store Map Admin Routes for Map Records

Blueprint for the flat per-store map records:
- POST /beacons, GET /beacons/<store_id>: Create or list beacons
- PUT/DELETE /beacons/<id>: Update or delete a beacon
- GET/POST /stores/<id>/map-elements: List or create map elements
- PUT/DELETE /map-elements/<id>: Update or delete a map element
- GET/POST /stores/<id>/walls: List or create walls
- DELETE /walls/<id>: Delete a wall
- GET/POST /stores/<id>/map-config: Read or upsert the map configuration

All endpoints require the admin role and are prefixed with /api/admin when
registered with the app.
"""

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from storemap.models import (
    db,
    Store,
    Beacon,
    BEACON_TYPES,
    MapElement,
    MAP_ELEMENT_TYPES,
    Sector,
    Wall,
    StoreMapConfig,
    DEFAULT_MAP_CONFIG,
)
from storemap.models.wall import DEFAULT_WALL_THICKNESS
from storemap.services.store_repository import StoreRepository
from storemap.utils.payload import (
    PayloadError,
    get_json_body,
    require_string,
    optional_string,
    optional_number,
    optional_integer,
    optional_bool,
)
from storemap.utils.permissions import admin_required


# Create map admin blueprint
map_admin_bp = Blueprint('map_admin', __name__)

# Beacon numeric ranges
BEACON_ID_MIN, BEACON_ID_MAX = 0, 65535
TX_POWER_MIN, TX_POWER_MAX = -128, 127

BEACON_FLOAT_FIELDS = ('position_x', 'position_y', 'position_z')
ELEMENT_FLOAT_FIELDS = ('position_x', 'position_y', 'width', 'height', 'rotation')
CONFIG_SIZE_FIELDS = ('real_width', 'real_height', 'map_width', 'map_height', 'scale')
CONFIG_ORIGIN_FIELDS = ('origin_x', 'origin_y')


def _normalize_mac(mac):
    return mac.strip().upper()


def _mac_taken(mac, exclude_id=None):
    query = Beacon.query.filter(Beacon.mac == mac)
    if exclude_id is not None:
        query = query.filter(Beacon.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def _apply_beacon_fields(beacon, data):
    """Validate and copy optional beacon fields present in ``data``."""
    for key in BEACON_FLOAT_FIELDS:
        value = optional_number(data, key)
        if value is not None:
            setattr(beacon, key, value)

    beacon_type = optional_string(data, 'type')
    if beacon_type is not None:
        if beacon_type not in BEACON_TYPES:
            raise PayloadError(f"type must be one of: {', '.join(BEACON_TYPES)}")
        beacon.type = beacon_type

    if 'uuid' in data:
        beacon.uuid = optional_string(data, 'uuid', max_length=36)

    for key in ('major', 'minor'):
        value = optional_integer(data, key, minimum=BEACON_ID_MIN, maximum=BEACON_ID_MAX)
        if value is not None:
            setattr(beacon, key, value)

    tx_power = optional_integer(data, 'tx_power', minimum=TX_POWER_MIN, maximum=TX_POWER_MAX)
    if tx_power is not None:
        beacon.tx_power = tx_power

    is_active = optional_bool(data, 'is_active')
    if is_active is not None:
        beacon.is_active = is_active


def _resolve_store_link(model, key, data, store_id):
    """
    Resolve an optional foreign id that must point into the same store.

    Returns the id, or None when absent or null.
    """
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise PayloadError(f'{key} must be an integer or null')
    target = db.session.get(model, value)
    if target is None or target.store_id != store_id:
        raise PayloadError(f'{key} {value} not found in store {store_id}')
    return target.id


def _apply_element_fields(element, data):
    """Validate and copy optional map element fields present in ``data``."""
    if 'type' in data:
        element_type = require_string(data, 'type')
        if element_type not in MAP_ELEMENT_TYPES:
            raise PayloadError(f"type must be one of: {', '.join(MAP_ELEMENT_TYPES)}")
        element.type = element_type

    if 'name' in data:
        element.name = optional_string(data, 'name', default='', max_length=200)

    for key in ELEMENT_FLOAT_FIELDS:
        value = optional_number(data, key)
        if value is not None:
            setattr(element, key, value)

    if 'color' in data:
        element.color = optional_string(data, 'color', max_length=20)

    if 'metadata' in data:
        metadata = data['metadata']
        if metadata is not None and not isinstance(metadata, (dict, list)):
            raise PayloadError('metadata must be an object, an array or null')
        element.set_metadata(metadata)

    if 'sector_id' in data:
        element.sector_id = _resolve_store_link(Sector, 'sector_id', data, element.store_id)
    if 'beacon_id' in data:
        element.beacon_id = _resolve_store_link(Beacon, 'beacon_id', data, element.store_id)


# =============================================================================
# Beacons
# =============================================================================

@map_admin_bp.route('/beacons', methods=['POST'])
@admin_required
def create_beacon():
    """
    Register a beacon in a store.

    Request Body:
        {
            "store_id": 1 (required),
            "mac": "AA:BB:CC:DD:EE:FF" (required, unique),
            "position_x": 1.5, "position_y": 2.0, "position_z": 2.5 (optional),
            "type": "ibeacon" | "eddystone" (optional, default ibeacon),
            "uuid": "..." (optional),
            "major": 1, "minor": 2 (optional, 0-65535),
            "tx_power": -59 (optional, -128..127),
            "is_active": true (optional)
        }

    Returns:
        201: Created beacon data
        400: Invalid data
        404: Store not found
        409: MAC already registered
    """
    try:
        data = get_json_body()
        store_id = optional_integer(data, 'store_id')
        if store_id is None:
            raise PayloadError('store_id is required')
        mac = _normalize_mac(require_string(data, 'mac', max_length=32))
    except PayloadError as e:
        return jsonify({'error': str(e)}), 400

    store = db.session.get(Store, store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    if _mac_taken(mac):
        return jsonify({'error': f'Beacon with MAC {mac} already exists'}), 409

    beacon = Beacon(store_id=store.id, mac=mac)
    try:
        _apply_beacon_fields(beacon, data)
    except PayloadError as e:
        return jsonify({'error': str(e)}), 400

    try:
        db.session.add(beacon)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': f'Beacon with MAC {mac} already exists'}), 409
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to create beacon {mac}: {e}')
        return jsonify({'error': 'Failed to create beacon'}), 500

    current_app.logger.info(f'Registered beacon {mac} in store {store.id}')
    return jsonify(beacon.to_dict()), 201


@map_admin_bp.route('/beacons/<int:store_id>', methods=['GET'])
@admin_required
def list_beacons(store_id):
    """
    List the beacons of a store.

    Returns:
        200: {"beacons": [ ... ], "count": n}
        404: Store not found
    """
    repository = StoreRepository(db.session)
    store = repository.get_store(store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    beacons = repository.find_beacons(store.id)
    return jsonify({
        'beacons': [beacon.to_dict() for beacon in beacons],
        'count': len(beacons)
    }), 200


@map_admin_bp.route('/beacons/<int:beacon_id>', methods=['PUT'])
@admin_required
def update_beacon(beacon_id):
    """
    Update a beacon. Any beacon field except store_id may be sent.

    Returns:
        200: Updated beacon data
        400: Invalid data
        404: Beacon not found
        409: New MAC already registered
    """
    beacon = db.session.get(Beacon, beacon_id)
    if not beacon:
        return jsonify({'error': 'Beacon not found'}), 404

    try:
        data = get_json_body()
        if 'mac' in data:
            mac = _normalize_mac(require_string(data, 'mac', max_length=32))
            if _mac_taken(mac, exclude_id=beacon.id):
                return jsonify({'error': f'Beacon with MAC {mac} already exists'}), 409
            beacon.mac = mac
        _apply_beacon_fields(beacon, data)
    except PayloadError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'Beacon MAC already exists'}), 409
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to update beacon {beacon_id}: {e}')
        return jsonify({'error': 'Failed to update beacon'}), 500

    return jsonify(beacon.to_dict()), 200


@map_admin_bp.route('/beacons/<int:beacon_id>', methods=['DELETE'])
@admin_required
def delete_beacon(beacon_id):
    """
    Delete a beacon. Map elements linked to it are unlinked.

    Returns:
        200: {"message": "Beacon deleted successfully", "id": 1}
        404: Beacon not found
    """
    beacon = db.session.get(Beacon, beacon_id)
    if not beacon:
        return jsonify({'error': 'Beacon not found'}), 404

    try:
        MapElement.query.filter(MapElement.beacon_id == beacon.id).update(
            {'beacon_id': None}, synchronize_session=False
        )
        db.session.delete(beacon)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to delete beacon {beacon_id}: {e}')
        return jsonify({'error': 'Failed to delete beacon'}), 500

    return jsonify({'message': 'Beacon deleted successfully', 'id': beacon_id}), 200


# =============================================================================
# Map elements
# =============================================================================

@map_admin_bp.route('/stores/<int:store_id>/map-elements', methods=['GET'])
@admin_required
def list_map_elements(store_id):
    """
    List the map elements of a store.

    Returns:
        200: {"map_elements": [ ... ], "count": n}
        404: Store not found
    """
    repository = StoreRepository(db.session)
    store = repository.get_store(store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    elements = repository.find_map_elements(store.id)
    return jsonify({
        'map_elements': [element.to_dict() for element in elements],
        'count': len(elements)
    }), 200


@map_admin_bp.route('/stores/<int:store_id>/map-elements', methods=['POST'])
@admin_required
def create_map_element(store_id):
    """
    Create a map element.

    Request Body:
        {
            "type": "cashier" (required, see MAP_ELEMENT_TYPES),
            "name": "Checkout 1" (optional),
            "position_x", "position_y", "width", "height", "rotation" (optional),
            "color": "#ff0000" (optional),
            "metadata": { ... } (optional JSON),
            "sector_id": 2, "beacon_id": 5 (optional, same store)
        }

    Returns:
        201: Created map element data
        400: Invalid data
        404: Store not found
    """
    store = db.session.get(Store, store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    element = MapElement(store_id=store.id)
    try:
        data = get_json_body()
        require_string(data, 'type')
        _apply_element_fields(element, data)
    except PayloadError as e:
        return jsonify({'error': str(e)}), 400

    try:
        db.session.add(element)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to create map element in store {store_id}: {e}')
        return jsonify({'error': 'Failed to create map element'}), 500

    return jsonify(element.to_dict()), 201


@map_admin_bp.route('/map-elements/<int:element_id>', methods=['PUT'])
@admin_required
def update_map_element(element_id):
    """
    Update a map element. Any field accepted on create may be sent.

    Returns:
        200: Updated map element data
        400: Invalid data
        404: Map element not found
    """
    element = db.session.get(MapElement, element_id)
    if not element:
        return jsonify({'error': 'Map element not found'}), 404

    try:
        data = get_json_body()
        _apply_element_fields(element, data)
    except PayloadError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to update map element {element_id}: {e}')
        return jsonify({'error': 'Failed to update map element'}), 500

    return jsonify(element.to_dict()), 200


@map_admin_bp.route('/map-elements/<int:element_id>', methods=['DELETE'])
@admin_required
def delete_map_element(element_id):
    """
    Delete a map element.

    Returns:
        200: {"message": "Map element deleted successfully", "id": 1}
        404: Map element not found
    """
    element = db.session.get(MapElement, element_id)
    if not element:
        return jsonify({'error': 'Map element not found'}), 404

    try:
        db.session.delete(element)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to delete map element {element_id}: {e}')
        return jsonify({'error': 'Failed to delete map element'}), 500

    return jsonify({'message': 'Map element deleted successfully', 'id': element_id}), 200


# =============================================================================
# Walls
# =============================================================================

@map_admin_bp.route('/stores/<int:store_id>/walls', methods=['GET'])
@admin_required
def list_walls(store_id):
    """
    List the walls of a store.

    Returns:
        200: {"walls": [ ... ], "count": n}
        404: Store not found
    """
    repository = StoreRepository(db.session)
    store = repository.get_store(store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    walls = repository.find_walls(store.id)
    return jsonify({
        'walls': [wall.to_dict() for wall in walls],
        'count': len(walls)
    }), 200


@map_admin_bp.route('/stores/<int:store_id>/walls', methods=['POST'])
@admin_required
def create_wall(store_id):
    """
    Create a wall segment.

    Request Body:
        {
            "start_x": 0, "start_y": 0, "end_x": 10, "end_y": 0 (required),
            "thickness": 0.2 (optional, > 0, default 0.1)
        }

    Returns:
        201: Created wall data
        400: Invalid data
        404: Store not found
    """
    store = db.session.get(Store, store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    try:
        data = get_json_body()
        coords = {}
        for key in ('start_x', 'start_y', 'end_x', 'end_y'):
            coords[key] = optional_number(data, key)
            if coords[key] is None:
                raise PayloadError(f'{key} is required')
        thickness = optional_number(data, 'thickness', default=DEFAULT_WALL_THICKNESS)
        if thickness <= 0:
            raise PayloadError('thickness must be greater than 0')
    except PayloadError as e:
        return jsonify({'error': str(e)}), 400

    wall = Wall(store_id=store.id, thickness=thickness, **coords)

    try:
        db.session.add(wall)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to create wall in store {store_id}: {e}')
        return jsonify({'error': 'Failed to create wall'}), 500

    return jsonify(wall.to_dict()), 201


@map_admin_bp.route('/walls/<int:wall_id>', methods=['DELETE'])
@admin_required
def delete_wall(wall_id):
    """
    Delete a wall.

    Returns:
        200: {"message": "Wall deleted successfully", "id": 1}
        404: Wall not found
    """
    wall = db.session.get(Wall, wall_id)
    if not wall:
        return jsonify({'error': 'Wall not found'}), 404

    try:
        db.session.delete(wall)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to delete wall {wall_id}: {e}')
        return jsonify({'error': 'Failed to delete wall'}), 500

    return jsonify({'message': 'Wall deleted successfully', 'id': wall_id}), 200


# =============================================================================
# Map configuration
# =============================================================================

@map_admin_bp.route('/stores/<int:store_id>/map-config', methods=['GET'])
@admin_required
def get_map_config(store_id):
    """
    Get the map configuration of a store.

    Returns:
        200: Map config data; defaults with "is_default": true when none is stored
        404: Store not found
    """
    repository = StoreRepository(db.session)
    store = repository.get_store(store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    config = repository.get_map_config(store.id)
    if config is None:
        return jsonify(StoreMapConfig.default_dict(store.id)), 200
    return jsonify(config.to_dict()), 200


@map_admin_bp.route('/stores/<int:store_id>/map-config', methods=['POST'])
@admin_required
def save_map_config(store_id):
    """
    Create or update the map configuration of a store.

    Request Body (all optional; omitted fields keep their current or
    default value):
        {
            "real_width": 50, "real_height": 30 (metres, > 0),
            "map_width": 1200, "map_height": 800 (pixels, > 0),
            "scale": 20 (pixels per metre, > 0),
            "origin_x": 0, "origin_y": 0
        }

    Returns:
        200: Updated map config data
        201: Created map config data
        400: Invalid data
        404: Store not found
    """
    repository = StoreRepository(db.session)
    store = repository.get_store(store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    try:
        data = get_json_body()
        values = {}
        for key in CONFIG_SIZE_FIELDS:
            value = optional_number(data, key)
            if value is not None:
                if value <= 0:
                    raise PayloadError(f'{key} must be greater than 0')
                values[key] = value
        for key in CONFIG_ORIGIN_FIELDS:
            value = optional_number(data, key)
            if value is not None:
                values[key] = value
    except PayloadError as e:
        return jsonify({'error': str(e)}), 400

    config = repository.get_map_config(store.id)
    created = config is None
    if created:
        config = StoreMapConfig(store_id=store.id, **DEFAULT_MAP_CONFIG)
        db.session.add(config)
    for key, value in values.items():
        setattr(config, key, value)

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to save map config for store {store_id}: {e}')
        return jsonify({'error': 'Failed to save map config'}), 500

    return jsonify(config.to_dict()), 201 if created else 200
