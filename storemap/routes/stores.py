"""
Store Map Public Store Routes

Blueprint for the read API used by the map renderer:
- GET /: List all stores
- GET /<id>: Store with its full sector tree
- GET /<id>/map: Everything needed to render a store map
- GET /<id>/products: Search products within a store
- GET /<id>/queues: Current checkout queue lengths
- POST /<id>/queues: Report a checkout queue length

All endpoints are prefixed with /api/stores when registered with the app.
"""

from flask import Blueprint, current_app, request, jsonify

from storemap.models import db, StoreMapConfig
from storemap.services.store_repository import StoreRepository
from storemap.services.sector_tree import SectorTreeAssembler, SectorTreeError
from storemap.services.queue_service import get_queue_service, QueueUnavailableError
from storemap.utils.payload import PayloadError, get_json_body, optional_integer


# Create stores blueprint
stores_bp = Blueprint('stores', __name__)

# Product search result cap
MAX_SEARCH_RESULTS = 500


def assemble_store_tree(store_id):
    """
    Build the serialized sector tree for a store.

    The caller must have verified that the store exists.

    Args:
        store_id: Store whose sectors are assembled

    Returns:
        List of serialized root sector nodes

    Raises:
        SectorTreeError: The stored hierarchy is cyclic, too deep or has a missing parent
    """
    assembler = SectorTreeAssembler(
        StoreRepository(db.session),
        max_depth=current_app.config['SECTOR_TREE_MAX_DEPTH'],
    )
    return [node.to_dict() for node in assembler.build_sector_tree(store_id)]


def sector_tree_error_response(store_id, error):
    """500 response for a hierarchy the assembler refused to build."""
    current_app.logger.error(f'Cannot assemble sector tree for store {store_id}: {error}')
    return jsonify({
        'error': 'Sector hierarchy is invalid',
        'code': 'sector_hierarchy_invalid',
        'message': str(error),
    }), 500


@stores_bp.route('', methods=['GET'])
def list_stores():
    """
    List all stores.

    Returns:
        200: List of stores
            {
                "stores": [ { store data }, ... ],
                "count": 2
            }
    """
    stores = StoreRepository(db.session).list_stores()

    return jsonify({
        'stores': [store.to_dict() for store in stores],
        'count': len(stores)
    }), 200


@stores_bp.route('/<int:store_id>', methods=['GET'])
def get_store(store_id):
    """
    Get a store with its sector hierarchy.

    Args:
        store_id: Store ID

    Returns:
        200: Store data with nested sectors
            {
                "id": 1,
                "name": "Supermarket",
                "address": "...",
                "sectors": [
                    {
                        "id": 1, "name": "Dairy", "level": 0, "parent_id": null,
                        "products": [ ... ],
                        "sub_sectors": [ ... ]
                    }
                ]
            }
        404: Store not found
        500: Stored sector hierarchy is invalid
    """
    store = StoreRepository(db.session).get_store(store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    try:
        sectors = assemble_store_tree(store.id)
    except SectorTreeError as e:
        return sector_tree_error_response(store.id, e)

    result = store.to_dict()
    result['sectors'] = sectors
    return jsonify(result), 200


@stores_bp.route('/<int:store_id>/map', methods=['GET'])
def get_store_map(store_id):
    """
    Get the full map document for a store.

    Combines the sector tree with walls, map elements, beacons and the map
    configuration. When no configuration is stored, defaults are returned
    with ``is_default`` set.

    Returns:
        200: {
                "store": { store data },
                "sectors": [ sector tree ],
                "walls": [ ... ],
                "map_elements": [ ... ],
                "beacons": [ ... ],
                "config": { map config }
             }
        404: Store not found
    """
    repository = StoreRepository(db.session)
    store = repository.get_store(store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    try:
        sectors = assemble_store_tree(store.id)
    except SectorTreeError as e:
        return sector_tree_error_response(store.id, e)

    config = repository.get_map_config(store.id)

    return jsonify({
        'store': store.to_dict(),
        'sectors': sectors,
        'walls': [wall.to_dict() for wall in repository.find_walls(store.id)],
        'map_elements': [element.to_dict() for element in repository.find_map_elements(store.id)],
        'beacons': [beacon.to_dict() for beacon in repository.find_beacons(store.id)],
        'config': config.to_dict() if config else StoreMapConfig.default_dict(store.id),
    }), 200


@stores_bp.route('/<int:store_id>/products', methods=['GET'])
def search_products(store_id):
    """
    Search products in a store by name.

    Query Parameters:
        q: Case-insensitive substring of the product name (optional)
        limit: Maximum results, 1-500 (default 100)

    Returns:
        200: {
                "store_id": 1,
                "query": "milk",
                "products": [ { product data, "sector_name": "Dairy" }, ... ],
                "count": 3
             }
        400: Invalid limit
        404: Store not found
    """
    repository = StoreRepository(db.session)
    store = repository.get_store(store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    query = request.args.get('q', '').strip()
    try:
        limit = int(request.args.get('limit', 100))
    except ValueError:
        limit = None
    if limit is None or limit < 1 or limit > MAX_SEARCH_RESULTS:
        return jsonify({
            'error': f'limit must be between 1 and {MAX_SEARCH_RESULTS}'
        }), 400

    products = repository.search_products(store.id, query or None, limit=limit)

    results = []
    for product in products:
        item = product.to_dict()
        item['sector_name'] = product.sector.name if product.sector else None
        results.append(item)

    return jsonify({
        'store_id': store.id,
        'query': query,
        'products': results,
        'count': len(results)
    }), 200


@stores_bp.route('/<int:store_id>/queues', methods=['GET'])
def get_queues(store_id):
    """
    Get current checkout queue lengths for a store.

    Returns:
        200: {
                "store_id": 1,
                "queues": { "1": 3, "2": 5 }
             }
        404: Store not found
        503: Queue cache unavailable
    """
    store = StoreRepository(db.session).get_store(store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    try:
        queues = get_queue_service().get_queues(store.id)
    except QueueUnavailableError as e:
        return jsonify({'error': str(e)}), 503

    return jsonify({
        'store_id': store.id,
        'queues': {str(number): count for number, count in queues.items()}
    }), 200


@stores_bp.route('/<int:store_id>/queues', methods=['POST'])
def update_queue(store_id):
    """
    Report the number of people waiting at a checkout.

    Request Body:
        {
            "checkout_number": 2 (required, >= 1),
            "people_count": 4 (required, >= 0)
        }

    Returns:
        200: {
                "store_id": 1,
                "checkout_number": 2,
                "people_count": 4,
                "updated_at": "..."
             }
        400: Invalid data
        404: Store not found
        503: Queue cache unavailable
    """
    store = StoreRepository(db.session).get_store(store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    try:
        data = get_json_body()
        checkout_number = optional_integer(data, 'checkout_number', minimum=1)
        people_count = optional_integer(data, 'people_count', minimum=0)
        if checkout_number is None:
            raise PayloadError('checkout_number is required')
        if people_count is None:
            raise PayloadError('people_count is required')
        entry = get_queue_service().update_queue(store.id, checkout_number, people_count)
    except QueueUnavailableError as e:
        return jsonify({'error': str(e)}), 503
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({
        'store_id': store.id,
        'checkout_number': checkout_number,
        'people_count': entry['people_count'],
        'updated_at': entry['updated_at'],
    }), 200
