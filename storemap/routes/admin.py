"""
Store Map Admin Routes

Blueprint for store, sector and product management:
- POST /stores: Create a store
- GET/PUT/DELETE /stores/<id>: Read, update or delete a store
- POST /stores/<id>/sectors: Create a sector
- GET /stores/<id>/sectors: Flat sector list
- GET /stores/<id>/sector-tree: Nested sector tree
- PUT/DELETE /sectors/<id>: Update or delete a sector (delete cascades)
- POST /sectors/<id>/products: Create a product
- PUT/DELETE /products/<id>: Update or delete a product

All endpoints require the admin role and are prefixed with /api/admin when
registered with the app.
"""

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from storemap.models import db, Store, Sector, Product
from storemap.routes.stores import assemble_store_tree, sector_tree_error_response
from storemap.services.store_repository import StoreRepository
from storemap.services.sector_tree import SectorTreeError
from storemap.services.sector_service import SectorService
from storemap.utils.payload import (
    PayloadError,
    get_json_body,
    require_string,
    optional_string,
    optional_number,
)
from storemap.utils.permissions import admin_required


# Create admin blueprint
admin_bp = Blueprint('admin', __name__)


def _validate_sector_payload(data):
    """Type-check the optional sector fields shared by create and update."""
    optional_string(data, 'name', max_length=200)
    optional_string(data, 'description')
    for key in SectorService.FLOAT_FIELDS:
        optional_number(data, key)
    parent_id = data.get('parent_id')
    if parent_id is not None and (isinstance(parent_id, bool) or not isinstance(parent_id, int)):
        raise PayloadError('parent_id must be an integer or null')


def _parse_price(data, required):
    if 'price' not in data or data['price'] is None:
        if required:
            raise PayloadError('price is required')
        return None
    return optional_number(data, 'price', minimum=0)


# =============================================================================
# Stores
# =============================================================================

@admin_bp.route('/stores', methods=['POST'])
@admin_required
def create_store():
    """
    Create a new store.

    Request Body:
        {
            "name": "Supermarket" (required),
            "address": "Main Street 1" (optional)
        }

    Returns:
        201: Created store data
        400: Invalid data
    """
    try:
        data = get_json_body()
        name = require_string(data, 'name', max_length=200)
        address = optional_string(data, 'address', default='', max_length=500)
    except PayloadError as e:
        return jsonify({'error': str(e)}), 400

    store = Store(name=name, address=address)

    try:
        db.session.add(store)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to create store: {e}')
        return jsonify({'error': 'Failed to create store'}), 500

    current_app.logger.info(f'Created store {store.id} ({store.name})')
    return jsonify(store.to_dict()), 201


@admin_bp.route('/stores/<int:store_id>', methods=['GET'])
@admin_required
def get_store(store_id):
    """
    Get a store with record counts.

    Returns:
        200: Store data with sector_count, beacon_count, wall_count,
             map_element_count
        404: Store not found
    """
    store = db.session.get(Store, store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    result = store.to_dict()
    result['sector_count'] = store.sectors.count()
    result['beacon_count'] = store.beacons.count()
    result['wall_count'] = store.walls.count()
    result['map_element_count'] = store.map_elements.count()
    return jsonify(result), 200


@admin_bp.route('/stores/<int:store_id>', methods=['PUT'])
@admin_required
def update_store(store_id):
    """
    Update a store.

    Request Body:
        {
            "name": "New name" (optional),
            "address": "New address" (optional)
        }

    Returns:
        200: Updated store data
        400: Invalid data
        404: Store not found
    """
    store = db.session.get(Store, store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    try:
        data = get_json_body()
        if 'name' in data:
            store.name = require_string(data, 'name', max_length=200)
        if 'address' in data:
            store.address = optional_string(data, 'address', default='', max_length=500)
    except PayloadError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to update store {store_id}: {e}')
        return jsonify({'error': 'Failed to update store'}), 500

    return jsonify(store.to_dict()), 200


@admin_bp.route('/stores/<int:store_id>', methods=['DELETE'])
@admin_required
def delete_store(store_id):
    """
    Delete a store and everything it owns.

    Returns:
        200: {"message": "Store deleted successfully", "id": 1}
        404: Store not found
    """
    store = db.session.get(Store, store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    # Products hang off sectors, not the store
    sector_ids = [s.id for s in store.sectors]

    try:
        if sector_ids:
            Product.query.filter(Product.sector_id.in_(sector_ids)).delete(synchronize_session=False)
        db.session.delete(store)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to delete store {store_id}: {e}')
        return jsonify({'error': 'Failed to delete store'}), 500

    current_app.logger.info(f'Deleted store {store_id} with {len(sector_ids)} sectors')
    return jsonify({'message': 'Store deleted successfully', 'id': store_id}), 200


# =============================================================================
# Sectors
# =============================================================================

@admin_bp.route('/stores/<int:store_id>/sectors', methods=['POST'])
@admin_required
def create_sector(store_id):
    """
    Create a sector in a store.

    Request Body:
        {
            "name": "Dairy" (required),
            "description": "..." (optional),
            "position_x": 0, "position_y": 0, "width": 10, "height": 5 (optional),
            "parent_id": 3 (optional, same store)
        }

    ``level`` is derived from the parent and cannot be set.

    Returns:
        201: Created sector data
        400: Invalid data or parent
        404: Store not found
    """
    store = db.session.get(Store, store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    try:
        data = get_json_body()
        name = require_string(data, 'name', max_length=200)
        _validate_sector_payload(data)
        fields = {key: data[key] for key in ('description',) + SectorService.FLOAT_FIELDS if key in data}
        sector = SectorService.create_sector(store.id, name, parent_id=data.get('parent_id'), **fields)
        db.session.commit()
    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to create sector in store {store_id}: {e}')
        return jsonify({'error': 'Failed to create sector'}), 500

    return jsonify(sector.to_dict()), 201


@admin_bp.route('/stores/<int:store_id>/sectors', methods=['GET'])
@admin_required
def list_sectors(store_id):
    """
    List every sector of a store as a flat list.

    Returns:
        200: {"sectors": [ ... ], "count": n}
        404: Store not found
    """
    repository = StoreRepository(db.session)
    store = repository.get_store(store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    sectors = repository.find_all_sectors(store.id)
    return jsonify({
        'sectors': [sector.to_dict() for sector in sectors],
        'count': len(sectors)
    }), 200


@admin_bp.route('/stores/<int:store_id>/sector-tree', methods=['GET'])
@admin_required
def get_sector_tree(store_id):
    """
    Get the nested sector tree of a store.

    Returns:
        200: {"store_id": 1, "sectors": [ sector tree ]}
        404: Store not found
        500: Stored sector hierarchy is invalid
    """
    store = db.session.get(Store, store_id)
    if not store:
        return jsonify({'error': 'Store not found'}), 404

    try:
        sectors = assemble_store_tree(store.id)
    except SectorTreeError as e:
        return sector_tree_error_response(store.id, e)

    return jsonify({'store_id': store.id, 'sectors': sectors}), 200


@admin_bp.route('/sectors/<int:sector_id>', methods=['PUT'])
@admin_required
def update_sector(sector_id):
    """
    Update a sector.

    Any subset of name, description, position_x, position_y, width, height
    and parent_id may be sent. Moving a sector re-levels its subtree;
    moving it under itself or one of its descendants is rejected.

    Returns:
        200: Updated sector data
        400: Invalid data, parent or cycle
        404: Sector not found
    """
    sector = db.session.get(Sector, sector_id)
    if not sector:
        return jsonify({'error': 'Sector not found'}), 404

    try:
        data = get_json_body()
        _validate_sector_payload(data)
        SectorService.update_sector(sector, data)
        db.session.commit()
    except ValueError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to update sector {sector_id}: {e}')
        return jsonify({'error': 'Failed to update sector'}), 500

    return jsonify(sector.to_dict()), 200


@admin_bp.route('/sectors/<int:sector_id>', methods=['DELETE'])
@admin_required
def delete_sector(sector_id):
    """
    Delete a sector, its descendant sectors and all their products.

    Returns:
        200: {
                "message": "Sector deleted successfully",
                "id": 1,
                "sectors_deleted": 3,
                "products_deleted": 7
             }
        404: Sector not found
    """
    sector = db.session.get(Sector, sector_id)
    if not sector:
        return jsonify({'error': 'Sector not found'}), 404

    try:
        sectors_deleted, products_deleted = SectorService.delete_sector(sector)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to delete sector {sector_id}: {e}')
        return jsonify({'error': 'Failed to delete sector'}), 500

    return jsonify({
        'message': 'Sector deleted successfully',
        'id': sector_id,
        'sectors_deleted': sectors_deleted,
        'products_deleted': products_deleted,
    }), 200


# =============================================================================
# Products
# =============================================================================

@admin_bp.route('/sectors/<int:sector_id>/products', methods=['POST'])
@admin_required
def create_product(sector_id):
    """
    Create a product in a sector.

    Request Body:
        {
            "name": "Milk" (required),
            "description": "..." (optional),
            "price": 1.99 (required, >= 0)
        }

    Returns:
        201: Created product data
        400: Invalid data
        404: Sector not found
    """
    sector = db.session.get(Sector, sector_id)
    if not sector:
        return jsonify({'error': 'Sector not found'}), 404

    try:
        data = get_json_body()
        name = require_string(data, 'name', max_length=200)
        description = optional_string(data, 'description', default='')
        price = _parse_price(data, required=True)
    except PayloadError as e:
        return jsonify({'error': str(e)}), 400

    product = Product(sector_id=sector.id, name=name, description=description, price=round(price, 2))

    try:
        db.session.add(product)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to create product in sector {sector_id}: {e}')
        return jsonify({'error': 'Failed to create product'}), 500

    return jsonify(product.to_dict()), 201


@admin_bp.route('/products/<int:product_id>', methods=['PUT'])
@admin_required
def update_product(product_id):
    """
    Update a product.

    Request Body (all optional):
        {
            "name": "Milk 1L",
            "description": "...",
            "price": 2.49,
            "sector_id": 4 (move to another sector of the same store)
        }

    Returns:
        200: Updated product data
        400: Invalid data
        404: Product not found
    """
    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({'error': 'Product not found'}), 404

    try:
        data = get_json_body()
        if 'name' in data:
            product.name = require_string(data, 'name', max_length=200)
        if 'description' in data:
            product.description = optional_string(data, 'description', default='')
        price = _parse_price(data, required=False)
        if price is not None:
            product.price = round(price, 2)
        if 'sector_id' in data:
            target_id = data['sector_id']
            if isinstance(target_id, bool) or not isinstance(target_id, int):
                raise PayloadError('sector_id must be an integer')
            target = db.session.get(Sector, target_id)
            if target is None:
                raise PayloadError(f'Sector {target_id} not found')
            if target.store_id != product.sector.store_id:
                raise PayloadError('A product can only move within its store')
            product.sector_id = target.id
    except PayloadError as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 400

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to update product {product_id}: {e}')
        return jsonify({'error': 'Failed to update product'}), 500

    return jsonify(product.to_dict()), 200


@admin_bp.route('/products/<int:product_id>', methods=['DELETE'])
@admin_required
def delete_product(product_id):
    """
    Delete a product.

    Returns:
        200: {"message": "Product deleted successfully", "id": 1}
        404: Product not found
    """
    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({'error': 'Product not found'}), 404

    try:
        db.session.delete(product)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to delete product {product_id}: {e}')
        return jsonify({'error': 'Failed to delete product'}), 500

    return jsonify({'message': 'Product deleted successfully', 'id': product_id}), 200
