"""
Integration tests for the Map Admin API (beacons, map elements, walls,
map configuration).
"""

from storemap.models import db, MapElement, Wall, StoreMapConfig
from storemap.tests.conftest import (
    create_test_store,
    create_test_beacon,
    create_test_wall,
    create_test_map_element,
)


# =============================================================================
# Beacon Tests
# =============================================================================

class TestBeaconsAPI:
    """Tests for /api/admin/beacons."""

    def test_create_beacon(self, client, app, admin_headers, sample_store):
        """POST /beacons should register a beacon with normalized MAC."""
        response = client.post('/api/admin/beacons', json={
            'store_id': sample_store.id,
            'mac': 'aa:bb:cc:dd:ee:ff',
            'position_x': 1.5,
            'position_y': 2.0,
            'position_z': 2.5,
            'type': 'eddystone',
            'major': 10,
            'minor': 20,
            'tx_power': -59
        }, headers=admin_headers)

        assert response.status_code == 201
        data = response.get_json()
        assert data['mac'] == 'AA:BB:CC:DD:EE:FF'
        assert data['type'] == 'eddystone'
        assert data['tx_power'] == -59
        assert data['is_active'] is True

    def test_create_beacon_duplicate_mac(self, client, app, db_session, admin_headers, sample_store):
        """Registering an existing MAC should return 409."""
        create_test_beacon(db_session, sample_store.id, mac='AA:BB:CC:DD:EE:01')

        response = client.post('/api/admin/beacons', json={
            'store_id': sample_store.id,
            'mac': 'aa:bb:cc:dd:ee:01'
        }, headers=admin_headers)

        assert response.status_code == 409

    def test_create_beacon_invalid_type(self, client, app, admin_headers, sample_store):
        """An unknown beacon type should return 400."""
        response = client.post('/api/admin/beacons', json={
            'store_id': sample_store.id,
            'mac': 'AA:BB:CC:DD:EE:02',
            'type': 'bluetooth'
        }, headers=admin_headers)

        assert response.status_code == 400

    def test_create_beacon_out_of_range(self, client, app, admin_headers, sample_store):
        """major above 65535 and tx_power below -128 should return 400."""
        for field, value in (('major', 65536), ('minor', -1), ('tx_power', -129)):
            response = client.post('/api/admin/beacons', json={
                'store_id': sample_store.id,
                'mac': 'AA:BB:CC:DD:EE:03',
                field: value
            }, headers=admin_headers)
            assert response.status_code == 400, field

    def test_create_beacon_requires_store(self, client, app, admin_headers):
        """Missing or unknown store_id should be rejected."""
        response = client.post('/api/admin/beacons', json={'mac': 'AA'}, headers=admin_headers)
        assert response.status_code == 400

        response = client.post('/api/admin/beacons', json={'store_id': 999, 'mac': 'AA'},
                               headers=admin_headers)
        assert response.status_code == 404

    def test_list_beacons(self, client, app, db_session, admin_headers, sample_store):
        """GET /beacons/<store_id> should list only that store's beacons."""
        other = create_test_store(db_session, name='Other')
        create_test_beacon(db_session, sample_store.id, mac='AA:00:00:00:00:01')
        create_test_beacon(db_session, other.id, mac='AA:00:00:00:00:02')

        response = client.get(f'/api/admin/beacons/{sample_store.id}', headers=admin_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data['count'] == 1
        assert data['beacons'][0]['mac'] == 'AA:00:00:00:00:01'

    def test_update_beacon(self, client, app, db_session, admin_headers, sample_store):
        """PUT /beacons/<id> should update fields."""
        beacon = create_test_beacon(db_session, sample_store.id)

        response = client.put(f'/api/admin/beacons/{beacon.id}', json={
            'is_active': False,
            'minor': 7
        }, headers=admin_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data['is_active'] is False
        assert data['minor'] == 7

    def test_update_beacon_mac_conflict(self, client, app, db_session, admin_headers, sample_store):
        """Changing a MAC to one already registered should return 409."""
        create_test_beacon(db_session, sample_store.id, mac='AA:00:00:00:00:01')
        second = create_test_beacon(db_session, sample_store.id, mac='AA:00:00:00:00:02')

        response = client.put(f'/api/admin/beacons/{second.id}', json={
            'mac': 'AA:00:00:00:00:01'
        }, headers=admin_headers)

        assert response.status_code == 409

    def test_delete_beacon_unlinks_elements(self, client, app, db_session, admin_headers, sample_store):
        """DELETE /beacons/<id> should remove the beacon and unlink map elements."""
        beacon = create_test_beacon(db_session, sample_store.id)
        element = create_test_map_element(db_session, sample_store.id, type='beacon',
                                          beacon_id=beacon.id)

        response = client.delete(f'/api/admin/beacons/{beacon.id}', headers=admin_headers)

        assert response.status_code == 200
        assert db.session.get(MapElement, element.id).beacon_id is None

    def test_beacon_not_found(self, client, app, admin_headers):
        """Unknown beacon ids should return 404."""
        assert client.put('/api/admin/beacons/999', json={'minor': 1},
                          headers=admin_headers).status_code == 404
        assert client.delete('/api/admin/beacons/999', headers=admin_headers).status_code == 404


# =============================================================================
# Map Element Tests
# =============================================================================

class TestMapElementsAPI:
    """Tests for map element endpoints."""

    def test_create_element_with_metadata(self, client, app, admin_headers, sample_tree):
        """POST /stores/<id>/map-elements should store metadata as JSON."""
        response = client.post(f"/api/admin/stores/{sample_tree['store'].id}/map-elements", json={
            'type': 'sector',
            'name': 'Dairy outline',
            'width': 8,
            'height': 6,
            'color': '#00ff00',
            'metadata': {'shelves': 4},
            'sector_id': sample_tree['dairy'].id
        }, headers=admin_headers)

        assert response.status_code == 201
        data = response.get_json()
        assert data['metadata'] == {'shelves': 4}
        assert data['sector_id'] == sample_tree['dairy'].id

    def test_create_element_invalid_type(self, client, app, admin_headers, sample_store):
        """An unknown element type should return 400."""
        response = client.post(f'/api/admin/stores/{sample_store.id}/map-elements', json={
            'type': 'fountain'
        }, headers=admin_headers)

        assert response.status_code == 400

    def test_create_element_requires_type(self, client, app, admin_headers, sample_store):
        """A missing type should return 400."""
        response = client.post(f'/api/admin/stores/{sample_store.id}/map-elements', json={
            'name': 'Thing'
        }, headers=admin_headers)

        assert response.status_code == 400

    def test_create_element_foreign_sector(self, client, app, db_session, admin_headers, sample_tree):
        """Linking a sector of another store should return 400."""
        other = create_test_store(db_session, name='Other')

        response = client.post(f'/api/admin/stores/{other.id}/map-elements', json={
            'type': 'sector',
            'sector_id': sample_tree['dairy'].id
        }, headers=admin_headers)

        assert response.status_code == 400

    def test_list_elements(self, client, app, db_session, admin_headers, sample_store):
        """GET /stores/<id>/map-elements should list the store's elements."""
        create_test_map_element(db_session, sample_store.id, type='entrance')
        create_test_map_element(db_session, sample_store.id, type='exit')

        response = client.get(f'/api/admin/stores/{sample_store.id}/map-elements',
                              headers=admin_headers)

        data = response.get_json()
        assert data['count'] == 2
        assert [e['type'] for e in data['map_elements']] == ['entrance', 'exit']

    def test_update_element(self, client, app, db_session, admin_headers, sample_store):
        """PUT /map-elements/<id> should update fields and clear metadata with null."""
        element = create_test_map_element(db_session, sample_store.id)
        element.set_metadata({'a': 1})
        db_session.commit()

        response = client.put(f'/api/admin/map-elements/{element.id}', json={
            'rotation': 90,
            'metadata': None
        }, headers=admin_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data['rotation'] == 90.0
        assert data['metadata'] is None

    def test_delete_element(self, client, app, db_session, admin_headers, sample_store):
        """DELETE /map-elements/<id> should remove the element."""
        element = create_test_map_element(db_session, sample_store.id)
        element_id = element.id

        response = client.delete(f'/api/admin/map-elements/{element_id}', headers=admin_headers)

        assert response.status_code == 200
        assert db.session.get(MapElement, element_id) is None


# =============================================================================
# Wall Tests
# =============================================================================

class TestWallsAPI:
    """Tests for wall endpoints."""

    def test_create_wall_default_thickness(self, client, app, admin_headers, sample_store):
        """POST /stores/<id>/walls should default thickness to 0.1."""
        response = client.post(f'/api/admin/stores/{sample_store.id}/walls', json={
            'start_x': 0, 'start_y': 0, 'end_x': 10, 'end_y': 0
        }, headers=admin_headers)

        assert response.status_code == 201
        assert response.get_json()['thickness'] == 0.1

    def test_create_wall_missing_coordinate(self, client, app, admin_headers, sample_store):
        """A missing coordinate should return 400."""
        response = client.post(f'/api/admin/stores/{sample_store.id}/walls', json={
            'start_x': 0, 'start_y': 0, 'end_x': 10
        }, headers=admin_headers)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'end_y is required'

    def test_create_wall_bad_thickness(self, client, app, admin_headers, sample_store):
        """A non-positive thickness should return 400."""
        response = client.post(f'/api/admin/stores/{sample_store.id}/walls', json={
            'start_x': 0, 'start_y': 0, 'end_x': 1, 'end_y': 1, 'thickness': 0
        }, headers=admin_headers)

        assert response.status_code == 400

    def test_list_and_delete_walls(self, client, app, db_session, admin_headers, sample_store):
        """GET lists walls and DELETE removes one."""
        wall = create_test_wall(db_session, sample_store.id)
        wall_id = wall.id

        response = client.get(f'/api/admin/stores/{sample_store.id}/walls', headers=admin_headers)
        assert response.get_json()['count'] == 1

        response = client.delete(f'/api/admin/walls/{wall_id}', headers=admin_headers)
        assert response.status_code == 200
        assert db.session.get(Wall, wall_id) is None

    def test_wall_not_found(self, client, app, admin_headers):
        """Deleting an unknown wall should return 404."""
        assert client.delete('/api/admin/walls/999', headers=admin_headers).status_code == 404


# =============================================================================
# Map Config Tests
# =============================================================================

class TestMapConfigAPI:
    """Tests for /api/admin/stores/<id>/map-config."""

    def test_get_defaults(self, client, app, admin_headers, sample_store):
        """GET should return defaults when nothing is stored."""
        response = client.get(f'/api/admin/stores/{sample_store.id}/map-config',
                              headers=admin_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data['is_default'] is True
        assert data['real_width'] == 50.0
        assert data['real_height'] == 30.0
        assert data['map_height'] == 800.0

    def test_upsert(self, client, app, admin_headers, sample_store):
        """POST should create the config once and update it afterwards."""
        url = f'/api/admin/stores/{sample_store.id}/map-config'

        response = client.post(url, json={'scale': 25}, headers=admin_headers)
        assert response.status_code == 201
        data = response.get_json()
        assert data['scale'] == 25.0
        assert data['map_width'] == 1200.0
        assert data['is_default'] is False

        response = client.post(url, json={'origin_x': 3}, headers=admin_headers)
        assert response.status_code == 200
        data = response.get_json()
        assert data['scale'] == 25.0
        assert data['origin_x'] == 3.0

        assert StoreMapConfig.query.filter_by(store_id=sample_store.id).count() == 1

    def test_upsert_rejects_non_positive_size(self, client, app, admin_headers, sample_store):
        """A zero scale should return 400."""
        response = client.post(f'/api/admin/stores/{sample_store.id}/map-config',
                               json={'scale': 0}, headers=admin_headers)

        assert response.status_code == 400

    def test_public_map_uses_stored_config(self, client, app, admin_headers, sample_store):
        """The public map should serve the stored config after an upsert."""
        client.post(f'/api/admin/stores/{sample_store.id}/map-config',
                    json={'real_width': 80}, headers=admin_headers)

        config = client.get(f'/api/stores/{sample_store.id}/map').get_json()['config']

        assert config['real_width'] == 80.0
        assert config['is_default'] is False

    def test_config_store_not_found(self, client, app, admin_headers):
        """Unknown stores should return 404."""
        assert client.get('/api/admin/stores/999/map-config',
                          headers=admin_headers).status_code == 404
        assert client.post('/api/admin/stores/999/map-config', json={'scale': 1},
                           headers=admin_headers).status_code == 404
