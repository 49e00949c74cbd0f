"""Smoke tests for the web dashboard, wired to a real controller."""

import pytest

from conftest import FakeSink, FakeStorage, make_record
from sorting_line.controllers import AppController
from sorting_line.webapp import app as webapp


@pytest.fixture
def client(make_simulator):
    ui = webapp.WebUI()
    storage = FakeStorage(initial=[make_record(1_000), make_record(2_000)])
    controller = AppController(
        {}, ui, FakeSink(online=False), storage,
        clock=lambda: 2_500, simulator_factory=make_simulator,
        register_exit=lambda fn: None,
    )
    controller.initialize()
    webapp.bind_ui(ui)
    webapp.app.config['TESTING'] = True
    with webapp.app.test_client() as c:
        yield c, controller, storage
    webapp.web_ui = None


def test_status_reports_mode_and_controls(client):
    c, controller, _ = client
    data = c.get('/api/status').get_json()

    assert data['status'] == 'OFFLINE'
    assert data['analytics']['total'] == 2
    assert data['controls']['start']['disabled'] is False
    assert data['controls']['stop']['disabled'] is True


def test_start_then_stop(client):
    c, controller, _ = client
    assert c.post('/api/start').status_code == 200
    assert controller.state.is_running
    assert c.get('/api/status').get_json()['status'] == 'RUNNING'

    # settings are locked while running
    assert c.post('/api/speed', json={'speed': 3}).status_code == 409
    assert c.post('/api/start').status_code == 409

    assert c.post('/api/stop').status_code == 200
    assert not controller.state.is_running
    assert c.get('/api/status').get_json()['status'] == 'STOPPED'


def test_clear_requires_confirmation(client):
    c, controller, storage = client

    resp = c.post('/api/clear', json={})
    assert resp.get_json() == {'ok': True, 'result': False}
    assert len(controller.state.all_data) == 2

    resp = c.post('/api/clear', json={'confirm': True})
    assert resp.get_json() == {'ok': True, 'result': True}
    assert controller.state.all_data == []
    assert storage.writes == [[]]


def test_filter_and_analytics(client):
    c, controller, _ = client
    c.post('/api/filter', json={'filter': '1000'})
    assert controller.state.time_filter == '1000'

    data = c.get('/api/analytics').get_json()
    assert data['analytics']['total'] == 1
    assert data['recent'][0]['timestamp'] == 2_000


def test_non_object_json_body_uses_defaults(client):
    c, controller, _ = client
    c.post('/api/filter', json={'filter': '1000'})

    resp = c.post('/api/filter', json=[1])
    assert resp.status_code == 200
    assert controller.state.time_filter == 'all'

    resp = c.post('/api/clear', json="yes")
    assert resp.status_code == 200
    assert resp.get_json() == {'ok': True, 'result': False}
    assert len(controller.state.all_data) == 2


def test_fault_controls(client):
    c, controller, _ = client
    assert c.post('/api/fault-rate', json={'rate': 0.5}).status_code == 409

    c.post('/api/faults', json={'enabled': True})
    assert c.post('/api/fault-rate', json={'rate': 5}).status_code == 200
    assert controller.state.simulation.fault_rate == 1.0


def test_unbound_app_is_unavailable():
    webapp.web_ui = None
    with webapp.app.test_client() as c:
        assert c.get('/api/status').status_code == 503
        assert c.post('/api/start').status_code == 503
