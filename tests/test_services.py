"""
Service-layer tests: store, catalog, orders, plans and audit.

The central check is that an order's stored price survives later changes to
material and ink master costs.
"""
import json

import pytest

from signshop.engine import OrderStatus
from signshop.services.plans import (
    PlanLimitError,
    check_plan_limit,
    get_plan_limits,
    is_feature_available,
)
from signshop.services.store import JsonStore


@pytest.fixture
def material(state):
    return state.catalog.create_material({'name': 'Lona 440g', 'unit': 'm2', 'cost_per_unit': 18.5})


@pytest.fixture
def ink(state):
    return state.catalog.create_ink({'name': 'Ciano', 'cost_per_liter': 180})


def banner_payload(state, client_id, material, ink):
    return {
        'client_id': client_id,
        'name': 'Banner 3x1',
        'material_lines': [vars(state.catalog.material_line(material.id, width=3, height=1))],
        'ink_lines': [vars(state.catalog.ink_line(ink.id, 120))],
        'labor_hours': 1.5,
        'labor_rate': 40,
        'markup_percent': 40,
    }


# Store

def test_store_crud_and_pagination(tmp_path):
    store = JsonStore(tmp_path)
    for i, name in enumerate(['Alpha', 'Beta', 'Gamma']):
        store.add('clients', {'name': name, 'created_at': f"2026-01-0{i + 1}"})

    page = store.paginate('clients', page=1, limit=2)
    assert page.count == 3
    assert page.total_pages == 2
    assert [r['name'] for r in page.data] == ['Gamma', 'Beta']

    found = store.paginate('clients', search='alp')
    assert [r['name'] for r in found.data] == ['Alpha']

    row_id = found.data[0]['id']
    store.update('clients', row_id, {'name': 'Alpha 2'})
    assert store.find_by_id('clients', row_id)['name'] == 'Alpha 2'
    assert store.remove('clients', row_id) is True
    assert store.count('clients') == 2

    with pytest.raises(ValueError, match="not found"):
        store.update('clients', 'missing', {'name': 'x'})


def test_corrupt_collection_reads_as_empty(tmp_path):
    (tmp_path / 'clients.json').write_text('{not json', encoding='utf-8')
    assert JsonStore(tmp_path).all('clients') == []


def test_backup_round_trip(tmp_path):
    source = JsonStore(tmp_path / 'a')
    source.add('clients', {'name': 'Alpha'})
    backup = source.export_backup()
    assert 'last_backup_at' in backup['meta']

    target = JsonStore(tmp_path / 'b')
    target.import_backup(json.loads(json.dumps(backup)))
    assert [r['name'] for r in target.all('clients')] == ['Alpha']

    with pytest.raises(ValueError, match="Invalid backup"):
        target.import_backup({'clients': []})


# Catalog

def test_catalog_validation_errors(state):
    with pytest.raises(ValueError, match="Name is required"):
        state.catalog.create_client({'name': '  '})
    with pytest.raises(ValueError, match="Invalid email"):
        state.catalog.create_client({'name': 'Bad', 'email': 'nope'})
    with pytest.raises(ValueError, match="must not be negative"):
        state.catalog.create_material({'name': 'Vinil', 'unit': 'm2', 'cost_per_unit': -1})
    with pytest.raises(ValueError, match="must be a number"):
        state.catalog.create_ink({'name': 'Preto', 'cost_per_liter': 'cheap'})
    with pytest.raises(ValueError, match="Unit must be"):
        state.catalog.create_material({'name': 'Vinil', 'unit': 'ft', 'cost_per_unit': 1})


def test_material_unit_aliases_are_stored_normalized(state):
    created = state.catalog.create_material({'name': 'Perfil', 'unit': 'linear-meter', 'cost_per_unit': '9.75'})
    assert created.unit == 'm'
    assert created.cost_per_unit == 9.75


def test_snapshot_lines_copy_current_master_cost(state, material, ink):
    line = state.catalog.material_line(material.id, width=2, height=1)
    ink_line = state.catalog.ink_line(ink.id, 100)

    assert line.cost_per_unit_snapshot == 18.5
    assert line.unit == 'm2'
    assert line.material_name == 'Lona 440g'
    assert ink_line.cost_per_liter_snapshot == 180

    with pytest.raises(ValueError, match="not found"):
        state.catalog.material_line('missing')


def test_catalog_update_and_delete_are_audited(state, material):
    state.catalog.update_material(material.id, {'cost_per_unit': 20})
    state.catalog.delete_material(material.id)

    actions = [row['action'] for row in state.store.all('audit_logs')]
    assert actions == ['create', 'update', 'delete']
    with pytest.raises(ValueError, match="not found"):
        state.catalog.delete_material(material.id)


# Orders

def test_create_order_stores_breakdown(state, client_id, material, ink):
    order = state.orders.create_order(banner_payload(state, client_id, material, ink))

    assert order.status is OrderStatus.QUOTE
    assert order.breakdown.total_cost == 137.10
    assert order.breakdown.sale_price == 191.94
    stored = state.store.find_by_id('service_orders', order.id)
    assert stored['breakdown']['sale_price'] == 191.94
    assert stored['created_at'] == stored['updated_at']


def test_master_cost_change_does_not_reprice_orders(state, client_id, material, ink):
    order = state.orders.create_order(banner_payload(state, client_id, material, ink))

    state.catalog.update_material(material.id, {'cost_per_unit': 99})
    state.catalog.update_ink(ink.id, {'cost_per_liter': 999})

    assert state.orders.get_order(order.id).breakdown.sale_price == 191.94

    # Editing the order recomputes from its own snapshots, not the new master costs
    edited = state.orders.update_order(order.id, {'labor_hours': 2})
    assert edited.material_lines[0].cost_per_unit_snapshot == 18.5
    assert edited.breakdown.total_cost == 157.10


def test_order_validation(state, client_id):
    with pytest.raises(ValueError, match="Client is required"):
        state.orders.create_order({'name': 'X'})
    with pytest.raises(ValueError, match="not found"):
        state.orders.create_order({'client_id': 'ghost', 'name': 'X'})
    with pytest.raises(ValueError, match="Service name is required"):
        state.orders.create_order({'client_id': client_id, 'name': ''})
    with pytest.raises(ValueError, match="Markup must not be negative"):
        state.orders.create_order({'client_id': client_id, 'name': 'X', 'markup_percent': -5})


def test_status_is_an_open_field(state, client_id):
    order = state.orders.create_order({'client_id': client_id, 'name': 'Placa'})

    state.orders.set_status(order.id, 'completed')
    back = state.orders.set_status(order.id, 'Orçamento')

    assert back.status is OrderStatus.QUOTE
    logs = state.store.find('audit_logs', lambda r: r['entity'] == 'service_order' and r['action'] == 'status')
    assert len(logs) == 2


def test_payments_and_comments(state, client_id):
    order = state.orders.create_order({'client_id': client_id, 'name': 'Placa', 'manual_price': 300})

    state.orders.add_payment(order.id, 100, 'pix', date='2026-10-01')
    updated = state.orders.add_comment(order.id, 'Ana', 'Cliente aprovou a arte')

    assert updated.amount_paid == 100
    assert updated.balance_due == 200
    assert updated.comments[0].author == 'Ana'
    assert updated.breakdown.sale_price == 300
    with pytest.raises(ValueError, match="Comment text is required"):
        state.orders.add_comment(order.id, 'Ana', '  ')


def test_list_orders_filters_by_status(state, client_id):
    first = state.orders.create_order({'client_id': client_id, 'name': 'Banner'})
    state.orders.create_order({'client_id': client_id, 'name': 'Adesivo'})
    state.orders.set_status(first.id, 'production')

    page = state.orders.list_orders(status='production')
    assert [o.name for o in page.data] == ['Banner']
    assert state.orders.list_orders(search='ades').count == 1


def test_delete_order(state, client_id):
    order = state.orders.create_order({'client_id': client_id, 'name': 'Banner'})
    state.orders.delete_order(order.id)

    assert state.orders.get_order(order.id) is None
    with pytest.raises(ValueError, match="not found"):
        state.orders.delete_order(order.id)


def test_preview_does_not_persist(state, client_id):
    breakdown = state.orders.preview({'client_id': client_id, 'name': 'X', 'extras': [{'value': 10}], 'markup_percent': 50})

    assert breakdown.sale_price == 15.00
    assert state.store.count('service_orders') == 0


# Plans

def test_plan_limits():
    assert get_plan_limits('free')['materials'] == 10
    assert get_plan_limits('pro')['users'] == 5
    assert get_plan_limits('unknown') == get_plan_limits('free')
    assert is_feature_available('local_backup', 'free')
    assert not is_feature_available('reports', 'free')
    assert is_feature_available('reports', 'pro')


def test_free_plan_blocks_eleventh_material(state):
    for i in range(10):
        state.catalog.create_material({'name': f'Material {i}', 'unit': 'm', 'cost_per_unit': 1})

    check = check_plan_limit(state.store, 'materials', 'free')
    assert check.can_create is False
    assert check.current == 10
    with pytest.raises(PlanLimitError):
        state.catalog.create_material({'name': 'One more', 'unit': 'm', 'cost_per_unit': 1})

    state.set_plan('pro')
    assert state.catalog.create_material({'name': 'One more', 'unit': 'm', 'cost_per_unit': 1}).name == 'One more'


@pytest.mark.parametrize("cost", ['nan', float('inf'), '-inf'])
def test_non_finite_master_costs_are_rejected(state, cost):
    with pytest.raises(ValueError, match="must be a finite number"):
        state.catalog.create_material({'name': 'Vinil', 'unit': 'm2', 'cost_per_unit': cost})
    with pytest.raises(ValueError, match="must be a finite number"):
        state.catalog.create_ink({'name': 'Preto', 'cost_per_liter': cost})


def test_quote_form_manual_price_zero_is_a_price(state, client_id):
    form = {'client_id': client_id, 'name': 'Brinde', 'extras': [{'value': 40}], 'markup_percent': 50}

    assert state.orders.preview({**form, 'manual_price': None}).sale_price == 60.00
    assert state.orders.preview({**form, 'manual_price': 0}).sale_price == 0

    order = state.orders.create_order({**form, 'manual_price': 0})
    assert order.manual_price == 0
    assert order.breakdown.sale_price == 0
    assert order.breakdown.profit == -40.00
