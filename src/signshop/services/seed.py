"""
Demo data for a fresh store: a few clients, materials, inks and orders.
"""
import logging

logger = logging.getLogger(__name__)

DEMO_CLIENTS = [
    {'name': 'Empresa ABC Ltda', 'document': '12.345.678/0001-90', 'email': 'contato@abc.com',
     'phone': '(11) 99999-9999', 'address': 'Rua das Flores, 123 - São Paulo, SP'},
    {'name': 'João Silva', 'document': '123.456.789-00', 'email': 'joao@email.com',
     'phone': '(11) 88888-8888', 'address': 'Av. Principal, 456 - São Paulo, SP'},
    {'name': 'Padaria Pão Quente', 'email': 'pedidos@paoquente.com', 'phone': '(11) 77777-7777'},
]

DEMO_MATERIALS = [
    {'name': 'Lona 440g', 'unit': 'm2', 'cost_per_unit': 18.5, 'supplier': 'Fornecedor A', 'stock': 120},
    {'name': 'Vinil Adesivo Branco', 'unit': 'm2', 'cost_per_unit': 12.9, 'supplier': 'Fornecedor B', 'stock': 200},
    {'name': 'Perfil de Alumínio', 'unit': 'm', 'cost_per_unit': 9.75, 'supplier': 'Fornecedor C', 'stock': 80},
]

DEMO_INKS = [
    {'name': 'Ciano Eco-Solvente', 'cost_per_liter': 180.0, 'supplier': 'Fornecedor A', 'stock_ml': 5000},
    {'name': 'Magenta Eco-Solvente', 'cost_per_liter': 180.0, 'supplier': 'Fornecedor A', 'stock_ml': 5000},
    {'name': 'Preto UV', 'cost_per_liter': 245.0, 'supplier': 'Fornecedor D', 'stock_ml': 2000},
]


def seed_demo_data(state) -> bool:
    """Populate an empty store. Returns False when clients already exist."""
    if state.store.count('clients') > 0:
        logger.info("Demo data already present, skipping")
        return False

    clients = [state.catalog.create_client(c) for c in DEMO_CLIENTS]
    materials = [state.catalog.create_material(m) for m in DEMO_MATERIALS]
    inks = [state.catalog.create_ink(i) for i in DEMO_INKS]

    banner = state.orders.create_order({
        'client_id': clients[0].id,
        'name': 'Banner fachada 3x1',
        'material_lines': [vars(state.catalog.material_line(materials[0].id, width=3, height=1, count=1))],
        'ink_lines': [vars(state.catalog.ink_line(inks[0].id, 120)), vars(state.catalog.ink_line(inks[1].id, 90))],
        'labor_hours': 1.5,
        'labor_rate': 40,
        'markup_percent': state.settings.shop.default_markup,
    })
    state.orders.create_order({
        'client_id': clients[1].id,
        'name': 'Adesivos vitrine',
        'material_lines': [vars(state.catalog.material_line(materials[1].id, width=0.5, height=0.5, count=8))],
        'ink_lines': [vars(state.catalog.ink_line(inks[2].id, 60))],
        'extras': [{'description': 'Instalação', 'value': 50}],
        'discounts': [{'description': 'Cliente antigo', 'value': 10}],
        'markup_percent': 60,
    })
    state.orders.create_order({
        'client_id': clients[2].id,
        'name': 'Moldura de placa',
        'material_lines': [vars(state.catalog.material_line(materials[2].id, length_m=6))],
        'manual_price': 250,
        'status': 'approved',
    })
    state.orders.set_status(banner.id, 'production')

    logger.info("Seeded %d clients, %d materials, %d inks", len(clients), len(materials), len(inks))
    return True
