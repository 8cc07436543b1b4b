import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from signshop.config.settings import Settings
from signshop.state import AppState


@pytest.fixture(scope="function")
def settings(tmp_path):
    """Settings pointing at a throwaway data directory."""
    return Settings.load(project_root=tmp_path, data_dir=tmp_path / 'data')


@pytest.fixture(scope="function")
def state(settings):
    return AppState.create(settings)


@pytest.fixture(scope="function")
def client_id(state):
    return state.catalog.create_client({'name': 'Empresa ABC Ltda', 'email': 'contato@abc.com'}).id
