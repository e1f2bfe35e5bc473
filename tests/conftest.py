import pytest

from db.resources import build_clients
from fakes import FakeSupabase


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def clients(supabase):
    return build_clients(supabase)
