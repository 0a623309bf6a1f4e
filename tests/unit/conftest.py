"""
Unit test fixtures: reconciler wired to the in-memory server.
"""

import pytest

from core.reconciler import Reconciler


@pytest.fixture
def reconciler(server):
    return Reconciler(server)
