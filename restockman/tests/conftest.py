"""
Pytest fixtures for Restockman tests.
"""

from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission

from restockman.adapters import reset_product_validator
from restockman.models import Branch
from restockman.services.restock import RestockRequest
from restockman.tests.testapp.models import Product


User = get_user_model()


@pytest.fixture(autouse=True)
def fresh_validator():
    """Drop the cached product validator between tests."""
    reset_product_validator()
    yield
    reset_product_validator()


@pytest.fixture
def user(db):
    """Create a test user without special permissions."""
    return User.objects.create_user(
        username='clerk',
        password='testpass123'
    )


@pytest.fixture
def admin(db):
    """Create a user allowed to retire batches."""
    admin = User.objects.create_user(
        username='admin',
        password='testpass123'
    )
    admin.user_permissions.add(
        Permission.objects.get(content_type__app_label='restockman', codename='retire_batch')
    )
    # Reload to clear the permission cache
    return User.objects.get(pk=admin.pk)


@pytest.fixture
def branch(db):
    """Default branch."""
    return Branch.objects.create(code='main', name='Main Branch', is_default=True)


@pytest.fixture
def other_branch(db):
    return Branch.objects.create(code='cebu', name='Cebu Branch')


@pytest.fixture
def product(db):
    """Create an available product."""
    return Product.objects.create(name='Paracetamol 500mg', code='PARA500')


@pytest.fixture
def other_product(db):
    return Product.objects.create(name='Amoxicillin 250mg', code='AMOX250')


@pytest.fixture
def unavailable_product(db):
    """Create a product the catalog has taken off sale."""
    return Product.objects.create(
        name='Discontinued Syrup',
        code='SYRUP',
        status='discontinued',
    )


@pytest.fixture
def inactive_product(db):
    return Product.objects.create(name='Old Vitamin C', code='VITC', is_active=False)


@pytest.fixture
def today():
    """Fixed business date for deterministic expiration math."""
    return date(2024, 1, 15)


@pytest.fixture
def make_request(product, branch):
    """Build a valid RestockRequest, overriding any field."""

    def _make(**overrides):
        fields = {
            'product': product,
            'branch': branch,
            'quantity': 20,
            'cost_per_unit': Decimal('15.00'),
            'expiration_date': date(2024, 6, 10),
            'received_date': date(2024, 1, 10),
            'supplier_name': 'ABC Trading',
            'batch_number': 'B-2024-001',
        }
        fields.update(overrides)
        return RestockRequest(**fields)

    return _make


@pytest.fixture
def restock(make_request, admin, today):
    """Run a restock with sensible defaults and return its result."""
    from restockman import ledger

    def _restock(**overrides):
        return ledger.restock(make_request(**overrides), user=admin, today=today)

    return _restock
