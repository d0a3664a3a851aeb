import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the domain is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Collaborator adapters: a fresh fake of each for every test
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def catalogue():
    from storefront.catalogue import reset_catalogue, set_catalogue
    from storefront.catalogue.memory import InMemoryCatalogue

    adapter = InMemoryCatalogue()
    set_catalogue(adapter)
    yield adapter
    reset_catalogue()


@pytest.fixture(autouse=True)
def ledger():
    from storefront.inventory import reset_ledger, set_ledger
    from storefront.inventory.memory import InMemoryStockLedger

    adapter = InMemoryStockLedger()
    set_ledger(adapter)
    yield adapter
    reset_ledger()


@pytest.fixture(autouse=True)
def gateway():
    from storefront.payments.gateway import reset_gateway, set_gateway
    from storefront.payments.gateway.fake_adapter import FakeGateway

    adapter = FakeGateway()
    set_gateway(adapter)
    yield adapter
    reset_gateway()


@pytest.fixture(autouse=True)
def notifier():
    from storefront.notifications import reset_notifier, set_notifier
    from storefront.notifications.fake import FakeNotifier

    adapter = FakeNotifier()
    set_notifier(adapter)
    yield adapter
    reset_notifier()


# ---------------------------------------------------------------------------
# Test data
# ---------------------------------------------------------------------------
@pytest.fixture()
def product(catalogue, ledger):
    """Factory: register a product in the catalogue and seed its stock."""

    def _make(product_id, price=100.0, stock=10, discount_price=None, sizes=()):
        catalogue.add_product(
            product_id,
            name=f"Product {product_id}",
            price=price,
            discount_price=discount_price,
            sizes=sizes,
        )
        ledger.set_stock(product_id, stock)
        return product_id

    return _make


@pytest.fixture()
def customer():
    from storefront.identity.principal import Principal

    return Principal.customer("cust-001")


@pytest.fixture()
def other_customer():
    from storefront.identity.principal import Principal

    return Principal.customer("cust-002")


@pytest.fixture()
def admin():
    from storefront.identity.principal import Principal

    return Principal.admin("admin-001")


@pytest.fixture()
def address():
    return {
        "street": "12 MG Road",
        "city": "Bengaluru",
        "state": "KA",
        "zip_code": "560001",
        "country": "IN",
    }
