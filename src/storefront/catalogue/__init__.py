"""Catalogue adapter factory.

Provides get_catalogue() / set_catalogue() to swap implementations. The
in-memory adapter is the default; deployments plug in an adapter backed by
the catalogue service.
"""

from storefront.catalogue.memory import InMemoryCatalogue
from storefront.catalogue.port import Catalogue

_current_catalogue: Catalogue | None = None


def get_catalogue() -> Catalogue:
    global _current_catalogue
    if _current_catalogue is None:
        _current_catalogue = InMemoryCatalogue()
    return _current_catalogue


def set_catalogue(catalogue: Catalogue) -> None:
    """Override the active catalogue (useful for tests)."""
    global _current_catalogue
    _current_catalogue = catalogue


def reset_catalogue() -> None:
    global _current_catalogue
    _current_catalogue = None
