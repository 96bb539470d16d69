"""Storefront cart: client-owned cart store, shipping estimates and checkout handoff"""

__version__ = "1.0.0"
