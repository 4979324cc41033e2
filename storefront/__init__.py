"""Storefront backend: catalog, cart, wishlist and checkout."""
