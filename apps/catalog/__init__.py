"""Catalog app package.

Holds the rentable products and their categories. The reservation core
only needs to know whether a product exists and what it costs, which it
reads through the catalog adapter in ``apps.reservations.repositories``.
"""
