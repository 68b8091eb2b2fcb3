"""
Shared Kernel

Base classes and utilities shared across the domain apps. The reservation
core builds its entities, value objects and transaction handling on top of
this package, independent of the Django ORM models.
"""
