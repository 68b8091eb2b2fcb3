"""Reservations app package.

This app owns the reservation lifecycle: availability checks for a
product and date range, creation, confirmation, cancellation and
completion of reservations, and the reminder job. Confirmed reservations
of one product never overlap; writers for a product are serialized with
a row lock on the product inside a database transaction.
"""
