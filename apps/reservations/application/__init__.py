"""Reservation use cases and the ports they depend on."""
