"""Reservation domain: entities, lifecycle states and operation results."""
