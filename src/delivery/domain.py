"""Delivery bounded context: delivery records and their status lifecycle.

Owns the authoritative delivery status. Every accepted change is announced
to the Order and Notification services through the delivery outbox.
"""

from protean.domain import Domain

delivery = Domain(name="delivery")
