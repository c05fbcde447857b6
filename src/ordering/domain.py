"""Ordering bounded context: orders, their pricing, and the delivery link.

Orders are priced synchronously against the Product service. The link to a
Delivery and the DELIVERED status are projected from Delivery service events.
"""

from protean.domain import Domain

ordering = Domain(name="ordering")
