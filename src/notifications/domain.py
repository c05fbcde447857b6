"""Notifications bounded context: fan-in of user-facing notifications.

Consumes the Notification contract from both the Order and the Delivery
service and forwards each one to the configured sender. Every dispatch
attempt that reaches the sender is recorded for audit.
"""

from protean.domain import Domain

notifications = Domain(name="notifications")
