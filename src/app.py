"""Fulfillment FastAPI application.

Serves the Order (``/orders``) and Delivery (``/deliveries``) HTTP surfaces.
Each request is wrapped in the correct domain context based on URL prefix.

The in-memory messaging fabric lives inside this process, so the outbox
dispatchers and consumer workers run here too, as asyncio tasks for the
lifetime of the app (set RUN_WORKERS=0 to disable), and the monitoring
dashboard is mounted under ``/monitor``. There is no separate worker or
monitor process: it would see an empty fabric and empty stores.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

import os
from contextlib import asynccontextmanager

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Domains are initialized at module level so uvicorn workers share them.
from delivery.domain import delivery
from notifications.domain import notifications
from ordering.domain import ordering
from shared.logging import configure_logging
from shared.messaging import get_fabric
from shared.monitoring import create_monitor_app
from shared.runtime import Runtime
from shared.web import create_app

configure_logging("api")

delivery.init()
ordering.init()
notifications.init()

runtime = Runtime(get_fabric())


@asynccontextmanager
async def lifespan(_app):
    if os.environ.get("RUN_WORKERS", "1") == "0":
        yield
        return
    async with runtime.lifespan(_app):
        yield


app = create_app(lifespan=lifespan)
app.mount("/monitor", create_monitor_app(runtime))
