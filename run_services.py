import asyncio
import logging

import uvicorn

from shared.core.config import settings

logger = logging.getLogger(__name__)


async def drain_outbox():
    # imported here so the app module configures logging first
    from shared.core.database import TenancySessionLocal
    from tenancy_service.app.crud.onboarding.outbox_crud import process_pending

    while True:
        await asyncio.sleep(settings.OUTBOX_RETRY_INTERVAL_SECONDS)
        db = TenancySessionLocal()
        try:
            summary = await asyncio.to_thread(process_pending, db)
            if summary.processed:
                logger.info("Outbox retry pass: %s", summary.model_dump())
        except Exception:
            logger.exception("Outbox retry pass failed")
        finally:
            db.close()


async def start_servers():
    config = uvicorn.Config(
        "tenancy_service.app.main:app",
        host="0.0.0.0",
        port=8002,
        reload=False,
    )
    server = uvicorn.Server(config)

    tasks = [server.serve()]
    if settings.OUTBOX_RETRY_INTERVAL_SECONDS > 0:
        tasks.append(drain_outbox())

    await asyncio.gather(*tasks)

if __name__ == "__main__":
    try:
        asyncio.run(start_servers())
    except KeyboardInterrupt:
        print("\nShutting down servers...")
