import asyncio
import logging

from finance_assistant.config import Settings
from finance_assistant.database import create_engine_for, init_models

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main():
    settings = Settings.from_env()
    engine = create_engine_for(settings.database_url)
    try:
        await init_models(engine)
        logger.info("✅ Database tables created")
    finally:
        await engine.dispose()


# 🧪 Run manually: python scripts/init_db.py
if __name__ == "__main__":
    asyncio.run(main())
