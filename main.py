# main.py
import asyncio
import logging
from aiohttp import web
from paylink.bot import PaylinkBot
from paylink.config import Config, setup_logging
from paylink.database.database import Database
from paylink.services.container import Services
from paylink.web import create_app

async def main():
    # Setup logging
    setup_logging()
    logger = logging.getLogger(__name__)
    Config.validate()

    db = Database()
    await db.connect()
    services = Services.from_database(db)

    runner = web.AppRunner(create_app(services))
    bot = PaylinkBot(services)

    try:
        await runner.setup()
        await web.TCPSite(runner, Config.WEB_HOST, Config.WEB_PORT).start()
        logger.info(f"Web server listening on {Config.WEB_HOST}:{Config.WEB_PORT}")

        logger.info("Starting bot...")
        await bot.start()
        await asyncio.Event().wait()
    except Exception as e:
        logger.error(f"Error starting service: {e}", exc_info=True)
        raise
    finally:
        await bot.stop()
        await runner.cleanup()
        await db.close()

if __name__ == "__main__":
    asyncio.run(main())
