"""Main entry point - runs the API and the Offering listener."""

import asyncio
import logging
import signal
import sys

import uvicorn

from hermes.api.app import create_app
from hermes.config import Settings, get_settings
from hermes.container import ApplicationContainer, build_container

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


class Application:
    """Main application that runs the API server and the event listener."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.container: ApplicationContainer = build_container(settings)
        self._shutdown_event = asyncio.Event()

    async def start(self):
        """Start all services."""
        logger.info("Starting Hermes...")
        if self.settings.has_default_api_key:
            logger.warning("API_KEY is not set - using the default key")

        tasks = [asyncio.create_task(self._run_api())]
        logger.info("API task created")

        tasks.append(asyncio.create_task(self._run_listener()))
        logger.info("Listener task created")

        # Wait for shutdown signal
        await self._shutdown_event.wait()

        if self.container.listener:
            self.container.listener.stop()
        for task in tasks:
            task.cancel()

        await asyncio.gather(*tasks, return_exceptions=True)

        await self._cleanup()

    async def _run_api(self):
        """Run the FastAPI server."""
        try:
            app = create_app(self.container)
            config = uvicorn.Config(
                app,
                host=self.settings.service_host,
                port=self.settings.service_port,
                log_level="debug" if self.settings.debug else "info",
                lifespan="off",
            )
            server = uvicorn.Server(config)
            # Signals are handled by Application
            server.install_signal_handlers = lambda: None
            logger.info(
                f"Hermes messenger running at "
                f"http://{self.settings.service_host}:{self.settings.service_port}"
            )
            await server.serve()
        except asyncio.CancelledError:
            logger.info("API server cancelled")
        except Exception as e:
            logger.error(f"API error: {e}")
            self.shutdown()
            raise

    async def _run_listener(self):
        """Run the Offering listener."""
        try:
            await self.container.listener.run()
        except asyncio.CancelledError:
            logger.info("Listener cancelled")
        except Exception as e:
            logger.error(f"Listener error: {e}")
            raise

    async def _cleanup(self):
        """Cleanup resources."""
        logger.info("Cleaning up...")
        await self.container.close()
        logger.info("Cleanup complete")

    def shutdown(self):
        """Signal shutdown."""
        logger.info("Shutdown requested, saving divine tokens cache and shutting down")
        self._shutdown_event.set()


def main():
    """Main entry point."""
    settings = get_settings()
    configure_logging(settings)

    missing = settings.missing_required()
    if missing:
        logger.error(f"Missing required configuration: {', '.join(missing)}")
        sys.exit(1)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    try:
        app = Application(settings)
    except Exception as e:
        # Malformed contract address or private key
        logger.error(f"Invalid configuration: {e}")
        loop.close()
        sys.exit(1)

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, app.shutdown)

    try:
        loop.run_until_complete(app.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        loop.close()


if __name__ == "__main__":
    main()
