"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import abc
import asyncio
import logging
import typing


class BaseMicroserviceApplication(abc.ABC):
    """
    Base microservice class.

    Subclasses provide ``_initialise``, ``_main_loop`` and ``_shutdown``; the
    base class drives them from ``initialise``, ``run`` and ``stop``.
    """
    __slots__ = ["_is_initialised", "_logger", "_shutdown_complete",
                 "_shutdown_event"]

    def __init__(self):
        self._is_initialised: bool = False
        self._logger: typing.Optional[logging.Logger] = None
        self._shutdown_event: asyncio.Event = asyncio.Event()
        self._shutdown_complete: asyncio.Event = asyncio.Event()

    @property
    def logger(self) -> logging.Logger:
        """ Logger instance used by the microservice. """
        return self._logger

    @logger.setter
    def logger(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def is_initialised(self) -> bool:
        """ True once ``initialise`` has completed successfully. """
        return self._is_initialised

    @property
    def shutdown_event(self) -> asyncio.Event:
        """
        Event used to signal the shutdown of the service.

        Background tasks should check it to stop gracefully when the
        application is shutting down.
        """
        return self._shutdown_event

    @property
    def shutdown_complete(self) -> asyncio.Event:
        """
        Event that indicates the service has completed its shutdown process.
        """
        return self._shutdown_complete

    async def initialise(self) -> bool:
        """
        Microservice initialisation, upon success self._is_initialised is
        set to True.

        Returns:
            Boolean: True => Successful, False => Unsuccessful.
        """
        if await self._initialise() is True:
            self._is_initialised = True
            return True

        await self.stop()

        return False

    async def run(self) -> None:
        """
        Run the main loop until the shutdown event is set.
        """
        if not self._is_initialised:
            self._logger.warning("Microservice is not initialised. "
                                 "Exiting run loop.")
            return

        self._logger.info("Microservice starting main loop.")

        try:
            while not self._shutdown_event.is_set():
                await self._main_loop()
                await asyncio.sleep(0.1)

        except asyncio.CancelledError:
            self._logger.debug("Service: Cancellation received.")
            raise

        finally:
            self._logger.info("Exiting microservice run loop...")
            await self.stop()
            self._logger.info("Shutdown complete.")

    async def stop(self) -> None:
        """
        Stop the microservice. Calling it more than once only shuts down
        once.
        """
        if self._shutdown_complete.is_set():
            return

        if self._logger:
            self._logger.info("Stopping microservice...")

        self._shutdown_event.set()

        await self._shutdown()
        self._shutdown_complete.set()

        if self._logger:
            self._logger.info("Microservice shutdown complete...")

    async def _initialise(self) -> bool:
        """
        Microservice initialisation.  It should return a boolean
        (True => Successful, False => Unsuccessful).
        """
        return True

    @abc.abstractmethod
    async def _main_loop(self) -> None:
        """ Abstract method for main microservice loop. """

    @abc.abstractmethod
    async def _shutdown(self):
        """ Abstract method for microservice shutdown. """
