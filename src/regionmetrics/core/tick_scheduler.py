"""Periodic tick scheduling on top of SimPy."""

import logging
import random
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List

import numpy as np
import simpy
import simpy.rt

logger = logging.getLogger(__name__)


class Updater(ABC):
    """Anything the scheduler ticks once per interval."""

    @abstractmethod
    def do_updates(self) -> None:
        """Run one aggregation cycle."""
        pass


class TickScheduler:
    """Wrapper around a SimPy environment that drives registered updaters.

    Each updater gets its own SimPy process which calls ``do_updates`` every
    ``tick_interval_s``. SimPy runs processes one at a time, so ticks of the
    same updater never overlap.
    """

    def __init__(self, config: Dict[str, Any]) -> None:
        """Initialize the scheduler.

        Args:
            config: Simulation-specific configuration containing:
                - max_simulation_time: Run duration in (simulated) seconds
                - random_seed (optional): Random seed for reproducibility
                - realtime (optional): Follow the wall clock instead of
                  simulated time
                - realtime_factor (optional): Wall seconds per simulated second
        """
        self.config: Dict[str, Any] = config
        self.active_processes: List[simpy.Process] = []
        self.updaters: List[Updater] = []

        if config.get("realtime", False):
            factor = config.get("realtime_factor", 1.0)
            self.env: simpy.Environment = simpy.rt.RealtimeEnvironment(factor=factor, strict=False)
            logger.info(f"Using realtime environment (factor: {factor})")
        else:
            self.env = simpy.Environment()

        if config.get("random_seed") is not None:
            seed = config["random_seed"]
            random.seed(seed)
            np.random.seed(seed)
            logger.info(f"Random seed set to: {seed}")

        logger.info("TickScheduler initialized")

    def register_updater(self, updater: Updater, tick_interval_s: float) -> simpy.Process:
        """Tick ``updater`` every ``tick_interval_s`` seconds until the run ends."""
        if tick_interval_s <= 0:
            raise ValueError(f"tick_interval_s must be positive, got {tick_interval_s}")
        self.updaters.append(updater)
        return self.schedule_process(self._tick_loop, updater, tick_interval_s)

    def _tick_loop(self, updater: Updater, tick_interval_s: float):
        while True:
            yield self.env.timeout(tick_interval_s)
            try:
                updater.do_updates()
            except Exception as e:
                logger.error(f"Error in {updater.__class__.__name__} tick at time {self.env.now}: {e}")

    def schedule_process(self, process_generator_func: Callable, *args, **kwargs) -> simpy.Process:
        """Schedule a SimPy process (a generator function).

        Args:
            process_generator_func: A generator function that yields SimPy events
            *args: Positional arguments for the generator function
            **kwargs: Keyword arguments for the generator function

        Returns:
            The SimPy Process object
        """
        process = self.env.process(process_generator_func(*args, **kwargs))
        self.active_processes.append(process)
        logger.debug(f"Scheduled process: {process_generator_func.__name__}")
        return process

    def run(self) -> None:
        """Run until max_simulation_time is reached or no more events are scheduled."""
        max_simulation_time = self.config.get("max_simulation_time", float("inf"))

        logger.info(f"Starting scheduler (max time: {max_simulation_time}s)")

        try:
            self.env.run(until=max_simulation_time)
            logger.info(f"Scheduler completed successfully at time {self.env.now}")
        except Exception as e:
            logger.error(f"Error during run at time {self.env.now}: {e}")
            raise
        finally:
            logger.info(f"Scheduler ended at time {self.env.now}")

    def now(self) -> float:
        """Current time in seconds."""
        return self.env.now

    def now_millis(self) -> float:
        """Current time in milliseconds, usable as the aggregator clock."""
        return self.env.now * 1000

    def get_simpy_env(self) -> simpy.Environment:
        return self.env
