"""Host-side drivers around the engine.

The engine never blocks and owns no transport. This module decides the
delivery cadence of streamed runs, encodes progress as Server-Sent Events
and mirrors every update to the live broadcaster.
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, Optional

import orjson

from backend.broadcast import LiveBroadcaster
from backend.models import PopulationData, StreamComplete, StreamUpdate
from ecosim.config.simulation import STREAM_BATCH_STEPS
from ecosim.config.server import DEFAULT_STREAM_UPDATE_INTERVAL_MS
from ecosim.results import SimulationResult
from ecosim.simulator import EcosystemSimulator

logger = logging.getLogger(__name__)


def sse_frame(payload: Dict[str, Any]) -> bytes:
    """Encode one Server-Sent-Events ``data`` frame."""
    return b"data: " + orjson.dumps(payload) + b"\n\n"


async def run_to_completion(simulator: EcosystemSimulator) -> SimulationResult:
    """Run a simulation off the event loop.

    A full run is CPU-bound for a noticeable fraction of a second; a worker
    thread keeps the server responsive. Runs share no state, so no locking
    is needed.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, simulator.run)


class SimulationStreamRunner:
    """Streams one simulation in fixed-size batches.

    Each tick advances the simulator by ``batch_steps`` micro-steps, emits an
    ``update`` event and sleeps ``update_interval_ms``. Once the simulator
    finishes, a single ``complete`` event carries the full result. Closing
    the generator (client disconnect) simply stops requesting batches.
    """

    def __init__(
        self,
        simulator: EcosystemSimulator,
        broadcaster: Optional[LiveBroadcaster] = None,
        update_interval_ms: int = DEFAULT_STREAM_UPDATE_INTERVAL_MS,
        batch_steps: int = STREAM_BATCH_STEPS,
    ):
        self.simulator = simulator
        self.broadcaster = broadcaster
        self.update_interval = update_interval_ms / 1000
        self.batch_steps = batch_steps
        self.step = 0

    def _build_update(self) -> Dict[str, Any]:
        state = self.simulator.advance(self.batch_steps)
        update = StreamUpdate(
            step=self.step,
            time=state.time,
            populations=PopulationData(prey=state.prey, predator=state.predator),
            resource_level=self.simulator.resource_level,
        )
        self.step += 1
        return update.model_dump(by_alias=True)

    async def events(self) -> AsyncIterator[bytes]:
        """Yield SSE frames until the simulation completes."""
        logger.debug("Stream started (interval=%.3fs)", self.update_interval)
        try:
            while not self.simulator.finished:
                update = self._build_update()
                yield sse_frame(update)

                if self.broadcaster is not None:
                    await self.broadcaster.broadcast("simulation_update", update)

                await asyncio.sleep(self.update_interval)

            complete = StreamComplete(results=self.simulator.result().to_dict())
            yield sse_frame(complete.model_dump())
            logger.debug("Stream completed after %d updates", self.step)
        finally:
            if not self.simulator.finished:
                logger.info("Stream closed by client after %d updates", self.step)
