"""Signal handling for clean aborts between stages.

The first SIGINT/SIGTERM only asks the runner to stop before the next stage;
the stage in flight is allowed to finish or fail on its own. A second
signal interrupts immediately.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

from __future__ import annotations

import signal
from contextlib import contextmanager
from typing import Iterator

from loguru import logger

from ralph.pipeline.context import RunContext


STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@contextmanager
def stop_between_stages(context: RunContext) -> Iterator[RunContext]:
    """Route stop signals to context.request_stop() while the block runs."""

    def signal_handler(signum: int, frame) -> None:
        if context.stop_requested:
            raise KeyboardInterrupt
        logger.warning(
            "Received signal {}; stopping after the current stage (send again to abort now)",
            signum,
        )
        context.request_stop()

    previous = {}
    for sig in STOP_SIGNALS:
        try:
            previous[sig] = signal.signal(sig, signal_handler)
        except ValueError:
            # Not the main thread; leave handlers alone
            pass

    try:
        yield context
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
