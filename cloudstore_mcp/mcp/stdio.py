"""Line-delimited JSON-RPC transport over stdin/stdout.

One JSON message per input line, one response per output line. Requests
are handled strictly in arrival order; each runs to completion before the
next line is read.
"""

import asyncio
import json
import logging
import sys
from typing import TextIO

from .dispatcher import McpDispatcher

logger = logging.getLogger(__name__)


async def serve_stdio(
    dispatcher: McpDispatcher,
    reader: TextIO | None = None,
    writer: TextIO | None = None,
) -> int:
    """Serve requests until the input stream closes.

    Args:
        dispatcher: Shared request dispatcher
        reader: Input stream (defaults to ``sys.stdin``)
        writer: Output stream (defaults to ``sys.stdout``)

    Returns:
        Number of lines processed
    """
    reader = reader or sys.stdin
    writer = writer or sys.stdout
    processed = 0

    logger.info("stdio transport ready")
    while True:
        line = await asyncio.to_thread(reader.readline)
        if not line:
            break
        line = line.strip()
        if not line:
            continue

        processed += 1
        response = await dispatcher.handle_text(line)
        if response is None:
            continue
        writer.write(json.dumps(response, default=str) + "\n")
        writer.flush()

    logger.info(f"stdio transport closed after {processed} message(s)")
    return processed
