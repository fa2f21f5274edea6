"""Command-line entry point: ``python -m cloudstore_mcp`` or ``cloudstore-mcp``.

Builds the backends, registry and dispatcher once and hands the dispatcher
to the transport selected by ``MCP_TRANSPORT``.
"""

import argparse
import asyncio
import logging

from . import __version__
from .config import Settings, get_settings
from .engine.handlers import HandlerContext
from .logging_config import configure_logging
from .mcp import McpDispatcher, build_default_registry, serve_stdio
from .models import TransportKind
from .store import create_backends

logger = logging.getLogger(__name__)


def build_dispatcher(settings: Settings) -> McpDispatcher:
    """Construct the dispatcher and the backends it owns."""
    store, ledger, analyzer = create_backends(settings)
    ctx = HandlerContext(store=store, ledger=ledger, analyzer=analyzer, settings=settings)
    return McpDispatcher(build_default_registry(), ctx)


async def run_stdio(dispatcher: McpDispatcher) -> None:
    try:
        await serve_stdio(dispatcher)
    finally:
        await dispatcher.ctx.store.aclose()
        await dispatcher.ctx.analyzer.aclose()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cloudstore-mcp",
        description="MCP server over a hierarchical content store",
    )
    parser.add_argument(
        "--transport",
        choices=[t.value for t in TransportKind],
        help="Override MCP_TRANSPORT",
    )
    parser.add_argument("--host", help="Override MCPSERVER_HOST (http only)")
    parser.add_argument("--port", type=int, help="Override MCPSERVER_PORT (http only)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Run the server with the configured transport."""
    args = parse_args(argv)
    overrides = {
        key: value
        for key, value in (("transport", args.transport), ("host", args.host), ("port", args.port))
        if value is not None
    }
    settings = get_settings().model_copy(update=overrides) if overrides else get_settings()

    configure_logging(settings.log_level)
    dispatcher = build_dispatcher(settings)
    logger.info(
        f"cloudstore-mcp v{__version__}: {len(dispatcher.registry)} tools, "
        f"transport={TransportKind(settings.transport).value}"
    )

    if TransportKind(settings.transport) == TransportKind.HTTP:
        from .server import run_http

        run_http(dispatcher, settings)
    else:
        asyncio.run(run_stdio(dispatcher))


if __name__ == "__main__":
    main()
