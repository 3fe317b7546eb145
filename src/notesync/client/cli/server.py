"""Server command for notesync CLI.

Commands:
- serve: Run the in-memory reference notes server
"""

from __future__ import annotations

import logging

import click


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", "-p", type=int, default=8000, show_default=True, help="Port to listen on.")
@click.option(
    "--latency",
    type=float,
    default=0.0,
    show_default=True,
    help="Seconds added to every note request (simulated slow network).",
)
def serve(host: str, port: int, latency: float) -> None:
    """Run the reference notes server.

    Notes are kept in memory and lost when the server stops.

    Examples:

        # Serve on localhost:8000
        notesync serve

        # Mimic a slow network
        notesync serve --latency 0.5
    """
    import uvicorn

    from notesync.core.log_config import setup_logging
    from notesync.server.app import LOG_PATH, create_app

    root_logger = setup_logging(logging.INFO, log_path=LOG_PATH)

    # Also capture uvicorn logs to file
    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            for uvicorn_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
                logging.getLogger(uvicorn_name).addHandler(handler)

    click.echo(f"Serving notes on http://{host}:{port}")
    uvicorn.run(create_app(latency=latency), host=host, port=port)
