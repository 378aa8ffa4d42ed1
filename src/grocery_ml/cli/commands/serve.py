"""HTTP API server command."""

import click


@click.command()
@click.option("--host", default=None, help="Bind address (default: [server] host)")
@click.option("--port", type=int, default=None, help="Port (default: [server] port)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the training and model management HTTP API."""
    import uvicorn

    from grocery_ml.core.config import get_config

    config = get_config()
    host = host or config.get("server", "host", "127.0.0.1")
    port = port or config.get("server", "port", 8000)

    click.echo(f"Serving on http://{host}:{port}")
    if reload:
        uvicorn.run("grocery_ml.server.api:app", host=host, port=port, reload=True)
    else:
        from grocery_ml.server.api import create_app

        uvicorn.run(create_app(), host=host, port=port)
