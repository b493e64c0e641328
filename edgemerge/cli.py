import asyncio
import json
import sys

import click

from edgemerge.config import Settings, get_settings
from edgemerge.models.errors import AggregatorError


@click.group()
def cli():
    """edgemerge - merge the routing configuration of several Traefik instances."""
    pass


@cli.command("serve")
@click.option("--config", "config_path", default=None, help="Path to the endpoints configuration file.")
@click.option("--host", default=None, help="Host address to serve on.")
@click.option("--port", default=None, help="Port to serve on.", type=int)
@click.option("--output", "output_path", default=None, help="Also write the merged configuration to this YAML file.")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging (DEBUG level).",
)
def serve(
    config_path: str | None = None,
    host: str | None = None,
    port: int | None = None,
    output_path: str | None = None,
    verbose: bool = False,
):
    """Poll the endpoints and serve the merged configuration over HTTP."""
    import uvicorn

    from edgemerge.main import configure_logging, create_app

    overrides: dict[str, str] = {}
    if config_path:
        overrides["config_path"] = config_path
    if output_path:
        overrides["output_path"] = output_path
    if verbose:
        overrides["log_level"] = "DEBUG"
    settings = Settings(**overrides)

    configure_logging(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@cli.command("poll")
@click.option("--config", "config_path", default=None, help="Path to the endpoints configuration file.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    show_default=True,
    help="Output format of the merged configuration.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging (DEBUG level).")
def poll(config_path: str | None, output_format: str, verbose: bool):
    """Run the connectivity check and one poll cycle, then print the result."""
    from edgemerge.aggregator import Aggregator, ConfigStore, render_yaml
    from edgemerge.config_runtime import load_aggregator_config
    from edgemerge.main import configure_logging
    from edgemerge.upstream import prepare_clients

    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level)

    async def _run():
        cfg = load_aggregator_config(config_path or settings.config_path)
        clients = await prepare_clients(cfg)
        store = ConfigStore()
        aggregator = Aggregator(clients, cfg, [store])
        try:
            merged = await aggregator.run_cycle()
        finally:
            await aggregator.aclose()
        return merged, store.get_results()

    try:
        merged, results = asyncio.run(_run())
    except AggregatorError as exc:
        click.echo(f"error: {exc}", err=True)
        sys.exit(1)

    for result in results:
        if not result.ok:
            click.echo(f"{result.endpoint}: {result.outcome.value}: {result.error}", err=True)

    if output_format == "json":
        click.echo(json.dumps(merged.to_dict(), indent=2, sort_keys=True))
    else:
        click.echo(render_yaml(merged), nl=False)

    if results and not any(result.ok for result in results):
        sys.exit(1)


@cli.command("check-config")
@click.option("--config", "config_path", default=None, help="Path to the endpoints configuration file.")
def check_config(config_path: str | None):
    """Validate the endpoints configuration file."""
    from edgemerge.config_runtime import load_aggregator_config

    path = config_path or get_settings().config_path
    try:
        cfg = load_aggregator_config(path)
    except AggregatorError as exc:
        click.echo(f"invalid configuration: {exc}", err=True)
        sys.exit(1)

    click.echo(f"{path}: ok ({len(cfg.endpoints)} endpoints)")
    for index, endpoint in enumerate(cfg.endpoints):
        scheme = "https" if endpoint.tls is not None else "http"
        click.echo(f"  #{index} {endpoint.host} api={endpoint.api} web={endpoint.web} scheme={scheme}")


if __name__ == "__main__":
    cli()
