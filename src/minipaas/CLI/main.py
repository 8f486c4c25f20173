"""
Command Line Interface for minipaas.
"""
import asyncio
import logging
import click
from typing import Iterable, Optional
from ..exceptions import MinipaasError
from ..MANAGERS.service_orchestrator import ServiceOrchestrator
from ..MODELS.service import Service, ServiceStatus
from ..PARSERS.config_parser import ConfigParser
from ..UTILS.duration import format_duration

STATUS_COLORS = {
    ServiceStatus.RUNNING: 'green',
    ServiceStatus.STOPPED: 'bright_black',
    ServiceStatus.ERROR: 'red',
}

def format_service(service: Service, now=None) -> str:
    """
    One status line: marker, repo tag, short id, title and running time.
    """
    marker = click.style("■", fg=STATUS_COLORS[service.status])
    line = f"{marker} {service.repo_tag} " + click.style(f"({service.short_id})", fg='bright_black')
    if service.title:
        line += f" {service.title}"
    elapsed = service.running_for(now)
    if elapsed is not None:
        line += click.style(f" running for {format_duration(elapsed)}", fg='cyan')
    return line

def print_services(services: Iterable[Service]):
    for service in services:
        click.echo(format_service(service))
        if service.status == ServiceStatus.ERROR and service.diagnostic:
            click.echo(f"    {service.diagnostic}")

def run_async(ctx: click.Context, operation):
    """
    Runs an orchestrator coroutine, reporting minipaas errors and exiting with 1.
    """
    orchestrator: ServiceOrchestrator = ctx.obj['orchestrator']

    async def runner():
        try:
            return await operation(orchestrator)
        finally:
            await orchestrator.engine.drain()

    try:
        return asyncio.run(runner())
    except MinipaasError as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        ctx.exit(1)

@click.group()
@click.option('--config', '-c', 'config_path', default=None, help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Log debug output')
@click.pass_context
def cli(ctx, config_path: Optional[str], verbose: bool):
    """
    minipaas - inventory of self-describing service containers.

    Lists images that carry minipaas metadata together with the state of
    their containers.
    """
    ctx.ensure_object(dict)
    try:
        config = ConfigParser().parse(config_path)
    except MinipaasError as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        ctx.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level.upper(),
        format="%(levelname)s: %(message)s",
    )
    ctx.obj['config'] = config
    if 'orchestrator' not in ctx.obj:
        ctx.obj['orchestrator'] = ServiceOrchestrator.from_config(config)

@cli.command()
@click.argument('repo_tags', nargs=-1)
@click.pass_context
def ls(ctx, repo_tags):
    """List services and their status."""
    services = run_async(ctx, lambda o: o.services(repo_tags))
    print_services(services)

@cli.command()
@click.argument('repo_tags', nargs=-1, required=True)
@click.pass_context
def pull(ctx, repo_tags):
    """Pull images and list their services."""
    services = run_async(ctx, lambda o: o.pull(repo_tags))
    print_services(services)

@cli.command()
@click.argument('repo_tags', nargs=-1, required=True)
@click.pass_context
def start(ctx, repo_tags):
    """Start services in the background."""
    services = run_async(ctx, lambda o: o.start(repo_tags))
    print_services(services)

@cli.command()
@click.argument('repo_tags', nargs=-1)
@click.pass_context
def stop(ctx, repo_tags):
    """Stop running services."""
    services = run_async(ctx, lambda o: o.stop(repo_tags))
    print_services(services)

@cli.command()
@click.argument('repo_tag')
@click.pass_context
def shell(ctx, repo_tag):
    """Open a login shell in a throwaway container."""
    status = run_async(ctx, lambda o: o.shell(repo_tag))
    ctx.exit(status or 0)

def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})

if __name__ == '__main__':
    main()
