"""Command line interface for inspecting components and configuration."""

import sys
import click
from typing import Any, Dict, List, Optional
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core.component_manager import ComponentManager
from .core.config import ConfigManager, ConfigValidator, ScanOptions
from .core.exceptions import WebAuditorException
from .core.logger import LoggerManager
from .core.scanning.modules import ModuleManager
from .core.scanning.plugins import PluginManager
from .core.scanning.reports import ReportManager


console = Console()


class ComponentCLI:
    """Lists registered components and validates configuration."""

    NAME_KEYS = {'modules': 'mod_name', 'plugins': 'plug_name', 'reports': 'rep_name'}
    FILTER_KEYS = {'modules': 'lsmod', 'plugins': 'lsplug', 'reports': 'lsrep'}

    def __init__(self, config_manager: ConfigManager):
        """Initialize component CLI.

        Args:
            config_manager: Loaded configuration
        """
        self.config_manager = config_manager
        self.options = ScanOptions.from_config(config_manager.config)

    def _manager(self, kind: str) -> ComponentManager:
        # Listing only reads component metadata, no orchestrator needed
        if kind == 'modules':
            manager = ModuleManager(None)
        elif kind == 'plugins':
            manager = PluginManager(None)
        else:
            manager = ReportManager(self.options)
        manager.configure(self.options.components.get(kind))
        return manager

    def list_components(self, kind: str, filters: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """Component info for ``kind``, filtered by path regexes.

        Args:
            kind: One of ``modules``, ``plugins`` or ``reports``
            filters: Regexes overriding the configured listing filters

        Returns:
            Info dictionaries as produced by ComponentManager.listing
        """
        if not filters:
            filters = getattr(self.options, self.FILTER_KEYS[kind])
        return self._manager(kind).listing(filters, self.NAME_KEYS[kind])

    def show_components(self, kind: str, filters: Optional[List[str]] = None,
                        show_paths: bool = False) -> int:
        """Print a table of components; returns a process exit code."""
        try:
            components = self.list_components(kind, filters)
        except WebAuditorException as e:
            console.print(f"[red]Failed to list {kind}: {e}[/red]")
            return 1

        if not components:
            console.print(f"[yellow]No {kind} found[/yellow]")
            return 0

        table = Table(title=kind.capitalize())
        table.add_column("Name", style="cyan")
        table.add_column("Version", style="magenta")
        if kind == 'modules':
            table.add_column("Priority", justify="right")
        table.add_column("Author")
        table.add_column("Description")
        if show_paths:
            table.add_column("Path", style="dim", overflow="fold")

        for info in components:
            row = [info[self.NAME_KEYS[kind]], str(info.get('version', ''))]
            if kind == 'modules':
                row.append(str(info.get('priority', 0)))
            row.extend([
                ', '.join(info.get('author', [])),
                info.get('description', '')
            ])
            if show_paths:
                row.append(info['path'])
            table.add_row(*row)

        console.print(table)
        return 0

    def validate_config(self) -> int:
        """Print validation results; returns a process exit code."""
        errors = ConfigValidator(self.config_manager.config).validate()
        if not errors:
            console.print("[green]Configuration is valid[/green]")
            return 0

        error_text = "\n".join(f"- {error}" for error in errors)
        console.print(Panel(error_text, title=f"{len(errors)} configuration errors", style="red"))
        return 1


# Click CLI commands

@click.group()
@click.option('--config', '-c', 'config_path', type=click.Path(), help='Path to configuration file')
@click.pass_context
def cli(ctx, config_path):
    """WebAuditor component and configuration tools."""
    ctx.ensure_object(dict)
    try:
        config_manager = ConfigManager(config_path)
    except WebAuditorException as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(2)

    LoggerManager(config_manager.config)
    ctx.obj['cli'] = ComponentCLI(config_manager)

@cli.command()
@click.option('--filter', '-f', 'filters', multiple=True, help='Regex the module path must match')
@click.option('--paths', 'show_paths', is_flag=True, help='Show where each component is loaded from')
@click.pass_context
def modules(ctx, filters, show_paths):
    """List check modules."""
    ctx.exit(ctx.obj['cli'].show_components('modules', list(filters), show_paths))

@cli.command()
@click.option('--filter', '-f', 'filters', multiple=True, help='Regex the plugin path must match')
@click.option('--paths', 'show_paths', is_flag=True, help='Show where each component is loaded from')
@click.pass_context
def plugins(ctx, filters, show_paths):
    """List plugins."""
    ctx.exit(ctx.obj['cli'].show_components('plugins', list(filters), show_paths))

@cli.command()
@click.option('--filter', '-f', 'filters', multiple=True, help='Regex the report path must match')
@click.option('--paths', 'show_paths', is_flag=True, help='Show where each component is loaded from')
@click.pass_context
def reports(ctx, filters, show_paths):
    """List reports."""
    ctx.exit(ctx.obj['cli'].show_components('reports', list(filters), show_paths))

@cli.command('validate-config')
@click.pass_context
def validate_config(ctx):
    """Validate the loaded configuration."""
    ctx.exit(ctx.obj['cli'].validate_config())


if __name__ == '__main__':
    cli()
