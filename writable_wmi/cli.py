"""
CLI Entry Point

Typer-based command line interface for the writable WMI property finder.
"""

import warnings
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.panel import Panel

from writable_wmi.config import ConfigLoader, ToolConfig
from writable_wmi.core.logger import AuditLogger
from writable_wmi.core.schema import (
    CimType,
    ClassRetriever,
    NoMatchWarning,
    RetrievalError,
    SelectorError,
    WritablePropertyFilter,
    qualify_namespace,
)
from writable_wmi.wmi import WmiClient, WmiError


# Initialize Typer app
app = typer.Typer(
    name="wmi-writable",
    help="Find writable WMI class properties of a given data type",
    add_completion=False,
)

console = Console()


def load_config(config_path: Optional[str]) -> ToolConfig:
    """Load configuration file, or defaults when none is given."""
    if not config_path:
        return ToolConfig()

    loader = ConfigLoader()
    try:
        return loader.load(config_path)
    except FileNotFoundError:
        console.print(f"[red]Error:[/] Configuration file not found: {config_path}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/] {e}")
        raise typer.Exit(1)


def create_client(
    config: ToolConfig,
    host: Optional[str] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
) -> WmiClient:
    """Create a WMI client, command line options taking precedence."""
    return WmiClient(
        host=host or config.connection.host,
        username=user or config.connection.username,
        password=password or config.connection.password,
        authority=config.connection.authority,
    )


def create_logger(config: ToolConfig, verbose: bool) -> AuditLogger:
    return AuditLogger(
        console_output=config.logging.console_progress,
        verbose=verbose or config.logging.level == "DEBUG",
    )


def resolve_selector(
    config: ToolConfig,
    class_name: Optional[str],
    all_classes: bool,
) -> tuple[Optional[str], bool]:
    """Command line selectors replace the configured ones as a pair."""
    if class_name or all_classes:
        return class_name, all_classes
    return config.scan.class_name, config.scan.all_classes


# Shared options
def config_option():
    return typer.Option(None, "--config", help="Path to configuration file (YAML or JSON)")


def host_option():
    return typer.Option(None, "--host", "-H", help="Target host (default: local machine)")


def user_option():
    return typer.Option(None, "--user", "-u", help="DOMAIN\\user for remote hosts")


def password_option():
    return typer.Option(None, "--password", "-p", help="Password for remote hosts")


def class_option():
    return typer.Option(None, "--class", "-c", help="Class to inspect (e.g., Win32_Service)")


def all_option():
    return typer.Option(False, "--all", "-a", help="Inspect every class in the namespace")


def namespace_option():
    return typer.Option(None, "--namespace", "-n", help="Namespace below root (default: cimv2)")


@app.command()
def find(
    data_type: Optional[str] = typer.Option(None, "--type", "-t", help="CIM data type (see 'types')"),
    class_name: Optional[str] = class_option(),
    all_classes: bool = all_option(),
    namespace: Optional[str] = namespace_option(),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Export matches to .json or .csv"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    config_path: Optional[str] = config_option(),
    host: Optional[str] = host_option(),
    user: Optional[str] = user_option(),
    password: Optional[str] = password_option(),
):
    """
    Find writable properties of a data type.

    Example:
        wmi-writable find --type String --class Win32_OSRecoveryConfiguration
        wmi-writable find --type UInt32 --all --namespace SecurityCenter2
    """
    config = load_config(config_path)

    data_type = data_type or config.scan.data_type
    if not data_type:
        console.print("[red]Error:[/] Specify a data type with --type (see 'types')")
        raise typer.Exit(1)

    try:
        wanted = CimType.parse(data_type)
    except ValueError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)

    class_name, all_classes = resolve_selector(config, class_name, all_classes)
    namespace = namespace or config.scan.namespace

    logger = create_logger(config, verbose)
    client = create_client(config, host, user, password)
    retriever = ClassRetriever(client, logger=logger)
    flt = WritablePropertyFilter(logger=logger)

    logger.start_scan(config.name, namespace=qualify_namespace(namespace))

    try:
        classes = retriever.retrieve(
            class_name=class_name,
            all_classes=all_classes,
            namespace=namespace,
        )
        with warnings.catch_warnings():
            # Reported through the logger instead
            warnings.simplefilter("ignore", NoMatchWarning)
            records = flt.find(wanted, classes)
    except SelectorError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)
    except RetrievalError as e:
        console.print(f"[red]Retrieval failed:[/] {e}")
        raise typer.Exit(1)
    except WmiError as e:
        console.print(f"[red]Connection error:[/] {e}")
        raise typer.Exit(1)

    logger.log_classes(len(classes))
    logger.log_records(records)
    summary = logger.end_scan()

    if records:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Class", style="cyan")
        table.add_column("Property")
        table.add_column("Type")

        for record in records:
            table.add_row(record.class_name, record.property_name, record.property_type.label)

        console.print(table)
    else:
        console.print(f"[yellow]No writable {wanted.label} properties found[/]")

    console.print(Panel(escape(summary.to_text()), title=f"Writable {wanted.label} Summary"))

    output = output or config.logging.output
    if output:
        path = logger.export(output)
        console.print(f"Results exported to: {path}")


@app.command()
def classes(
    class_name: Optional[str] = class_option(),
    all_classes: bool = all_option(),
    namespace: Optional[str] = namespace_option(),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    config_path: Optional[str] = config_option(),
    host: Optional[str] = host_option(),
    user: Optional[str] = user_option(),
    password: Optional[str] = password_option(),
):
    """
    List class definitions with their property counts.
    """
    config = load_config(config_path)
    class_name, all_classes = resolve_selector(config, class_name, all_classes)
    namespace = namespace or config.scan.namespace

    logger = create_logger(config, verbose)
    retriever = ClassRetriever(create_client(config, host, user, password), logger=logger)

    try:
        found = retriever.retrieve(
            class_name=class_name,
            all_classes=all_classes,
            namespace=namespace,
        )

        table = Table(show_header=True, header_style="bold")
        table.add_column("Class", style="cyan")
        table.add_column("Properties", justify="right")
        table.add_column("Writable", justify="right")

        for cls in found:
            try:
                props = list(cls.properties)
            except WmiError as e:
                raise RetrievalError(str(e), class_name=cls.name) from e
            writable = sum(1 for p in props if WritablePropertyFilter.is_writable(p))
            table.add_row(cls.name, str(len(props)), str(writable))
    except SelectorError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(1)
    except RetrievalError as e:
        console.print(f"[red]Retrieval failed:[/] {e}")
        raise typer.Exit(1)
    except WmiError as e:
        console.print(f"[red]Connection error:[/] {e}")
        raise typer.Exit(1)

    console.print(f"\n[bold]Classes in {qualify_namespace(namespace)} ({len(found)}):[/]")
    console.print(table)


@app.command()
def types():
    """List the data types accepted by --type."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Type", style="cyan")
    table.add_column("CIM code", justify="right")

    for cim_type in CimType.filterable():
        table.add_row(cim_type.label, str(cim_type.code))

    console.print(table)


@app.command("test-connection")
def test_connection(
    namespace: Optional[str] = namespace_option(),
    config_path: Optional[str] = config_option(),
    host: Optional[str] = host_option(),
    user: Optional[str] = user_option(),
    password: Optional[str] = password_option(),
):
    """
    Test the connection to a WMI provider.
    """
    config = load_config(config_path)
    client = create_client(config, host, user, password)
    qualified = qualify_namespace(namespace or config.scan.namespace)

    console.print(f"\n[bold]Testing connection to WMI[/]")
    console.print(f"  Host: {client.host}")
    console.print(f"  Namespace: {qualified}")
    if not client.is_local:
        console.print(f"  Username: {client.username or '(current user)'}")

    try:
        info = client.version()
        console.print(f"\n  [green]✓ Provider reachable[/]")
        console.print(f"  Operating system: {info.get('caption', 'Unknown')} {info.get('version', '')}")

        client.connect(qualified)
        console.print(f"  [green]✓ Namespace accessible[/]")
    except WmiError as e:
        console.print(f"\n[red]Connection failed:[/] {e}")
        raise typer.Exit(1)

    console.print(f"\n[green]Connection test successful![/]")


@app.command("init-config")
def init_config(
    output: str = typer.Argument("config.yaml", help="Output configuration file path"),
):
    """
    Create an example configuration file.
    """
    path = ConfigLoader.create_example_config(output)
    console.print(f"[green]Example configuration created:[/] {path}")
    console.print("\nSet these environment variables (or put them in .env):")
    console.print("  - WMI_USER")
    console.print("  - WMI_PASSWORD")
    console.print("  - WMI_HOST (optional, defaults to the local machine)")


@app.command()
def version():
    """Show version information."""
    from writable_wmi import __version__
    console.print(f"Writable WMI v{__version__}")


if __name__ == "__main__":
    app()
