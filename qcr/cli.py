import typer
from typing import List, Optional
from rich.console import Console
from rich.markup import escape

from qcr.commands import (chk_command, list_config_command, list_provider_command, ready_check_command,
                          router_command, run_command, set_default_command, startup_flow_command,
                          startup_status_command, use_command)
from qcr.errors import create_error_result, invalid_arguments_error, unexpected_error
from qcr.util.types import CommandResult

app = typer.Typer(add_completion=False, help="qcr - switch Qwen Code between model providers")
list_app = typer.Typer(add_completion=False, help="List configurations and providers")
app.add_typer(list_app, name="list")

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)


def _render(result: CommandResult, plain: bool = False) -> None:
    """Print a command result and exit with its code."""
    if result.success:
        if plain:
            typer.echo(result.message)
        else:
            console.print(f"[green]{escape(result.message)}[/green]")
            if result.details:
                console.print(escape(result.details))
    else:
        err_console.print(f"[red][error][/red] {escape(result.message)}")
        if result.details:
            err_console.print(escape(result.details))
    if result.exit_code:
        raise typer.Exit(code=result.exit_code)


def _guarded(operation: str, fn, *args, **kwargs) -> CommandResult:
    try:
        return fn(*args, **kwargs)
    except KeyboardInterrupt:
        raise
    except Exception as e:
        return create_error_result(unexpected_error(operation, e))


@app.command()
def use(name: Optional[str] = typer.Argument(None, help="Configuration name (default configuration if omitted)"),
        verbose: bool = typer.Option(False, "--verbose", "-v"),
        export: bool = typer.Option(False, "--export", help="Print shell export lines only")):
    """Activate a configuration."""
    _render(_guarded("use", use_command, name, verbose=verbose, export=export), plain=export)


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def run(args: Optional[List[str]] = typer.Argument(None, help="Arguments passed through to qwen"),
        verbose: bool = typer.Option(False, "--verbose", "-v")):
    """Launch qwen with the active (or default) configuration."""
    _render(_guarded("run", run_command, args or [], verbose=verbose,
                     notify=lambda text: err_console.print(escape(text))))


@app.command("set-default")
def set_default(name: str = typer.Argument(..., help="Configuration name"),
                verbose: bool = typer.Option(False, "--verbose", "-v")):
    """Set and persist the default configuration."""
    _render(_guarded("set-default", set_default_command, name, verbose=verbose))


@list_app.command("config")
def list_config(verbose: bool = typer.Option(False, "--verbose", "-v")):
    """List configurations; the default is marked with *."""
    _render(_guarded("list config", list_config_command, verbose=verbose))


@list_app.command("provider")
def list_provider(name: Optional[str] = typer.Argument(None, help="Provider name"),
                  show_all: bool = typer.Option(False, "--all", "-f", help="Include models"),
                  builtin: bool = typer.Option(False, "--builtin", help="List built-in providers")):
    """List providers and their models."""
    _render(_guarded("list provider", list_provider_command, name, show_all=show_all, built_in=builtin))


@app.command()
def chk(name: Optional[str] = typer.Argument(None, help="Configuration name (all if omitted)"),
        verbose: bool = typer.Option(False, "--verbose", "-v")):
    """Validate configurations without contacting any provider."""
    _render(_guarded("chk", chk_command, name, verbose=verbose))


@app.command()
def router(provider: str = typer.Argument(..., help="Provider name"),
           model: str = typer.Argument(..., help="Model name"),
           verbose: bool = typer.Option(False, "--verbose", "-v"),
           export: bool = typer.Option(False, "--export", help="Print shell export lines only")):
    """Activate a provider/model pair, using built-in providers when not configured."""
    _render(_guarded("router", router_command, provider, model, verbose=verbose, export=export), plain=export)


@app.command()
def startup(execute: bool = typer.Option(False, "--execute", help="Activate the default configuration"),
            status: bool = typer.Option(False, "--status", help="Show current startup status"),
            ready: bool = typer.Option(False, "--ready", help="Only report whether qwen can be launched"),
            verbose: bool = typer.Option(False, "--verbose", "-v")):
    """Run the startup checks."""
    if sum((execute, status, ready)) > 1:
        _render(create_error_result(invalid_arguments_error(
            "startup", "--execute, --status and --ready are mutually exclusive",
            "qcr startup [--execute|--status|--ready] [-v]")))
    if status:
        _render(_guarded("startup", startup_status_command, verbose=verbose))
    elif ready:
        _render(_guarded("startup", ready_check_command))
    else:
        _render(_guarded("startup", startup_flow_command, execute=execute))


def main():
    app()


if __name__ == "__main__":
    main()
