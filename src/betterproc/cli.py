# cli.py
from __future__ import annotations

import sys

import click

from betterproc import settings
from betterproc.errors import BetterProcError
from betterproc.procfile import ProcessList
from betterproc.process import CommandRunner
from betterproc.ui.console import Console, set_console, get_console


def parse_env_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    """
    Turn ("KEY=VALUE", ...) into a dict.

    Raises:
        click.BadParameter: if a pair has no "="
    """
    env: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--env")
        env[key] = value
    return env


def load_procfile(path: str) -> ProcessList:
    """
    Load the Procfile or exit with a structured error.

    Raises:
        SystemExit: If the Procfile cannot be read or decoded
    """
    console = get_console()
    try:
        return ProcessList.load(path)
    except (OSError, UnicodeDecodeError) as e:
        console.print_error(
            "Procfile not readable",
            f"Could not read Procfile: {path}",
            details=[str(e)],
            suggestion="Create a Procfile or specify a different path:\n  betterproc --procfile path/to/Procfile check",
        )
        sys.exit(1)


def lookup_or_exit(plist: ProcessList, name: str):
    console = get_console()
    entry = plist.lookup(name)
    if entry is None:
        console.print_error(
            "Unknown entry",
            f"No entry named {name!r} in {plist.source_path}",
            details=["Available:"] + [f"  {n}" for n in plist.names()],
        )
        sys.exit(1)
    return entry


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option(
    "--procfile",
    default=settings.PROCFILE,
    show_default=True,
    help="Procfile path",
)
@click.pass_context
def cli(ctx, debug, procfile):
    """betterproc: run named commands from a Procfile."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["procfile"] = procfile


@cli.command()
@click.pass_context
def check(ctx):
    """Validate the Procfile and list its entries."""
    console = get_console()
    plist = load_procfile(ctx.obj["procfile"])
    console.print_procfile_loaded(str(plist.source_path), len(plist))
    console.print_entries(plist)


@cli.command(name="list")
@click.pass_context
def list_entries(ctx):
    """Print the Procfile in canonical form."""
    console = get_console()
    plist = load_procfile(ctx.obj["procfile"])
    if len(plist):
        console.print_info(plist.to_text())


@cli.command()
@click.argument("name")
@click.option("--expand", "do_expand", is_flag=True, default=False, help="Show the expanded command")
@click.option("-e", "--env", "env_pairs", multiple=True, help="KEY=VALUE environment overlay (repeatable)")
@click.pass_context
def show(ctx, name, do_expand, env_pairs):
    """Show one entry."""
    console = get_console()
    plist = load_procfile(ctx.obj["procfile"])
    entry = lookup_or_exit(plist, name)
    if do_expand:
        runner = CommandRunner.from_definition(entry, env=parse_env_pairs(env_pairs))
        console.print_info(runner.expand_template())
    else:
        console.print_entry(entry)


@cli.command()
@click.argument("name")
@click.option("-e", "--env", "env_pairs", multiple=True, help="KEY=VALUE environment overlay (repeatable)")
@click.option("--cwd", default=None, help="Working directory (defaults to the cwd key, then .)")
@click.option("--exec/--no-exec", "replace", default=False, help="Merge the overlay into the environment first")
@click.option("--timeout", default=None, type=float, help="Seconds before the command is abandoned")
@click.option("--check/--no-check", "check_status", default=False, help="Fail on non-zero exit status")
@click.pass_context
def run(ctx, name, env_pairs, cwd, replace, timeout, check_status):
    """Run one entry and print its output."""
    console = get_console()
    plist = load_procfile(ctx.obj["procfile"])
    entry = lookup_or_exit(plist, name)
    runner = CommandRunner.from_definition(entry, env=parse_env_pairs(env_pairs), working_directory=cwd)

    try:
        if replace:
            output = runner.exec(timeout=timeout, check=check_status)
        else:
            output = runner.run(timeout=timeout, check=check_status)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except BetterProcError as e:
        console.print_error(f"{name} failed", str(e).split("\n")[0], details=str(e).split("\n")[1:])
        if ctx.obj.get("debug", False):
            console.print_exception(e)
        sys.exit(1)

    console.print_output(output)


@cli.command()
@click.argument("name")
@click.pass_context
def rm(ctx, name):
    """Delete an entry and save the Procfile."""
    console = get_console()
    plist = load_procfile(ctx.obj["procfile"])
    if not plist.delete(name):
        console.print_error("Unknown entry", f"No entry named {name!r} in {plist.source_path}")
        sys.exit(1)
    try:
        path = plist.save()
    except OSError as e:
        console.print_error("Save failed", f"Could not write {plist.source_path}", details=[str(e)])
        sys.exit(1)
    console.print_info(f"Removed {name} from {path}")


if __name__ == "__main__":
    cli()
