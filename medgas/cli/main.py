"""
medgas CLI - Main Entry Point

Typer CLI that assembles the module sub-commands.

Usage:
    medgas version
    medgas gas rooms
    medgas gas calc --selection selection.yaml
    medgas gas pipe --flow 100
    medgas gas manual --gas oxygen --value 42000 --unit per_day
    medgas gas validate --selection selection.yaml
"""

import importlib

import typer

import medgas

app = typer.Typer(
    name="medgas",
    help="Medical gas demand and supply sizing for healthcare facilities.",
    no_args_is_help=True,
)


@app.command()
def version():
    """Show medgas version."""
    typer.echo(f"medgas {medgas.__version__}")


def _register_modules():
    """Register module CLI sub-apps."""
    module_registry = [
        ("medgas.gases.cli", "gas", "Demand, source and pipe sizing per gas"),
    ]

    for module_path, name, help_text in module_registry:
        mod = importlib.import_module(module_path)
        app.add_typer(mod.app, name=name, help=help_text)


_register_modules()


def main():
    """Entry point for the medgas CLI."""
    app()


if __name__ == "__main__":
    main()
