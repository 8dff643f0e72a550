"""
medgas - Medical gas demand and supply sizing

Pipework and backup supply sizing for healthcare facilities.

Modules:
    core   - Shared services (config, logging, output)
    gases  - Room registry, demand aggregation, source sizing, pipe selection,
             validation and export
    cli    - Typer command line entry point
"""

__version__ = "0.1.0"
