from .pipeline import cli

cli()
