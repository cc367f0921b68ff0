from ibanctl.cli import cli

cli()
