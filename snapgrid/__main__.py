from snapgrid.main import cli

cli()
