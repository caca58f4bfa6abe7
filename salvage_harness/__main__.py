from salvage_harness.main import cli

cli()
