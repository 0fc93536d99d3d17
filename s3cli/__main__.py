from s3cli.cli import run

run()
