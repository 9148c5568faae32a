from slamstack.cli import run

run()
