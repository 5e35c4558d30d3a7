"""Allow ``python -m gostarter``."""

from gostarter.cli import app


app(prog_name="gostarter")
