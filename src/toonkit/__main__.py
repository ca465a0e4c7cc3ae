"""Allow running toonkit as ``python -m toonkit``."""

from .cli import app

app(prog_name="toonkit")
