from .cli import app

app(prog_name="substack-dl")
