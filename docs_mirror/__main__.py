# docs_mirror/__main__.py
from docs_mirror.cli import cli

if __name__ == "__main__":
    cli(prog_name="docs-mirror")
