"""CLI commands for RecipeBox.

Provides command-line interface using Typer:
- recipebox serve: Run the API server
- recipebox seed: Load recipes from a JSON file
- recipebox flush-cache: Drop the cached recipe snapshot

Usage:
    recipebox --help
    recipebox serve --port 8080
    recipebox seed recipes.json
"""

import typer

from recipebox.cli.cache_cmd import app as cache_app
from recipebox.cli.seed_cmd import app as seed_app
from recipebox.cli.serve import app as serve_app

app = typer.Typer(
    name="recipebox",
    help="RecipeBox: recipe collection API with a Redis-cached listing",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(seed_app, name="seed")
app.add_typer(cache_app, name="flush-cache")


@app.callback()
def callback() -> None:
    """RecipeBox: recipe collection API with a Redis-cached listing."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
