"""Main entry point for the RecipeBox CLI.

Usage:
    python -m recipebox --help
    recipebox --help  # If installed via pip/uv
"""

from recipebox.cli import main

if __name__ == "__main__":
    main()
