"""RecipeBox: recipe collection API with a cache-aside Redis snapshot."""

__version__ = "0.1.0"
