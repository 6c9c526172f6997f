"""HTTP API for RecipeBox."""
