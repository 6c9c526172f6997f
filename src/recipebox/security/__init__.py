"""Request authorization for RecipeBox."""

from recipebox.security.deps import is_authorized, require_api_key

__all__ = ["is_authorized", "require_api_key"]
