"""Project root discovery for portable relative paths.

This example shows how to use find_project_root() and load_config() to
resolve the build and cache directories relative to the project root,
regardless of where the script is run from.

The function searches upward for marker files in this order:
1. .klangreise - Explicit project marker
2. klangreise.toml - Site configuration
3. pyproject.toml - Python project root
4. .git - Version control root
"""

from klangreise import CacheController, find_project_root, load_config


# Discover project root (works from any subdirectory)
project_root = find_project_root()
print(f"Project root: {project_root}")

# klangreise.toml is optional; missing keys use the defaults
config = load_config(project_root)
print(f"Cache version: {config.cache_version}")
print(f"Build directory: {config.dist_dir}")
print(f"Cache directory: {config.cache_dir}")

# Wire a controller serving dist/ into the file cache
controller = CacheController.from_config(config)
controller.install().result()
controller.activate().result()
