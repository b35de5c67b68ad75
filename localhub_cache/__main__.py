"""Main entry point when executing localhub_cache as a package.

This allows running the package using python -m localhub_cache.
"""

from localhub_cache.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
