"""Main entry point when executing pagedrain as a package.

This allows running the package using python -m pagedrain.
"""

from pagedrain.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
