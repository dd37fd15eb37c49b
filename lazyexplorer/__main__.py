"""``python -m lazyexplorer [PATH]``: print the tree, optionally open a file."""

from .cli import main

main()
