"""
Entry point for python -m gitversion

Allows running the package as a module:
    python -m gitversion
"""

from .cli import main

if __name__ == '__main__':
    main()
