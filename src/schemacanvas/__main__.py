"""Entry point for 'python -m schemacanvas' command."""

from schemacanvas.cli import main

if __name__ == "__main__":
    main()
