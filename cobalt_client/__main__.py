"""Package entry point for ``python -m cobalt_client``.

Delegates to the CLI's main() function.
"""

from cobalt_client.cli import main

if __name__ == "__main__":
    main()
