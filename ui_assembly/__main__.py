"""Package entry point for ``python -m ui_assembly``.

WHY: Lets users run ``python -m ui_assembly map intent.json`` without an
installed console script.

HOW: Delegates to the CLI's main() function.
"""

from ui_assembly.cli import main

if __name__ == "__main__":
    main()
