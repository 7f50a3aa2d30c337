"""
Bulk Renamer - Main Entry

Supports:
- GUI mode (default startup)
- CLI mode (--cli or -c parameter)

Usage:
    python -m bulk_renamer                       # GUI mode (default)
    python -m bulk_renamer -c replace ./dir ...  # CLI command mode
    python -m bulk_renamer -c case ./dir lower   # CLI command mode
    python -m bulk_renamer -c undo log.json      # CLI undo
"""

import sys


def main():
    """Main entry point"""
    # Check if CLI should be started; only a leading flag counts
    if sys.argv[1:2] in (["--cli"], ["-c"]):
        argv = sys.argv[2:]

        # CLI mode
        from .cli import main as cli_main
        return cli_main(argv)

    # Default to starting GUI
    try:
        from .gui import main as gui_main
    except ImportError as e:
        print("Error: Unable to start GUI, please ensure PySide6 is installed")
        print(f"Detailed error: {e}")
        print("\nInstall command: pip install PySide6")
        print("\nTo use CLI mode, run:")
        print("    python -m bulk_renamer --cli")
        print("or  python -m bulk_renamer -c")
        return 1
    return gui_main()


if __name__ == "__main__":
    sys.exit(main())
