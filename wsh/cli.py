#!/usr/bin/env python3
import sys
import argparse


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="wsh: interactive shell with autosuggestions, completion pager and abbreviations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  wsh                          # Start interactive shell
  wsh -c 'ls -la'              # Run one command line and exit
  wsh --version                # Show version information
  wsh --config-reload          # Recreate and reload configuration
        """
    )

    parser.add_argument(
        "--version", "-v",
        action="store_true",
        help="Show version information"
    )

    parser.add_argument(
        "--config-reload",
        action="store_true",
        help="Reload configuration and exit"
    )

    parser.add_argument(
        "-c",
        dest="command",
        metavar="COMMAND",
        help="Execute COMMAND and exit with its status"
    )

    args = parser.parse_args(argv)

    if args.version:
        from wsh import __version__
        print(f"wsh version {__version__}")
        return 0

    if args.config_reload:
        from wsh.config import Config
        if Config.reload():
            print("Configuration reloaded successfully")
            return 0
        print("Failed to reload configuration")
        return 1

    try:
        from wsh import app

        return app.main(args.command)
    except KeyboardInterrupt:
        print("\nBye!")
        return 130


if __name__ == "__main__":
    sys.exit(main())
