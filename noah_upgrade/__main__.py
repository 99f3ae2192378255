import sys

from noah_upgrade.cli import main

if __name__ == "__main__":
    sys.exit(main())
