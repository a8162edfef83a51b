# Standard library
import sys

# Local imports
from .cli import main


# Run
if __name__ == "__main__":
    sys.exit(main())
