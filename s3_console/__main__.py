"""Module entry point for the S3 console."""
import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
