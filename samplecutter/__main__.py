"""Allow ``python -m samplecutter``."""

from samplecutter.cli import main

if __name__ == "__main__":
    main()
