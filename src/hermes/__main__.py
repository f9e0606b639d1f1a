"""Run Hermes with ``python -m hermes``."""

from hermes.main import main

if __name__ == "__main__":
    main()
