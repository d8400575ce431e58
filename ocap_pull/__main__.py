"""
Entry point for python -m ocap_pull.
"""
from ocap_pull.cli.pull import main


if __name__ == '__main__':
    main()
