import logging

from .demo import run


def main() -> None:
    logging.basicConfig(level=logging.WARNING, format='%(message)s')
    run()


if __name__ == "__main__":
    main()
