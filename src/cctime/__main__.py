"""Entry point for `python -m cctime`."""


def main():
    from cctime.cli import main as run
    run()


if __name__ == "__main__":
    main()
