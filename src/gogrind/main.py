"""Application entry point for GoGrind backend server."""

from gogrind.app import App
from gogrind.config import Config
from gogrind.logging import setup_logging
from gogrind.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
