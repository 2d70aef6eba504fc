"""
Application Initialization
==========================
This module wires the controller, the main window and the Qt event loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Configures logging from the command line flags.
2. Instantiates the DrawingController (core state).
3. Passes the controller into the Main Window.
"""
import argparse
import logging
from typing import Optional, Sequence

from kaleidoscope.logging_config import setup_logging


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="kaleidoscope",
        description="Draw freehand 3D strokes mirrored into a kaleidoscope pattern.",
    )
    parser.add_argument("--debug", action="store_true", help="enable DEBUG logging")
    parser.add_argument("--log-file", default=None, help="also write the log to this file")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)

    # Qt is imported late so --help works without a display
    from kaleidoscope.app.application import create_app
    from kaleidoscope.controller.drawing import DrawingController
    from kaleidoscope.view.main_window import MainWindow

    # 2. Create the Qt Application
    app = create_app()

    # 3. Initialize the core and the Main Window
    controller = DrawingController()
    window = MainWindow(controller)
    window.show()

    # 4. Start Event Loop
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
