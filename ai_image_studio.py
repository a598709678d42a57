import logging
import sys

from PyQt5.QtWidgets import QApplication

from AIS_Libs.config import ServiceConfig
from AIS_Libs.constants import LOG_FORMAT
from AIS_Libs.GenerationLib.generation_client import GenerationClient, ImageServiceHandle
from AIS_Libs.GenerationLib.generator_window import GeneratorWindow


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def main() -> None:
    config = ServiceConfig.from_env()
    configure_logging(config.log_level)

    service = ImageServiceHandle(config)
    client = GenerationClient(service)

    app = QApplication(sys.argv)
    window = GeneratorWindow(client)
    window.show()
    exit_code = app.exec_()
    service.close()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
