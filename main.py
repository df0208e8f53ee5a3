import sys
from PyQt5.QtWidgets import QApplication
from controller import MainController
from database import DatabaseManager
from errors import StorageError
from log import get_logger
from settings import DB_NAME

logger = get_logger(__name__)


def main():
    app = QApplication(sys.argv)

    # Prepare DB (create schema if missing) before creating the GUI
    try:
        db = DatabaseManager(db_name=DB_NAME)
    except StorageError as e:
        logger.error("Cannot start without a database: %s", e)
        sys.exit(1)
    logger.info("Using database %s", DB_NAME)

    window = MainController(db)
    window.show()

    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
