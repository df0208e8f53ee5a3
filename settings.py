import os
from dotenv import load_dotenv

load_dotenv()

# INVENTORY_DB overrides the path; otherwise inventory.db sits beside the sources.
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

DB_NAME = os.getenv("INVENTORY_DB", os.path.join(BASE_DIR, "inventory.db"))
DB_TIMEOUT = float(os.getenv("INVENTORY_DB_TIMEOUT", "30"))
LOG_LEVEL = (os.getenv("INVENTORY_LOG_LEVEL") or "INFO").strip().upper()
CURRENCY = os.getenv("INVENTORY_CURRENCY", "$")
