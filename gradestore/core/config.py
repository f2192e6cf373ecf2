import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

_DATA_DIR = os.getenv("DATA_DIR", "./var")


@dataclass
class Config:
    sqlite_path: str = os.getenv("SQLITE_PATH", os.path.join(_DATA_DIR, "gradestore.db"))
    busy_timeout_ms: int = int(os.getenv("SQLITE_BUSY_TIMEOUT_MS", "5000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


cfg = Config()
