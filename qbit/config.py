import os
from pathlib import Path
from typing import Optional

import dotenv

from .schemas import Credential


dotenv.load_dotenv()


# Defaults
VERBOSE = False
LOG_PATH = "qbit.log"
LOG_LEVEL = "INFO"
LOG_ROTATION = "1 week"
LOG_RETENTION = "1 month"

QBIT_BASEURL = "http://localhost:8080"
QBIT_USERNAME = ""
QBIT_PASSWORD = ""
QBIT_TIMEOUT = ""

SESSION_FILE = str(Path.home() / ".qbit_session")


def _parse_timeout(value: str) -> Optional[float]:
    value = value.strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"QBIT_TIMEOUT must be a number of seconds, got {value!r}")


class Config:
    VERBOSE = os.getenv("VERBOSE", str(VERBOSE)).lower() == "true"

    LOG_PATH = os.getenv("LOG_PATH", LOG_PATH)
    LOG_LEVEL = os.getenv("LOG_LEVEL", LOG_LEVEL)
    LOG_ROTATION = os.getenv("LOG_ROTATION", LOG_ROTATION)
    LOG_RETENTION = os.getenv("LOG_RETENTION", LOG_RETENTION)

    # qBittorrent Web UI
    QBIT_BASEURL = os.getenv("QBIT_BASEURL", QBIT_BASEURL)
    QBIT_USERNAME = os.getenv("QBIT_USERNAME", QBIT_USERNAME)
    QBIT_PASSWORD = os.getenv("QBIT_PASSWORD", QBIT_PASSWORD)
    # Empty means no client-side timeout
    QBIT_TIMEOUT = _parse_timeout(os.getenv("QBIT_TIMEOUT", QBIT_TIMEOUT))

    SESSION_FILE = os.getenv("SESSION_FILE", SESSION_FILE)

    @classmethod
    def credential(cls):
        """Build a Credential from the configured username/password, if any."""
        if not cls.QBIT_USERNAME:
            return None
        return Credential(username=cls.QBIT_USERNAME, password=cls.QBIT_PASSWORD)
