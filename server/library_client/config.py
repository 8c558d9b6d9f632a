import os
from dataclasses import dataclass


@dataclass
class ClientConfig:
    server_url: str = os.getenv("LIBRARY_API_URL", "http://localhost:5000")
    timeout: float = float(os.getenv("LIBRARY_API_TIMEOUT", "10"))


config = ClientConfig()
