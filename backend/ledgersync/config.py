from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "IoT Ledger Sync"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Ledger endpoint (JSON-RPC).  The signing provider is reached through the
    # same endpoint; it must expose eth_requestAccounts / eth_sendTransaction.
    RPC_URL: str = "http://localhost:8545"
    RPC_TIMEOUT_SECONDS: float = 15.0
    RPC_SSL_VERIFY: bool = True

    # Contract
    CONTRACT_ADDRESS: str = "0x333bAec4BbC595049a6ec186Ddd6EE03fe349D44"

    # Required network (Sepolia by default)
    CHAIN_ID: int = 11155111
    CHAIN_NAME: str = "Sepolia Test Network"
    CHAIN_RPC_URLS: str = "https://sepolia.infura.io/v3/"            # comma-separated
    CHAIN_EXPLORER_URLS: str = "https://sepolia.etherscan.io/"       # comma-separated

    # Write confirmation
    RECEIPT_TIMEOUT_SECONDS: float = 120.0
    RECEIPT_POLL_INTERVAL_SECONDS: float = 2.0

    # Scans: max in-flight point lookups (1 = strictly sequential)
    SCAN_CONCURRENCY: int = 5

    # Try to connect on startup (like resuming a previously authorised wallet)
    AUTO_CONNECT: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True

    @staticmethod
    def split_urls(value: str) -> List[str]:
        return [u.strip() for u in value.split(",") if u.strip()]


DATA_TYPES = {
    0: "Temperature",
    1: "Humidity",
    2: "Pressure",
    3: "Motion",
    4: "Light",
    5: "Sound",
}


settings = Settings()
