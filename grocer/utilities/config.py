"""Configuration management for the Smart Grocer service."""
import os
from typing import Final, Optional
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, '').strip()
    return float(raw) if raw else None


# Remote data store
API_BASE_URL: Final[str] = os.getenv('GROCER_API_URL', 'https://smart-grocer-backend-1.onrender.com/api').rstrip('/')
# None means no explicit timeout on remote calls
API_TIMEOUT_SECONDS: Final[Optional[float]] = _optional_float('GROCER_API_TIMEOUT')

# Maps / geocoding
GOOGLE_MAPS_API_KEY: Final[str] = os.getenv('GOOGLE_MAPS_API_KEY', '')
GEOCODE_URL: Final[str] = os.getenv('GEOCODE_URL', 'https://maps.googleapis.com/maps/api/geocode/json')
GEOCODE_REGION: Final[str] = os.getenv('GEOCODE_REGION', 'in')

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()

# Business settings
DEFAULT_DELIVERY_RADIUS_KM: Final[float] = float(os.getenv('DEFAULT_DELIVERY_RADIUS_KM', '5'))
SHOP_REGISTRATION_FEE: Final[int] = int(os.getenv('SHOP_REGISTRATION_FEE', '500'))
NOTIFICATION_POLL_SECONDS: Final[float] = float(os.getenv('NOTIFICATION_POLL_SECONDS', '10'))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
STORAGE_DIR: Final[Path] = Path(os.getenv('GROCER_STORAGE_DIR', str(BASE_DIR / 'data')))
