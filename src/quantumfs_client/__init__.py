"""Client for the QuantumFS api file."""

from .client import QfsClient, get_api
from .config import ClientConfig
from .errors import CommandError, Error, ErrorCode
from .models.accessed import PathsAccessed

__version__ = "0.1.0"
