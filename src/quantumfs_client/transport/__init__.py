"""Transport layer: api file discovery and the write-then-read exchange."""

from .api_file import ApiFile, ExchangeHook
from .resolver import ApiPathResolver, find_api_path
