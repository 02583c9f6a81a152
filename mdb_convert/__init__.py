"""
MDB_CONVERT - Converted MongoDB Collections

Typed interception layer for Motor and PyMongo collections: documents are
converted before they are written and after they are read, delete filters are
rewritten, and every other collection operation passes through untouched.
"""

from .config import ConverterConfig, get_config, reset_config, set_config
from .constants import INTERCEPTED_METHODS, PASSTHROUGH_METHODS
from .converter import (ConvertedCollection, Converter,
                        convert_modify_result, convert_raw_collection,
                        convert_read_write_collection)
from .cursor import ConvertedCursor
from .exceptions import ConverterConfigurationError, MongoConvertError
from .types import ModifyResult

__version__ = "0.1.0"

__all__ = [
    # Core
    "Converter",
    "ConvertedCollection",
    "ConvertedCursor",
    "convert_raw_collection",
    "convert_read_write_collection",
    "convert_modify_result",
    "ModifyResult",
    "INTERCEPTED_METHODS",
    "PASSTHROUGH_METHODS",
    # Configuration
    "ConverterConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Exceptions
    "MongoConvertError",
    "ConverterConfigurationError",
]
