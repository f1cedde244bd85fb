"""colocmatch - Moteur de compatibilité entre colocataires."""

from colocmatch.config import (
    AttributeNotFound,
    ColocMatchError,
    ConfigFileError,
    ConfigurationError,
)
from colocmatch.io_excel import ProfileFileError
from colocmatch.matching.schema import InvalidProfile

__all__ = [
    "__version__",
    "AttributeNotFound",
    "ColocMatchError",
    "ConfigFileError",
    "ConfigurationError",
    "InvalidProfile",
    "ProfileFileError",
]

__version__ = "0.1.0"
