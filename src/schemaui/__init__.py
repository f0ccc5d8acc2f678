from .app import App, SchemaUI
from .config import UiOptions
from .errors import SchemaUIException

__version__ = "0.1.0"

__all__ = ["App", "SchemaUI", "SchemaUIException", "UiOptions", "__version__"]
