from .dispatcher import Dispatcher, DispatchResult
from .reloader import Reloader, build_table

__all__ = ["Dispatcher", "DispatchResult", "Reloader", "build_table"]
