from .builtins import make_default_builtins
from .module_loader import ModuleLoader

__all__ = [
    "ModuleLoader",
    "make_default_builtins",
]
