# Auto-register passes on package import (e.g., when importing any submodule)
from . import passes  # noqa: F401
from .core import fragmentize, run_fragmentize
from .fragment import CodeFragment, Settings

__all__: list[str] = ["CodeFragment", "Settings", "fragmentize", "run_fragmentize"]
