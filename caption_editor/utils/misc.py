import importlib.util
import itertools
import sys
from pathlib import Path


def incrf(start: int = 1):
    """Endless counter used to hand out object identifiers."""
    return itertools.count(start)


def load_module(path: Path, module_name: str):
    spec = importlib.util.spec_from_file_location(
        module_name, str(path), submodule_search_locations=[str(Path(path).parent)]
    )
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module
