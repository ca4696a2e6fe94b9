"""Pure resolvers applied to a validated contract.

Each module is a pure function of the contract and produces intermediate
representation from :mod:`contractgen.models`; nothing here touches the file
system except :mod:`~contractgen.compiler.model_schema`, which reads JSON
samples.
"""

from contractgen.compiler.cache_binder import RenderMode, bind_cache_strategy
from contractgen.compiler.path_template import compile_path, extract_parameters
from contractgen.compiler.type_matrix import resolve_types

__all__ = [
    "RenderMode",
    "bind_cache_strategy",
    "compile_path",
    "extract_parameters",
    "resolve_types",
]
