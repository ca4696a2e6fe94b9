"""Contract validation and batch contract file loading.

* :mod:`~contractgen.contract.validator` -- turns raw operator input into an
  immutable :class:`~contractgen.models.EndpointContract`.
* :mod:`~contractgen.contract.loader` -- discovers ``*contract.yaml`` files
  and converts their loosely typed YAML maps into validator input.
"""

from contractgen.contract.loader import ContractFile, discover_contract_files, load_contract_file
from contractgen.contract.validator import validate_contract

__all__ = [
    "ContractFile",
    "discover_contract_files",
    "load_contract_file",
    "validate_contract",
]
