"""Rendering and idempotent writing of generated sources.

* :mod:`~contractgen.emitter.index` -- structured record of emitted
  declarations, keyed by base-URL key and by ``(endpoint, apps)``.
* :mod:`~contractgen.emitter.source_buffer` -- in-memory Python module with
  idempotent import, function and class member merging.
* :mod:`~contractgen.emitter.endpoints` -- the per-project endpoints
  aggregator.
* :mod:`~contractgen.emitter.layers` -- the per-endpoint data and domain
  layer artifacts.
"""

from contractgen.emitter.index import EmissionIndex
from contractgen.emitter.source_buffer import SourceBuffer

__all__ = ["EmissionIndex", "SourceBuffer"]
