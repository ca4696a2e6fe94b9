"""contractgen -- Compile declarative API endpoint contracts into layered client code.

This package turns a structured endpoint description (HTTP method, path
template, response shape, caching policy) into a coordinated set of
generated Python modules spanning the data and domain layers of a target
application: request body model, response model, domain entity, remote
data source call, repository members, use case, and the project-wide
endpoints aggregator.

Typical workflow::

    contractgen api login -f auth -p login --method post --path /login
    contractgen batch                  # compile every *contract.yaml
    contractgen endpoints              # regenerate the endpoints aggregator

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: Project configuration, explicit project tree, atomic writes.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting system with Rich support.
    contract: Contract validation and batch configuration loading.
    compiler: Path templates, type resolution, cache binding, model schemas.
    emitter: Idempotent merging and writing of generated sources.
"""

__version__ = "0.3.0"
