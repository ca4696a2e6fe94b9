"""Inspect command -- show what a contract resolves to.

Validates the contract exactly like ``contractgen api`` does, then prints
the resolved types, the URI factory and the cache strategy fragment. The
project tree is only read, never written.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from contractgen.exceptions import ContractgenError
from contractgen.models import DEFAULT_BASE_URL_KEY, EndpointArguments
from contractgen.output import OutputFormat, get_output


def inspect_command(
    ctx: typer.Context,
    api_name: str = typer.Argument("", help="Endpoint name."),
    feature_name: str = typer.Option("", "--feature-name", "-f", help="Feature of the endpoint."),
    page_name: str = typer.Option("", "--page-name", "-p", help="Page of the endpoint."),
    apps_name: Optional[str] = typer.Option(None, "--apps-name", "-a", help="Apps namespace."),
    method: Optional[str] = typer.Option(None, "--method", "-m", help="HTTP method."),
    return_data: Optional[str] = typer.Option(None, "--return-data", "-r", help="Return data."),
    path: Optional[str] = typer.Option(None, "--path", help="Path template."),
    base_url: str = typer.Option(DEFAULT_BASE_URL_KEY, "--base-url", help="Base URL key."),
    body_list: bool = typer.Option(False, "--body-list", help="The request body is a list."),
    response_list: bool = typer.Option(False, "--response-list", help="The response is a list."),
    cache_strategy: Optional[str] = typer.Option(None, "--cache-strategy", help="Cache strategy."),
    ttl: Optional[str] = typer.Option(None, "--ttl", help="Cache time-to-live in minutes."),
    keep_expired_cache: Optional[str] = typer.Option(
        None, "--keep-expired-cache", help="Serve expired cache entries: true or false."
    ),
) -> None:
    """Print the resolved types, URI factory and cache fragment of a contract.

    Example::

        contractgen inspect orders -f shop -p orders -m getSse \\
            --path /users/:id/orders --response-list
        contractgen --json inspect login -f auth -p login
    """
    from contractgen.commands import fail, project_tree
    from contractgen.compiler.cache_binder import RenderMode, bind_contract
    from contractgen.compiler.path_template import compile_path, substitute
    from contractgen.compiler.type_matrix import resolve_types
    from contractgen.contract import validate_contract
    from contractgen.emitter.endpoints import render_endpoint

    args = EndpointArguments(
        api_name=api_name,
        feature_name=feature_name,
        page_name=page_name,
        apps_name=apps_name,
        method=method,
        return_data=return_data,
        path=path,
        base_url=base_url,
        body_list=body_list,
        response_list=response_list,
        cache_strategy=cache_strategy,
        ttl=ttl,
        keep_expired_cache=keep_expired_cache,
    )

    try:
        contract = validate_contract(args, project_tree(ctx))
    except ContractgenError as exc:
        raise fail(exc) from None

    types = resolve_types(contract)
    factory = compile_path(contract.endpoint_name, contract.path_url, contract.base_url_key)
    report: dict[str, Any] = {
        "endpoint": contract.endpoint_name,
        "method": contract.method.value,
        "client_method": contract.method.client_method,
        "call_mode": types.call_mode.value,
        "body_type": types.body_type,
        "response_type": types.response_type,
        "entity_type": types.entity_type,
        "return_type": types.return_type,
        "uri": substitute(factory),
        "uri_parameters": factory.parameter_names,
        "absolute": factory.is_absolute,
        "base_url_key": None if factory.is_absolute else factory.base_url_key,
        "cache_strategy": bind_contract(contract, RenderMode.PRODUCTION) or None,
        "cache_strategy_test": bind_contract(contract, RenderMode.TEST) or None,
    }

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.print_json(report)
        return

    rows = [
        [key, ", ".join(value) if isinstance(value, list) else ("-" if value is None else str(value))]
        for key, value in report.items()
    ]
    output.print_table(["Field", "Value"], rows, title=f"{contract.endpoint_name} ({contract.method.value})")
    output.print_code(render_endpoint(factory), title="URI factory")
    output.print_code(types.return_statement, title="Return statement")
