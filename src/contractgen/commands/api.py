"""Api command -- generate one endpoint from command-line flags.

Implements ``contractgen api``. The flags are collected verbatim into
:class:`~contractgen.models.EndpointArguments`; validation, rendering and
writing are left to :func:`~contractgen.orchestrator.run_contract`. The
endpoint's URI factory is merged into the existing endpoints aggregator.
"""

from __future__ import annotations

from typing import Optional

import typer

from contractgen.exceptions import ContractgenError
from contractgen.models import DEFAULT_BASE_URL_KEY, EndpointArguments
from contractgen.output import success, suggest


def api_command(
    ctx: typer.Context,
    api_name: str = typer.Argument("", help="Endpoint name, e.g. 'login'."),
    feature_name: str = typer.Option("", "--feature-name", "-f", help="Feature the endpoint belongs to."),
    page_name: str = typer.Option("", "--page-name", "-p", help="Page the endpoint belongs to."),
    apps_name: Optional[str] = typer.Option(None, "--apps-name", "-a", help="Apps namespace of the feature."),
    method: Optional[str] = typer.Option(None, "--method", "-m", help="HTTP method (default: post)."),
    return_data: Optional[str] = typer.Option(
        None, "--return-data", "-r", help="What the call returns (default: model)."
    ),
    path: Optional[str] = typer.Option(None, "--path", help="Path template, e.g. '/users/:id'."),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL_KEY, "--base-url", help="Environment variable holding the base URL."
    ),
    header: Optional[str] = typer.Option(None, "--header", help="JSON file of extra headers."),
    body_list: bool = typer.Option(False, "--body-list", help="The request body is a list."),
    response_list: bool = typer.Option(False, "--response-list", help="The response is a list."),
    cache_strategy: Optional[str] = typer.Option(None, "--cache-strategy", help="Cache strategy."),
    ttl: Optional[str] = typer.Option(None, "--ttl", help="Cache time-to-live in minutes."),
    keep_expired_cache: Optional[str] = typer.Option(
        None, "--keep-expired-cache", help="Serve expired cache entries: true or false."
    ),
    body: Optional[str] = typer.Option(None, "--body", help="JSON sample of the request body."),
    response: Optional[str] = typer.Option(None, "--response", help="JSON sample of the response."),
    json2dart: bool = typer.Option(
        False, "--json2dart", help="Infer the models from the JSON samples."
    ),
    unit_test: bool = typer.Option(False, "--unit-test", help="Also generate a data source unit test."),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="List the files without writing them."),
) -> None:
    """Generate every layer of one endpoint.

    Example::

        contractgen api login -f auth -p login --method post --path /login
        contractgen api profile -f auth -p login -m get --path /users/:id \\
            --cache-strategy just_cache --ttl 60 --keep-expired-cache true
    """
    from contractgen.commands import fail, project_tree
    from contractgen.orchestrator import print_plan, run_contract

    args = EndpointArguments(
        api_name=api_name,
        feature_name=feature_name,
        page_name=page_name,
        apps_name=apps_name,
        method=method,
        return_data=return_data,
        path=path,
        base_url=base_url,
        header=header,
        body_list=body_list,
        response_list=response_list,
        cache_strategy=cache_strategy,
        ttl=ttl,
        keep_expired_cache=keep_expired_cache,
        body=body,
        response=response,
        json2dart=json2dart,
        unit_test=unit_test,
    )

    try:
        tree = project_tree(ctx)
        artifacts = run_contract(args, tree, dry_run=dry_run)
    except ContractgenError as exc:
        raise fail(exc) from None

    if dry_run:
        print_plan(tree, artifacts)
        return
    success(f"Generated {len(artifacts)} files for {api_name}")
    suggest(f"Declare {api_name} in a *contract.yaml file so 'contractgen endpoints' keeps its factory")
