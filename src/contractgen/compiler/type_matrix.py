"""Type resolution for generated calls.

One table, keyed by ``(CallMode, ReturnData)``, says for every combination
what type a call hands back and how the transport payload is turned into it.
Single-result calls receive a ``Response`` object; streaming calls receive
each event as a string. The rows for the two modes agree everywhere except
``raw``, which is the whole ``Response`` for a single-result call but the
undecoded event string for a streaming one.

:func:`resolve_types` combines the table with the list flags of a contract
into :class:`~contractgen.models.ResolvedTypes`, the only input the
renderers use for type names and return statements.
"""

from __future__ import annotations

from typing import Optional

from contractgen.models import (
    CallMode,
    EndpointContract,
    HttpMethod,
    ResolvedTypes,
    ReturnData,
    ReturnDescriptor,
)
from contractgen.naming import pascal_case, snake_case

_SINGLE = CallMode.SINGLE
_STREAMING = CallMode.STREAMING

TYPE_TABLE: dict[tuple[CallMode, ReturnData], ReturnDescriptor] = {
    (_SINGLE, ReturnData.HEADER): ReturnDescriptor(
        type_name="dict[str, str]", render_expression="dict({value}.headers)"
    ),
    (_SINGLE, ReturnData.BODY_BYTES): ReturnDescriptor(
        type_name="bytes", render_expression="{value}.content"
    ),
    (_SINGLE, ReturnData.BODY_STRING): ReturnDescriptor(
        type_name="str", render_expression="{value}.text"
    ),
    (_SINGLE, ReturnData.STATUS_CODE): ReturnDescriptor(
        type_name="int", render_expression="{value}.status_code"
    ),
    (_SINGLE, ReturnData.RAW): ReturnDescriptor(type_name="Response"),
    (_SINGLE, ReturnData.MODEL): ReturnDescriptor(
        type_name="{model}",
        list_sensitive=True,
        render_expression="{model}.from_json({value}.text)",
        payload_expression="{value}.text",
    ),
    (_STREAMING, ReturnData.HEADER): ReturnDescriptor(
        type_name="dict[str, str]", render_expression="dict(json.loads({value}))"
    ),
    (_STREAMING, ReturnData.BODY_BYTES): ReturnDescriptor(
        type_name="bytes", render_expression="{value}.encode()"
    ),
    (_STREAMING, ReturnData.BODY_STRING): ReturnDescriptor(type_name="str"),
    (_STREAMING, ReturnData.STATUS_CODE): ReturnDescriptor(
        type_name="int", render_expression="int({value})"
    ),
    (_STREAMING, ReturnData.RAW): ReturnDescriptor(type_name="str"),
    (_STREAMING, ReturnData.MODEL): ReturnDescriptor(
        type_name="{model}",
        list_sensitive=True,
        render_expression="{model}.from_json({value})",
    ),
}

# Decodes a payload that may hold one object or a list of them.
_LIST_DECODE = (
    "[{model}.from_map(e) for e in payload] "
    "if isinstance(payload, list) else [{model}.from_map(payload)]"
)


def describe(call_mode: CallMode, return_data: ReturnData) -> ReturnDescriptor:
    return TYPE_TABLE[(call_mode, return_data)]


def resolve_type_name(
    call_mode: CallMode,
    return_data: ReturnData,
    response_list: bool,
    model: str,
) -> str:
    """Type a call of *call_mode* hands back (per event for streaming calls)."""
    descriptor = describe(call_mode, return_data)
    name = descriptor.type_name.format(model=model)
    if descriptor.list_sensitive and response_list:
        return f"list[{name}]"
    return name


def render_return_statement(
    call_mode: CallMode,
    return_data: ReturnData,
    response_list: bool,
    model: str,
) -> str:
    """Statement(s) turning the transport payload into the call result.

    Single-result calls ``return`` from a variable named ``response``;
    streaming calls iterate ``responses`` and ``yield`` each event.
    """
    descriptor = describe(call_mode, return_data)
    value = "response"
    keyword = "return" if call_mode is _SINGLE else "yield"

    if descriptor.list_sensitive and response_list:
        payload = descriptor.payload_expression.format(value=value)
        body = (
            f"payload = json.loads({payload})\n"
            f"{keyword} " + _LIST_DECODE.format(model=model)
        )
    else:
        body = f"{keyword} " + descriptor.render_expression.format(model=model, value=value)

    if call_mode is _SINGLE:
        return body
    indented = "\n".join(f"    {line}" for line in body.splitlines())
    return f"async for {value} in responses:\n{indented}"


def render_entity_expression(return_data: ReturnData, response_list: bool, api_name: str) -> str:
    """Expression projecting the data-layer value ``data`` onto the domain layer."""
    if not return_data.is_model:
        return "data"
    mapper = f"to_{snake_case(pascal_case(api_name))}_entity"
    if response_list:
        return f"[{mapper}(e) for e in data]"
    return f"{mapper}(data)"


def resolve(
    method: HttpMethod,
    return_data: ReturnData,
    response_list: bool,
    body_list: bool,
    api_name: str,
    model_name: Optional[str] = None,
) -> ResolvedTypes:
    """Resolve every type name and statement for one call.

    Args:
        method: The call method; selects the call mode.
        return_data: What the call hands back.
        response_list: Whether a model response is a list.
        body_list: Whether the request body is a list.
        api_name: Endpoint name, used for mapper function names.
        model_name: Class name stem shared by the body, response and entity
            models. Defaults to the PascalCase *api_name*.
    """
    stem = model_name or pascal_case(api_name)
    call_mode = method.call_mode
    response_type = resolve_type_name(call_mode, return_data, response_list, f"{stem}Response")

    if return_data.is_model:
        entity_type = f"list[{stem}Entity]" if response_list else f"{stem}Entity"
    else:
        entity_type = response_type

    body_type = f"list[{stem}Body]" if body_list else f"{stem}Body"
    if call_mode is _STREAMING:
        return_type = f"AsyncIterator[{response_type}]"
    else:
        return_type = response_type

    return_statement = render_return_statement(
        call_mode, return_data, response_list, f"{stem}Response"
    )
    return ResolvedTypes(
        call_mode=call_mode,
        body_type=body_type,
        response_type=response_type,
        entity_type=entity_type,
        return_type=return_type,
        return_statement=return_statement,
        entity_expression=render_entity_expression(return_data, response_list, api_name),
        needs_json="json.loads" in return_statement,
    )


def resolve_types(contract: EndpointContract) -> ResolvedTypes:
    """Resolve the types of *contract*."""
    return resolve(
        contract.method,
        contract.return_data,
        contract.response_list,
        contract.body_list,
        contract.api_name,
    )
