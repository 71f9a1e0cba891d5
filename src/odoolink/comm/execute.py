"""
Remote Method Dispatcher.

This module provides `_execute`, the single choke point through which every
model operation reaches the server. It builds the positional payload expected
by the 'execute_kw' procedure and turns remote faults into SDK errors:

- fault code 3 -> `AccessDenied`
- any other code -> `RpcError(code, message)`

Transport failures are already `TransportError` instances when they get here
(see `_Endpoint.call`) and are propagated unchanged.
"""

import logging as log
from typing import Any, Dict, List, Optional
import xmlrpc.client

from ..enum import RpcProcedure
from ..errors import ACCESS_DENIED_FAULT_CODE, AccessDenied, OdooError, RpcError
from .connection import _Endpoint


def _fault_code(fault: xmlrpc.client.Fault) -> Any:
    """Normalizes fault codes sent as numeric strings."""
    code = fault.faultCode
    if isinstance(code, str) and code.strip().lstrip("-").isdigit():
        return int(code)
    return code


def _classify_fault(fault: xmlrpc.client.Fault) -> OdooError:
    """
    Maps a remote fault onto the SDK error taxonomy.

    Args:
        fault (xmlrpc.client.Fault): The fault raised by the proxy.

    Returns:
        OdooError: `AccessDenied` for code 3, `RpcError` otherwise.
    """
    code = _fault_code(fault)
    if code == ACCESS_DENIED_FAULT_CODE:
        return AccessDenied(str(fault.faultString) or "Access Denied")
    return RpcError(code=code, message=str(fault.faultString))


def _build_payload(
    database: str,
    uid: int,
    password: str,
    model: str,
    method: str,
    args: List[Any],
    kwargs: Optional[Dict[str, Any]] = None,
) -> List[Any]:
    """
    Builds [database, uid, password, model, method, args(, kwargs)].
    """
    payload: List[Any] = [database, uid, password, model, str(method), list(args)]
    if kwargs is not None:
        payload.append(kwargs)
    return payload


def _execute(
    endpoint: _Endpoint,
    database: str,
    uid: int,
    password: str,
    model: str,
    method: str,
    args: List[Any],
    kwargs: Optional[Dict[str, Any]] = None,
) -> Any:
    """
    Invokes `method` of `model` through the 'execute_kw' procedure.

    Args:
        endpoint (_Endpoint): The models ('object') endpoint.
        database (str): Database name.
        uid (int): The authenticated user id.
        password (str): The user secret.
        model (str): Remote model name (e.g. 'res.partner').
        method (str): Remote method name (e.g. 'search_read').
        args (List[Any]): Positional arguments of the remote method.
        kwargs (Optional[Dict[str, Any]]): Named arguments, appended only if given.

    Returns:
        Any: The raw, unmarshalled result.

    Raises:
        AccessDenied: On fault code 3.
        RpcError: On any other remote fault.
        TransportError: On connection or decoding failures.
    """
    payload = _build_payload(database, uid, password, model, method, args, kwargs)
    log.debug(f"Calling '{RpcProcedure.EXECUTE_KW}' -> {model}.{method}")

    try:
        return endpoint.call(RpcProcedure.EXECUTE_KW.value, *payload)
    except xmlrpc.client.Fault as fault:
        err = _classify_fault(fault)
        log.debug(f"'{model}.{method}' returned a fault: {err}")
        raise err from fault
