"""
Helper Utilities.

Provides utility functions for URL building, domain construction and
value rendering.
"""

from typing import Any, Iterable, List


def pack_endpoint_url(base_url: str, path: str) -> str:
    """
    Constructs the full URL of a remote endpoint.

    Args:
        base_url (str): The server base URL (e.g. "https://erp.example.com/").
        path (str): The endpoint path (e.g. "/xmlrpc/2/common").

    Returns:
        str: A combined URL string (e.g. "https://erp.example.com/xmlrpc/2/common").
    """
    return base_url.rstrip("/") + "/" + path.lstrip("/")


def id_domain(ids: Iterable[int]) -> List[Any]:
    """
    Builds the domain filter matching exactly the given record ids.

    Example:
        id_domain([1, 2]) -> [["id", "in", [1, 2]]]
    """
    return [["id", "in", list(ids)]]


def truncate_long_strings(data, max_length=100):
    """
    Recursively traverse nested structures (dict, list, tuple)
    and truncate any string values longer than `max_length`.
    """

    # --- Handle strings ---
    if isinstance(data, str):
        return data if len(data) <= max_length else data[:max_length] + "..."

    # --- Handle dictionaries ---
    if isinstance(data, dict):
        return {
            key: truncate_long_strings(value, max_length) for key, value in data.items()
        }

    # --- Handle lists and tuples ---
    if isinstance(data, (list, tuple)):
        return type(data)(
            truncate_long_strings(data=item, max_length=max_length) for item in data
        )

    # --- Base case: return the value unchanged ---
    return data
