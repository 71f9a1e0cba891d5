from enum import StrEnum


# --- Centralized Remote Names ---
# Single source of truth for the remote procedure and model method names.
class RpcEndpoint(StrEnum):
    # Path suffixes appended to the base URL
    COMMON = "xmlrpc/2/common"
    OBJECT = "xmlrpc/2/object"


class RpcProcedure(StrEnum):
    # Procedures exposed by the endpoints
    AUTHENTICATE = "authenticate"
    EXECUTE_KW = "execute_kw"


class RpcMethod(StrEnum):
    # Model methods invoked through 'execute_kw'
    SEARCH = "search"
    SEARCH_READ = "search_read"
    CREATE = "create"
    WRITE = "write"
    UNLINK = "unlink"
