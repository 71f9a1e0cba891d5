from .comm import (
    ClientConfig as ClientConfig,
    OdooClient as OdooClient,
)

from .enum import (
    RpcEndpoint as RpcEndpoint,
    RpcMethod as RpcMethod,
)

from .errors import (
    AccessDenied as AccessDenied,
    ConfigError as ConfigError,
    MappingError as MappingError,
    NotAuthenticatedError as NotAuthenticatedError,
    ObjectNotFound as ObjectNotFound,
    OdooError as OdooError,
    RpcError as RpcError,
    TransportError as TransportError,
)

from .handlers import (
    BatchFetcher as BatchFetcher,
    FetchConfig as FetchConfig,
    FetchFailure as FetchFailure,
    ResultStream as ResultStream,
    partition_ids as partition_ids,
)

from .helpers import (
    id_domain as id_domain,
    image_to_base64 as image_to_base64,
)

from .models import (
    OdooBool as OdooBool,
    OdooFloat as OdooFloat,
    OdooInt as OdooInt,
    OdooRecord as OdooRecord,
    OdooStr as OdooStr,
    Move as Move,
    Partner as Partner,
    Product as Product,
    map_record as map_record,
    map_records as map_records,
)

# useful to do like: `from odoolink import OdooClient`
__all__ = [
    "AccessDenied",
    "BatchFetcher",
    "ClientConfig",
    "ConfigError",
    "FetchConfig",
    "FetchFailure",
    "MappingError",
    "Move",
    "NotAuthenticatedError",
    "ObjectNotFound",
    "OdooBool",
    "OdooClient",
    "OdooError",
    "OdooFloat",
    "OdooInt",
    "OdooRecord",
    "OdooStr",
    "Partner",
    "Product",
    "ResultStream",
    "RpcEndpoint",
    "RpcError",
    "RpcMethod",
    "TransportError",
    "id_domain",
    "image_to_base64",
    "map_record",
    "map_records",
    "partition_ids",
]
