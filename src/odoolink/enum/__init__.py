from .rpc_method import (
    RpcEndpoint as RpcEndpoint,
    RpcMethod as RpcMethod,
    RpcProcedure as RpcProcedure,
)
