"""Node: chain storage, mempool, JSON-RPC server and block listener."""