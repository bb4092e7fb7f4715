# hyperion

A small proof-of-work blockchain in three parts:

- `hyperion.core` — blocks, headers, transactions, Merkle roots, compact
  difficulty targets, difficulty adjustment and a chain that validates itself.
- `hyperion.node` — a node that keeps the chain and a mempool and serves
  JSON-RPC to miners.
- `hyperion.miner` — a solo miner that fetches block templates from a node,
  splits the nonce space over several workers and submits solved blocks.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Running a node

```
hyperion-node
```

The node loads `blockchain.dat` from the working directory, or mines a fresh
genesis block if there is none or it cannot be decoded. The mempool is read
from `mempool.dat` if that file exists, and is then topped up with 215
deterministic test transactions. The node serves JSON-RPC on
`127.0.0.1:6001` (at `/` and `/rpc`) and listens for raw blocks on
`127.0.0.1:6000`. Press Ctrl+C to stop; the chain is written back to
`blockchain.dat` on shutdown and after every accepted block.

Logs go to the console and, as JSON lines, to `logs/hyperion-node.log`
(rotated at 10 MiB, 9 backups). The log level is taken from the
`HYPERION_LOG` environment variable (default `INFO`).

### RPC methods

Requests are JSON-RPC 2.0 objects posted with `Content-Type: application/json`
to `/` or `/rpc`:

| method                | result                                                         |
|-----------------------|----------------------------------------------------------------|
| `get_block_template`  | version, previous block hash, up to 100 mempool transactions, difficulty, timestamp, height, Merkle root |
| `submit_block`        | `{"accepted": bool, "message": str or null}`; params `{"block_hex": "..."}` |
| `get_mining_info`     | block count, difficulty, pooled transaction count, chain name  |
| `get_blockchain_info` | chain name, block count, best block hash, difficulty, time of the tip |
| `get_block_count`     | height of the tip (block count minus one)                      |

`get_block_template` takes the transactions it returns out of the mempool.
An unknown method returns error code `-32601`; a malformed request or bad
parameters return `-32602`. A body that is not JSON gets HTTP 400, and a
request without a JSON content type gets HTTP 415.

```
curl -s -X POST http://127.0.0.1:6001/rpc \
     -H 'Content-Type: application/json' \
     -d '{"jsonrpc": "2.0", "id": 1, "method": "get_block_count"}'
```

The same dispatch is available without HTTP through
`hyperion.node.server.handle_rpc(state, request)`, and `create_app(state)`
returns the `aiohttp` application.

## Running the miner

```
hyperion-miner [-c FILE] [-n URL] [-t NUMBER]
```

| option              | default                  | meaning                         |
|---------------------|--------------------------|---------------------------------|
| `-c`, `--config`    | `config.toml`            | configuration file              |
| `-n`, `--node-url`  | `http://127.0.0.1:6001`  | node to fetch work from         |
| `-t`, `--threads`   | from the configuration   | number of mining workers        |
| `-V`, `--version`   |                          | print the version and exit      |

If the configuration file does not exist it is created with defaults:

```toml
node_url = "http://127.0.0.1:45154"
threads = 8              # number of CPUs on this machine
reconnect_delay = 5
work_update_interval = 1000
stats_interval = 30      # seconds
log_level = "info"
```

Every setting must be present when the file is read. The `--node-url`
option always has a value, so it takes precedence over `node_url` in the
file. The miner checks the node every 5 seconds and pauses its workers while
the node is unreachable, reports its hash rate every `stats_interval`
seconds, and fetches fresh work after each solved block. Ctrl+C stops it.
The console log level comes from `HYPERION_LOG` (default `INFO`).

## Using the core library

```python
from hyperion.core.blockchain import Blockchain
from hyperion.core.transaction import Transaction
from hyperion.core.mining import mine_new_block
from hyperion.core.block import compute_merkle_root

chain = Blockchain.with_genesis()

tx = Transaction([b"alice"], [b"bob"])
block = mine_new_block(chain, [tx], timestamp=1_700_000_000)
chain.add_block(block, skip_pow=False)

assert chain.validate()
assert block.header.merkle_root == compute_merkle_root([tx])
print(len(chain), chain.latest_block())
```

A transaction needs at least one input and one output, otherwise
`TransactionError` is raised. `Blockchain.add_block` raises `BlockchainError`
when the previous hash, the Merkle root or the proof of work is wrong.
Blocks, headers, transactions and whole chains have `serialize()` and
`from_bytes()`; the hash of a block, header or transaction is
`double_sha256()` of its serialized form. `hyperion.node.storage` offers
`save_chain(chain, path)` and `load_chain(path)`.

Difficulty uses the compact form familiar from Bitcoin:

```python
from hyperion.core.target import compact_to_target, target_to_compact

target = compact_to_target(0x1d00ffff)   # 32 big-endian bytes
bits = target_to_compact(int.from_bytes(target, "big"))
```

The difficulty is retargeted every 3 blocks towards a block time of 600
seconds.

## What it does not do

- The block listener on port 6000 only decodes one block per connection and
  prints its hash; it does not add the block to the chain, and the node never
  connects to or broadcasts to other peers.
- The node reads `mempool.dat` at start-up but never writes it; pooled
  transactions are lost when the node stops unless `Mempool.save()` is
  called from your own code.
- There are no wallets, signatures, balances or fees: transaction inputs and
  outputs are opaque byte strings.
- The miner's `reconnect_delay`, `work_update_interval` and `log_level`
  settings are read and written with the configuration file but do not
  change its behaviour.