# zgstorage

A client library for a sharded storage network whose files are verified with
keccak-256 merkle trees. It can:

- compute the merkle root of a local file or an in-memory buffer, padded to the
  flow layout the network uses, and describe the data as a flow submission
  with its storage fee;
- build and check merkle proofs;
- build and encode key-value stream batches (reads, writes and access-control
  operations), with the tags that go with them;
- talk JSON-RPC to storage nodes, key-value nodes and admin endpoints, and
  walk the keys of a key-value stream;
- pick a set of sharded storage nodes that stores every segment a given
  number of times;
- keep a download progress record (root, size, next offset) at the end of a
  partially written file.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Usage

Merkle root of a file:

```python
from zgstorage.data import File, merkle_tree

with File.open("sample.bin") as f:
    print(merkle_tree(f).root().hex())
```

Submission and fee for a buffer:

```python
from zgstorage.data import DataInMemory
from zgstorage.submission import Flow

submission = Flow(DataInMemory(b"hello, world")).create_submission()
print(submission.root().hex(), submission.fee())
```

Build an encoded key-value batch:

```python
from zgstorage.hashes import hex_to_hash
from zgstorage.kv_builder import StreamDataBuilder

stream = hex_to_hash("0xf2bd")
builder = StreamDataBuilder(version=10)
builder.set(stream, b"TESTKEY0", b"EFGHI")
payload = builder.build().encode()
tags = builder.build_tags()
```

Ask a storage node about a file:

```python
from zgstorage.hashes import hex_to_hash
from zgstorage.zgs_client import ZgsClient

with ZgsClient("http://127.0.0.1:5678") as node:
    info = node.get_file_info(hex_to_hash("0x<root>"))
    print(None if info is None else info.finalized)
```

Walk a key-value stream:

```python
from zgstorage.kv_client import KvStreamClient
from zgstorage.kv_node import KvClient

kv = KvStreamClient(KvClient("http://127.0.0.1:6789"))
it = kv.new_iterator(stream)
it.seek_to_first()
while it.valid():
    pair = it.key_value()
    print(pair.key, pair.data)
    it.next()
```

Choose nodes for two replicas:

```python
from zgstorage.shard import ShardConfig, ShardedNode, select

nodes = [
    ShardedNode(url="http://127.0.0.1:5678", config=ShardConfig(shard_id=0, num_shard=1)),
    ShardedNode(url="http://127.0.0.1:5679", config=ShardConfig(shard_id=0, num_shard=2)),
    ShardedNode(url="http://127.0.0.1:5680", config=ShardConfig(shard_id=1, num_shard=2)),
]
print(select(nodes, 2))  # None if the nodes cannot hold two replicas
```

`IndexerApi` lists the nodes among a set of `ZgsClient`s whose shard
configuration is valid.

## What it does not do

- There is no command-line tool; everything is used from Python.
- It does not download whole files. The node clients fetch single segments
  (`ZgsClient.download_segment`, `ZgsClient.download_segment_with_proof`) and
  `Metadata` can record progress in a file, but nothing here fetches all
  segments, writes them out and checks the finished file.
- It does not upload files or send on-chain transactions. It can build a
  `Submission` and send segments with `ZgsClient.upload_segments`, but it has
  no wallet, contract or transaction code.
- It runs no servers: `IndexerApi` returns the node list but does not serve it
  over RPC, and there is no HTTP gateway.