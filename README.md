# subrpc

A small, synchronous JSON-RPC client for Substrate-based nodes.

It talks to a node over WebSocket and covers the common node calls:

- chain: block hashes, headers, blocks, signed blocks, and finalized-head subscriptions
- state: raw storage reads, paged keys, read proofs, and storage subscriptions
- system: node name, version, chain, chain type, properties, health, peer id, and listen addresses
- transaction payment: fee details and payment info
- events: raw event bytes of a block, finding an extrinsic in a block, and event subscriptions
- author: submitting an extrinsic, and watching it until it reaches a given status

## Installation

```
pip install subrpc
```

## Connecting

`subrpc.ws_client.WebSocketRpcClient` is the transport. It takes a node URL and the number of times to retry a failed connection (0 to 255). Between attempts it waits five seconds. If every attempt fails, it raises `MaxConnectionAttemptsExceededError`. A URL without a scheme or host raises `InvalidUrlError`.

Each request opens its own connection. `WebSocketRpcClient.with_default_url(max_attempts)` connects to `ws://127.0.0.1:9944`.

`subrpc.client.Api.connect` fetches the genesis hash, the metadata and the runtime version from the node, and caches them:

```python
from subrpc.client import Api
from subrpc.ws_client import WebSocketRpcClient

client = WebSocketRpcClient("ws://127.0.0.1:9944", max_attempts=3)
api = Api.connect(client)

print(api.genesis_hash)
print(api.spec_version)
print(api.runtime_version.transaction_version)
print(api.get_system_chain())
print(api.get_finalized_head())
```

If you already have these values, build the api directly. This makes no calls to the node:

```python
api = Api(client, genesis_hash, metadata_bytes, runtime_version)
```

`api.metadata` holds the encoded metadata as raw bytes. It must start with the `meta` magic prefix. After a runtime upgrade, refresh the cached metadata and runtime version:

```python
api.update_runtime()
```

`RuntimeVersion` converts to and from the node's JSON form with `from_json` and `to_json`.

## Storage

`subrpc.hashing.storage_key(pallet, item)` builds the key of a plain storage value. The key is the twox-128 hash of the pallet name followed by the twox-128 hash of the item name.

```python
from subrpc.hashing import storage_key, encode_hex

key = storage_key("System", "Events")
raw = api.get_opaque_storage_by_key_hash(key, None)
print(encode_hex(raw) if raw is not None else "no data")

raw = api.get_opaque_storage_value("System", "Number")
keys = api.get_storage_keys_paged(key, 10)
proof = api.get_storage_value_proof("System", "Number")   # ReadProof or None
```

`subrpc.hashing` also provides `twox_64`, `twox_128`, `blake2_256`, `encode_hex` and `decode_hex`.

## Fees

```python
details = api.get_fee_details(encoded_xt)   # FeeDetails or None
if details is not None and details.inclusion_fee is not None:
    print(details.inclusion_fee.base_fee, details.tip)
info = api.get_payment_info(encoded_xt)     # the node's dict, or None
```

The node may send amounts as numbers or as `0x` hex strings. Both are converted to `int` with `number_or_hex_to_int`. A value that is malformed, negative or not below 2**128 raises `NumberConversionError`.

## Submitting extrinsics

Extrinsics are passed in already encoded, as bytes. You can submit one and get its hash back:

```python
tx_hash = api.submit_extrinsic(encoded_xt)
```

You can also submit one and watch it until it reaches a given `XtStatus` (`READY`, `BROADCAST`, `IN_BLOCK`, `FINALIZED`):

```python
from subrpc.status import XtStatus

report = api.submit_and_watch_extrinsic_until(encoded_xt, XtStatus.IN_BLOCK)
print(report.extrinsic_hash, report.block_hash, report.status.kind)
```

The report's `extrinsic_hash` is the BLAKE2b-256 hash of the encoded extrinsic. Some statuses mean the extrinsic cannot succeed: future, retracted, finality timeout, usurped, dropped and invalid. If one of these arrives, the watch unsubscribes and raises `UnexpectedTxStatusError`, whose `status` attribute names the status. If the stream ends before the status is reached, the watch raises `NoStreamError`.

To find where an extrinsic landed in a block, and to read the block's raw events:

```python
index = api.retrieve_extrinsic_index_from_block(report.block_hash, report.extrinsic_hash)
event_bytes = api.fetch_event_bytes(report.block_hash)
```

## Subscriptions

Subscription methods return what the client's `subscribe` returns. With `WebSocketRpcClient`, that is a `WebSocketSubscription`. You can iterate over it, or call `next()`, which returns `None` once the stream has ended. Call `unsubscribe()` when you are done:

```python
sub = api.subscribe_finalized_heads()
for header in sub:
    print(header["number"])
    break
sub.unsubscribe()
```

`api.subscribe_events()` wraps the subscription in an `EventSubscription`. Its `next_event()` returns the raw encoded events of each change:

```python
events = api.subscribe_events()
raw = events.next_event()
events.unsubscribe()
```

## Testing without a node

`subrpc.rpc.MockRpcClient` answers each method with a canned JSON text. It supports requests only, not subscriptions.

```python
from subrpc.client import Api, RuntimeVersion
from subrpc.rpc import MockRpcClient

mock = MockRpcClient({"system_name": '"Substrate Node"'})
api = Api(mock, "0x00", b"meta", RuntimeVersion())
print(api.get_system_name())
```

Use `update_entry(method, json_text)` to change an answer. A method with no answer raises `RpcError`.

Your own transport can take the place of `WebSocketRpcClient` by implementing the `subrpc.rpc.Request`, `Subscribe` and `Subscription` interfaces.

## Errors

Errors fall into two families:

- Transport and response failures derive from `subrpc.errors.RpcError`. Examples are `ConnectionClosedError`, `MaxConnectionAttemptsExceededError` and `InvalidUrlError`.
- API-level failures derive from `subrpc.errors.ApiError`. Examples are `FetchGenesisHashError`, `UnexpectedTxStatusError`, `NoStreamError`, `BlockNotFoundError`, `BlockHashNotFoundError`, `ExtrinsicNotFoundError` and `NumberConversionError`.

## What it does not do

- It does not build, encode or sign extrinsics. You submit bytes that are already encoded. `set_signer` only stores a signer on the api; nothing uses it.
- It does not decode metadata, storage values or events. These come back as raw bytes or as the node's JSON. For that reason it cannot look up map storage keys, constants, account information or nonces.
- It does not have a command-line interface.

## Running the tests

```
pip install -e ".[test]"
pytest
```