# commitlog

An append-only commit log stored on disk as a series of segments. Each
segment pairs a *store* file, which holds records each preceded by an
8-byte big-endian length, with an memory-mapped *index* file, which maps a
record's offset (relative to the segment's base offset) to its position in
the store. When a segment fills up, the log rolls over to a new one, and a
log reopened on the same directory picks up the segments it left behind.

Alongside the log the package offers:

- `commitlog.httpserver`: a JSON-over-HTTP server backed by an in-memory
  log (`MemoryLog`), started with the `commitlog-http` command;
- `commitlog.server.LogService`: produce / consume calls, their streaming
  variants and a server listing, each checked against an authorizer;
- `commitlog.auth.Authorizer`: allow/deny decisions read from a model file
  and a CSV policy file;
- `commitlog.tlsconfig`: locations of certificate files and construction of
  TLS 1.3 contexts;
- `commitlog.picker.Picker` and `commitlog.resolver.Resolver`: client-side
  helpers that send writes to the leader, spread reads over followers and
  discover the servers of a cluster;
- `commitlog.replicator.Replicator`: copies records from other servers into
  the local one.

## Installing

```
pip install .
```

The package has no runtime dependencies beyond the standard library.

## The on-disk log

```python
from commitlog.api import Record
from commitlog.config import Config, SegmentConfig
from commitlog.log import Log

with Log("/tmp/mylog", Config(SegmentConfig(max_store_bytes=4096))) as log:
    offset = log.append(Record(value=b"hello"))
    print(log.read(offset).value)          # b"hello"
    print(log.lowest_offset(), log.highest_offset())
```

The directory must already exist.

- `Log.read(offset)` raises `OffsetOutOfRangeError` for an offset the log
  does not hold. It is a `StatusError` whose `code` is
  `StatusCode.OUT_OF_RANGE`; it also carries `offset` and a
  `localized_message`.
- `Log.truncate(lowest)` removes every segment whose records all lie at or
  below `lowest`.
- `Log.reader()` returns a binary stream over the raw contents of every
  segment's store, in order.
- `Log.reset()` deletes every record and starts again from
  `SegmentConfig.initial_offset`; `Log.remove()` closes the log and deletes
  its directory.

`SegmentConfig` holds `max_store_bytes`, `max_index_bytes` and
`initial_offset`. A size limit left at zero becomes 1024 bytes
(`Config.with_defaults()`, which `Log` applies). Each index entry takes 12
bytes, so the index limit also caps how many records a segment holds.

The lower-level pieces, `Store`, `Index` and `Segment`, can be used on their
own. Records are serialised with `encode_record` and parsed with
`decode_record` from `commitlog.api`; `decode_record` raises `ValueError` on
malformed input.

## The HTTP server

```
commitlog-http
commitlog-http --addr 127.0.0.1:9000
```

listens on `:8080` by default and keeps its records in memory only:

- `POST /` with a body such as `{"record": {"value": "aGVsbG8="}}` appends
  the record and answers `{"offset": 0}`. Values are base64 encoded.
- `GET /` with a body such as `{"offset": 0}` answers
  `{"record": {"value": "aGVsbG8=", "offset": 0}}`, or status 404 with
  `offset not found` when no record has that offset.

A malformed body is answered with status 400, any other path with 404 and
any other method with 405. From Python, `new_http_server(addr)` returns the
server without starting it.

## The service layer

```python
from commitlog.auth import Authorizer
from commitlog.server import LogService

service = LogService(commit_log=log, authorizer=Authorizer("model.conf", "policy.csv"))
offset = service.produce(Record(value=b"hi"), subject="root")
record = service.consume(offset, subject="root")
```

A refused request raises `StatusError` with `StatusCode.PERMISSION_DENIED`.
`produce_stream(records, subject)` yields one offset per record;
`consume_stream(offset, subject, stop)` yields records from `offset` on,
waiting for new ones until the `threading.Event` `stop` is set.
`get_servers()` asks the `get_serverer` given to the service and raises an
`UNIMPLEMENTED` `StatusError` when there is none.
`subject_from_certificate(cert)` picks the common name out of a peer
certificate as returned by `SSLSocket.getpeercert()`.

`Authorizer` understands a model with `[request_definition]` (three
fields), `[policy_definition]`, the effect `some(where (p.eft == allow))`
and a matcher made of `r.x == p.y` terms joined by `&&`; policy rows are
CSV lines starting with `p`.

## TLS

`config_file(name)` places a file in `$CONFIG_DIR`, or in `~/.proglog` when
that is unset; `CA_FILE`, `SERVER_CERT_FILE`, `ACL_MODEL_FILE` and the
other module constants are built with it. `setup_tls_config(TLSConfig(...))`
returns an `ssl.SSLContext` limited to TLS 1.3; a server context given a CA
requires client certificates, and an unreadable CA raises `ValueError`.

## Routing and replication helpers

- `Picker.build(ready)` takes a mapping of connection to attributes with an
  `is_leader` flag; `Picker.pick(method)` returns the leader for methods
  containing `Produce` (or when there are no followers), followers in turn
  for `Consume`, and raises `NoSubConnAvailableError` otherwise.
- `Resolver.build(target, client_conn, dial)` dials `target`, calls
  `get_servers()` on the result and passes a `ResolverState` of `Address`
  entries to `client_conn.update_state`; `resolve_now()` repeats it.
- `Replicator(dial, local_server)` starts a thread per `join(name, addr)`
  that consumes the remote log from offset 0 and produces each record
  locally; `leave(name)` and `close()` stop it.

## What the package does not do

It provides no network RPC server or client for `LogService`, no cluster
membership or leader election, and no replicated log with consensus. The
picker, resolver and replicator work with whatever connection objects the
caller supplies. The HTTP server keeps its records in memory and loses them
when it stops.

## Running the tests

```
pip install .[test]
pytest
```