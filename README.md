# scrapeless-kit

A Python toolkit for driving remote scraping, crawling, proxy, profile and
storage services, from inside an actor run or from an ordinary program.

Each service is a small class that takes a *backend*. A backend is any object
that performs the remote calls. The expected methods are described by the
`Protocol` classes in each module, such as `KVBackend`, `QueueBackend`,
`CrawlBackend` and `TaskBackend`. The service classes add the service's own
rules on top of the backend:

- Page numbers are raised to at least 1, and page sizes to at least 10.
- Names of namespaces, datasets, buckets, queues and collections get `-<run id>` appended.
- Queue timeouts are kept within [60, 300] seconds.
- Queue deadlines are capped at 86400 seconds. A deadline under 300 becomes 400.
- The number of messages pulled is kept within [1, 100].
- For vector queries, a `topk` outside [1, 1024] is reset to 1.
- Long-running crawl and task jobs are polled until they finish.

## Installation

```
pip install scrapeless-kit
```

To run the tests:

```
pip install "scrapeless-kit[test]"
pytest
```

## What is inside

| Module | Contents |
| --- | --- |
| `scrapeless_kit.httpserver` | A small Flask-based `Server`. `add_handle_post` passes the raw request body to a handler. `add_handle_get` passes the query parameters, encoded as JSON bytes, to a handler. `start` serves on an address such as `"8080"`, `":8080"` or `"host:8080"` (see `parse_address`). Also provides the `ServerMode` enum (`debug`, `release`, `test`) and the `Response` payload (`code`, `data`, `msg`). |
| `scrapeless_kit.profiles` | `Profile`, which creates, gets, lists, renames and deletes browser profiles (`ProfileInfo`, `ListProfileRequest`, `ListProfileResponse`). An empty name becomes `untitled`. |
| `scrapeless_kit.proxies` | `Proxy`, which returns a proxy URL for a `ProxyActor` request. |
| `scrapeless_kit.crawl` | `Crawl`, which scrapes single pages, batches of pages or whole sites. `scrape_url` and `crawl_url` block until the job completes; `async_scrape_url` and `async_crawl_url` only start it. It also provides status checks, error reports and `cancel_crawl`. |
| `scrapeless_kit.actor_service` | `ActorService`, which starts, inspects and aborts actor runs and builds (`IRunActorData`, `RunInfo`, `BuildInfo`, `IPaginationParams`). |
| `scrapeless_kit.tasks` | `Scraping`, `DeepSerp` and `Universal` task runners, driven by a `TaskRequest`. `create_task` submits a task, `get_task_result` fetches its result, and `scrape` does both and polls until the result is ready. |
| `scrapeless_kit.storage.models` | The data classes shared by the storage services, plus `clamp_page` and `suffixed_name`. |
| `scrapeless_kit.storage.kv` | `KV`, for key-value namespaces, keys and values. |
| `scrapeless_kit.storage.dataset` | `Dataset`, for datasets and their items. |
| `scrapeless_kit.storage.objects` | `Object`, for buckets and objects. Only `json`, `html` and `png` files are accepted (see `get_object_type`). |
| `scrapeless_kit.storage.queues` | `Queue`, for message queues with `push`, `pull` and `ack`. |
| `scrapeless_kit.storage.vector` | `Vector`, for vector collections and documents. |
| `scrapeless_kit.storage.service` | `Storage`, which bundles `dataset`, `kv`, `object`, `queue` and `vector` over one backend. It can also be used as a context manager. |

## Example

```python
from scrapeless_kit.storage.service import Storage
from scrapeless_kit.storage.models import PushQueue

with Storage(backend, actor_id="actor-1", run_id="run-1") as storage:
    namespace_id, namespace_name = storage.kv.create_namespace("cache")
    storage.kv.set_value(namespace_id, "greeting", "hello", 60)

    msg_id = storage.queue.push("queue-1", PushQueue(name="job", payload=b"{}"))
    for msg in storage.queue.pull("queue-1", 10):
        storage.queue.ack("queue-1", msg.id)
```

Here `backend` is any object that provides the methods the storage services
call. Leaving the `with` block closes every service.

## Errors

Failures raise exceptions; no status values are returned. Errors raised by a
backend propagate unchanged. In addition:

- `Object.put_object` raises `UnsupportedObjectType` (a `ValueError`) for an extension it does not accept.
- `Crawl.scrape_url` and `Crawl.crawl_url` raise `CrawlJobError` when a job ends in a state other than completed.
- `Universal.create_task` raises `ValueError` when no actor is given.
- `Profile.list_profiles` raises `ValueError` when the request is `None`.

## What this package does not do

- It ships no HTTP client for the remote services. You supply the backend objects that make the actual calls.
- It does not set up logging. The services log through the standard `logging` module under their module names, and configuring handlers, files or rotation is up to the application.
- It provides no command-line program.