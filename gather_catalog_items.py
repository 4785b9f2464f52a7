# /// script
# requires-python = "==3.12.*"
# dependencies = [
#   "httpx",
#   "tqdm",
#   "humanize"
# ]
# ///

"""
Gathers newly-listed catalog items from one or more paginated catalog-search sources,
  and merges them into local JSON files.
It's server-friendly, in that it makes synchronous requests, one page at a time, with a pause between pages,
  and it stops paging a newest-first source as soon as it reaches an item it has already saved.

Usage:
  uv run ./gather_catalog_items.py --output-dir "../output_dir"
  uv run ./gather_catalog_items.py --sources-json ./sources.example.json --output-dir "../output_dir"

Args:
  --sources-json (optional) -- defaults to the single built-in emotes source
  --output-dir (optional) -- defaults to the current directory
  --max-tries, --retry-delay, --page-pause (optional) -- request-politeness knobs
  --append-new (optional) -- writes existing items before new ones
"""

import argparse
import json
import logging
import os
import sys
import time
from datetime import datetime, timedelta
from pathlib import Path

import httpx
import humanize
from tqdm import tqdm

## setup logging
log_level_name: str = os.getenv('LOG_LEVEL', 'INFO').upper()
log_level = getattr(
    logging, log_level_name, logging.INFO
)  # maps the string name to the corresponding logging level constant; defaults to INFO
logging.basicConfig(
    level=log_level,
    format='[%(asctime)s] %(levelname)s [%(module)s-%(funcName)s()::%(lineno)d] %(message)s',
    datefmt='%d/%b/%Y %H:%M:%S',
    stream=sys.stdout,
)
log = logging.getLogger(__name__)
## prevent httpx from logging
if log_level <= logging.INFO:
    for noisy in ('httpx', 'httpcore'):
        lg = logging.getLogger(noisy)
        lg.setLevel(logging.WARNING)
        lg.propagate = False


CATALOG_SEARCH_URL = 'https://catalog.roblox.com/v1/search/items/details'
EMOTES_URL = f'{CATALOG_SEARCH_URL}?Category=12&Subcategory=38&Limit=30&SortType=3'
USER_AGENT = 'catalog-item-gatherer/1.0'

EXCLUDED_BUNDLED_TYPE = 'UserOutfit'

POLICY_STOP_AT_KNOWN = 'stop_at_known'  # newest-first source; first known id means the rest are known too
POLICY_COUNT_ALL = 'count_all'  # source shares a file with others; known ids don't imply exhaustion
DUPLICATE_POLICIES = (POLICY_STOP_AT_KNOWN, POLICY_COUNT_ALL)

SCAN_CONTINUE = 'continue'
SCAN_STOP = 'stop'
SCAN_EXHAUSTED = 'exhausted'

## default knobs
DEFAULT_MAX_TRIES = 4  # one try plus three retries
DEFAULT_RETRY_DELAY_SECONDS = 2.0  # linear backoff: 2s, 4s, 6s...
DEFAULT_PAGE_PAUSE_SECONDS = 1.25  # polite pause between pages
REQUEST_TIMEOUT_SECONDS = 30.0


class NetworkError(Exception):
    """
    Raised once a page-fetch has used up its attempt budget; `last_exc` holds the final cause.
    """

    def __init__(self, url: str, attempts: int, last_exc: Exception) -> None:
        super().__init__(f'giving up on ``{url}`` after {attempts} attempt(s); last error: {last_exc!r}')
        self.url: str = url
        self.attempts: int = attempts
        self.last_exc: Exception = last_exc


class SourceConfigError(ValueError):
    """
    Raised for a source descriptor that can't be used.
    """


class CatalogSource:
    """
    Describes one paginated catalog-search endpoint and where its items are saved.
    - Holds the base URL that a page cursor gets appended to.
    - Holds the output file; several sources may share one.
    - Holds the duplicate policy used when a known id turns up.
    - Parses descriptors from sources-json, accepting snake_case or camelCase keys.
    """

    def __init__(
        self, name: str, base_url: str, output_file: str, duplicate_policy: str = POLICY_STOP_AT_KNOWN
    ) -> None:
        if duplicate_policy not in DUPLICATE_POLICIES:
            raise SourceConfigError(
                f'source ``{name}`` has unknown duplicate_policy ``{duplicate_policy}``; expected one of {DUPLICATE_POLICIES}'
            )
        self.name: str = name
        self.base_url: str = base_url
        self.output_file: str = output_file
        self.duplicate_policy: str = duplicate_policy

    def __repr__(self) -> str:
        return f'CatalogSource(name={self.name!r}, output_file={self.output_file!r}, duplicate_policy={self.duplicate_policy!r})'

    def page_url(self, cursor: str = '') -> str:
        if not cursor:
            return self.base_url
        separator: str = '&' if '?' in self.base_url else '?'
        return f'{self.base_url}{separator}Cursor={cursor}'

    @staticmethod
    def from_json(dct: dict[str, object]) -> 'CatalogSource':
        """
        Builds a source from a sources-json entry.
        """
        if not isinstance(dct, dict):
            raise SourceConfigError(f'source entry must be an object; got ``{dct!r}``')
        name: object = dct.get('name')
        base_url: object = dct.get('base_url') or dct.get('baseUrl')
        output_file: object = dct.get('output_file') or dct.get('outputFile')
        policy: object = dct.get('duplicate_policy') or dct.get('duplicatePolicy') or POLICY_STOP_AT_KNOWN
        for key, val in (('name', name), ('base_url', base_url), ('output_file', output_file)):
            if not isinstance(val, str) or not val.strip():
                raise SourceConfigError(f'source entry ``{dct!r}`` is missing ``{key}``')
        return CatalogSource(name.strip(), base_url.strip(), output_file.strip(), str(policy))  # type: ignore[union-attr]


DEFAULT_SOURCES: list[CatalogSource] = [
    CatalogSource('emotes', EMOTES_URL, 'emotes.json', POLICY_STOP_AT_KNOWN),
]


def load_sources(path: Path) -> list[CatalogSource]:
    """
    Loads source descriptors from a sources-json file (a list of objects).
    Called by: main()
    """
    try:
        with path.open('r', encoding='utf-8') as fh:
            raw: object = json.load(fh)
    except (OSError, ValueError) as exc:
        raise SourceConfigError(f'could not read sources file ``{path}``: {exc}') from exc
    if not isinstance(raw, list) or not raw:
        raise SourceConfigError(f'sources file ``{path}`` must hold a non-empty list')
    return [CatalogSource.from_json(entry) for entry in raw]  # type: ignore[arg-type]


## item records -----------------------------------------------------


class _Unset:
    def __repr__(self) -> str:
        return 'UNSET'


UNSET = _Unset()


class CatalogItem:
    """
    The saved record for one catalog entry.
    `creator`, `price`, `created` and `bundled_items` stay UNSET when the entry lacks them, and are then left
      out of the saved JSON; a `price` of None (offsale) is kept, and saved as null.
    """

    def __init__(self, item_id: int, name: str) -> None:
        self.item_id: int = item_id
        self.name: str = name
        self.creator: object = UNSET
        self.price: object = UNSET
        self.created: object = UNSET
        self.bundled_items: object = UNSET

    @staticmethod
    def from_entry(entry: dict[str, object]) -> 'CatalogItem':
        """
        Builds an item from one entry of a page's `data` list.
        """
        item = CatalogItem(entry['id'], entry.get('name') or '')  # type: ignore[arg-type]
        if 'creatorName' in entry:
            item.creator = entry['creatorName']
        if 'price' in entry:
            item.price = entry['price']
        if 'created' in entry:
            item.created = entry['created']
        bundled: object = entry.get('bundledItems')
        if isinstance(bundled, list):
            bundled_map: dict[str, list[int]] = extract_bundled_items(bundled)
            if bundled_map:
                item.bundled_items = bundled_map
        return item

    def to_dict(self) -> dict[str, object]:
        dct: dict[str, object] = {'id': self.item_id, 'name': self.name}
        for key, val in (
            ('creator', self.creator),
            ('price', self.price),
            ('created', self.created),
            ('bundledItems', self.bundled_items),
        ):
            if val is not UNSET:
                dct[key] = val
        return dct


def extract_bundled_items(bundled: list[object]) -> dict[str, list[int]]:
    """
    Maps 1-based position keys to sub-item ids.

    Every sub-entry takes a position, but `UserOutfit` sub-entries (and ones without an id) aren't recorded, so
      [{id:1,type:'Face'}, {id:2,type:'UserOutfit'}, {id:3,type:'Hat'}] gives {'1': [1], '3': [3]}.
    """
    bundled_map: dict[str, list[int]] = {}
    for position, sub_entry in enumerate(bundled, start=1):
        if not isinstance(sub_entry, dict):
            continue
        if sub_entry.get('type') == EXCLUDED_BUNDLED_TYPE:
            continue
        sub_id: object = sub_entry.get('id')
        if sub_id is None:
            continue
        bundled_map.setdefault(str(position), []).append(sub_id)  # type: ignore[arg-type]
    return bundled_map


def _is_item_id(val: object) -> bool:
    return isinstance(val, int) and not isinstance(val, bool)


## page fetching ----------------------------------------------------


class ApiClient:
    """
    Fetches catalog pages with retries and linear backoff.
    - Sends every request with the client's identifying user-agent and a 30-second timeout.
    - Treats non-2xx statuses, timeouts, transport errors, and non-object/malformed JSON as retryable.
    - Waits `retry_delay_s * attempt_number` between attempts.
    - Raises NetworkError, chained to the last cause, after `max_tries` attempts.
    """

    def __init__(
        self,
        client: httpx.Client,
        *,
        max_tries: int = DEFAULT_MAX_TRIES,
        retry_delay_s: float = DEFAULT_RETRY_DELAY_SECONDS,
        timeout_s: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.client: httpx.Client = client
        self.max_tries: int = max(1, max_tries)
        self.retry_delay_s: float = retry_delay_s
        self.timeout_s: float = timeout_s

    def fetch_page(self, url: str) -> dict[str, object]:
        last_exc: Exception | None = None
        for attempt in range(1, self.max_tries + 1):
            try:
                resp: httpx.Response = self.client.get(url, timeout=self.timeout_s, follow_redirects=True)
                if not resp.is_success:
                    raise httpx.HTTPStatusError(f'HTTP {resp.status_code}', request=resp.request, response=resp)
                data: object = resp.json()
                if not isinstance(data, dict):
                    raise ValueError(f'expected a JSON object; got {type(data).__name__}')
                return data
            except (httpx.HTTPError, ValueError) as exc:
                last_exc = exc
                if attempt < self.max_tries:
                    delay_s: float = self.retry_delay_s * attempt
                    log.warning(f'attempt {attempt}/{self.max_tries} failed ({exc!r}); retrying in {delay_s}s')
                    _sleep(delay_s)
        assert last_exc is not None
        raise NetworkError(url, self.max_tries, last_exc) from last_exc


## existing items ---------------------------------------------------


class ExistingItems:
    """
    A destination file's saved items (in saved order) plus the set of their ids.
    """

    def __init__(self, items: list[dict[str, object]] | None = None, ids: set[int] | None = None) -> None:
        self.items: list[dict[str, object]] = items if items is not None else []
        self.ids: set[int] = ids if ids is not None else set()


def load_existing(path: Path) -> ExistingItems:
    """
    Loads a destination file's saved items.
    - A missing file is normal on a first run; returns empty.
    - An unreadable or malformed file is logged and treated as empty, so the run starts fresh.
    - Accepts the collection shape (`{totalItems, lastUpdate, data}`) or a bare list of items.
    - Drops entries without an integer id; keeps the first of any repeated id.
    Called by: RunOrchestrator.process_file()
    """
    if not path.exists():
        log.info(f'no existing file at ``{path}``; starting empty')
        return ExistingItems()
    try:
        with path.open('r', encoding='utf-8') as fh:
            doc: object = json.load(fh)
    except (OSError, ValueError) as exc:
        log.warning(f'could not parse ``{path}`` ({exc!r}); starting fresh')
        return ExistingItems()
    raw_items: object = doc.get('data') if isinstance(doc, dict) else doc
    if not isinstance(raw_items, list):
        log.warning(f'``{path}`` has no `data` list; starting fresh')
        return ExistingItems()

    existing = ExistingItems()
    for entry in raw_items:
        item_id: object = entry.get('id') if isinstance(entry, dict) else None
        if not _is_item_id(item_id):
            log.warning(f'dropping saved entry without an integer id, ``{entry!r}``')
            continue
        if item_id in existing.ids:
            log.warning(f'dropping repeated saved id, ``{item_id}``')
            continue
        existing.ids.add(item_id)  # type: ignore[arg-type]
        existing.items.append(entry)
    log.info(f'loaded {len(existing.items)} existing item(s) from ``{path}``')
    return existing


## source walking ---------------------------------------------------


class WalkResult:
    """
    What one source contributed; `error` is set when the walk ended on a NetworkError.
    """

    def __init__(self, source_name: str) -> None:
        self.source_name: str = source_name
        self.new_items: list[dict[str, object]] = []
        self.new_count: int = 0
        self.duplicate_count: int = 0
        self.pages_fetched: int = 0
        self.error: str | None = None


class SourceWalker:
    """
    Pages through one source, collecting items whose ids aren't yet known.
    - Starts without a cursor, then follows each page's `nextPageCursor`.
    - Adds each new id to `known_ids` right away, so later pages and later sources see it.
    - Under `stop_at_known`, stops at the first known id and skips the rest of that page and any later pages.
    - Under `count_all`, counts known ids as duplicates and keeps going.
    - Pauses between pages.
    - On NetworkError, logs it and returns what was collected so far.
    """

    def __init__(self, api: ApiClient, *, page_pause_s: float = DEFAULT_PAGE_PAUSE_SECONDS) -> None:
        self.api: ApiClient = api
        self.page_pause_s: float = page_pause_s

    def walk(self, source: CatalogSource, known_ids: set[int]) -> WalkResult:
        result = WalkResult(source.name)
        cursor: str = ''
        progress = tqdm(desc=f'Walking {source.name}', unit='page', leave=False, disable=None)
        try:
            while True:
                url: str = source.page_url(cursor)
                log.debug(f'fetching page, ``{url}``')
                try:
                    page: dict[str, object] = self.api.fetch_page(url)
                except NetworkError as exc:
                    log.error(f'source ``{source.name}`` stopped early after {result.pages_fetched} page(s); {exc}')
                    result.error = str(exc)
                    break
                result.pages_fetched += 1
                progress.update(1)
                state: str = self.scan_page(page, source, known_ids, result)
                progress.set_postfix(new=result.new_count, dup=result.duplicate_count)
                if state != SCAN_CONTINUE:
                    log.debug(f'source ``{source.name}`` finished with scan-state ``{state}``')
                    break
                cursor = str(page['nextPageCursor'])
                _sleep(self.page_pause_s)
        finally:
            progress.close()
        log.info(
            f'source ``{source.name}``: {result.new_count} new, {result.duplicate_count} duplicate, '
            f'{result.pages_fetched} page(s)'
        )
        return result

    def scan_page(self, page: dict[str, object], source: CatalogSource, known_ids: set[int], result: WalkResult) -> str:
        """
        Scans one page's entries into `result`, and returns the scan-state.
        - SCAN_STOP: a known id was hit under `stop_at_known`; the rest of the page was discarded.
        - SCAN_EXHAUSTED: the page was fully scanned and there's no next cursor.
        - SCAN_CONTINUE: the page was fully scanned and there's another page.
        Called by: walk()
        """
        entries: object = page.get('data')
        if not isinstance(entries, list):
            entries = []
        log.info(f'source ``{source.name}`` page {result.pages_fetched}: {len(entries)} entries')
        for entry in entries:
            item_id: object = entry.get('id') if isinstance(entry, dict) else None
            if not _is_item_id(item_id):
                log.debug(f'skipping entry without an integer id, ``{entry!r}``')
                continue
            if item_id in known_ids:
                result.duplicate_count += 1
                if source.duplicate_policy == POLICY_STOP_AT_KNOWN:
                    log.info(f'source ``{source.name}`` reached known id ``{item_id}``; stopping')
                    return SCAN_STOP
                continue
            item: CatalogItem = CatalogItem.from_entry(entry)  # type: ignore[arg-type]
            known_ids.add(item_id)  # type: ignore[arg-type]
            result.new_items.append(item.to_dict())
            result.new_count += 1
        if not page.get('nextPageCursor'):
            return SCAN_EXHAUSTED
        return SCAN_CONTINUE


## saving -----------------------------------------------------------


class CollectionWriter:
    """
    Merges new items with existing ones and overwrites the destination file.
    - Puts new items first by default (newest-first files), or last when `new_first` is False.
    - Keeps the first of any repeated id, so ids stay unique in the file.
    - Serializes the whole collection in memory, writes it to a temp file, then replaces the destination.
    - Returns False (and logs) on a failed write; never raises.
    """

    def __init__(self, *, new_first: bool = True) -> None:
        self.new_first: bool = new_first

    def merge(self, existing_items: list[dict[str, object]], new_items: list[dict[str, object]]) -> list[dict[str, object]]:
        ordered: list[dict[str, object]] = new_items + existing_items if self.new_first else existing_items + new_items
        merged: list[dict[str, object]] = []
        seen: set[object] = set()
        for item in ordered:
            item_id: object = item.get('id')
            if item_id in seen:
                continue
            seen.add(item_id)
            merged.append(item)
        return merged

    def merge_and_save(
        self, existing_items: list[dict[str, object]], new_items: list[dict[str, object]], path: Path
    ) -> bool:
        merged: list[dict[str, object]] = self.merge(existing_items, new_items)
        collection: dict[str, object] = {
            'keyword': None,
            'totalItems': len(merged),
            'lastUpdate': _now_iso(),
            'data': merged,
        }
        tmp_path: Path = path.with_name(f'{path.name}.tmp')
        try:
            jsn: str = json.dumps(collection, ensure_ascii=False, indent=2)
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open('w', encoding='utf-8') as fh:
                fh.write(jsn)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            log.error(f'could not save ``{path}``; {exc!r}')
            return False
        log.info(f'saved {len(merged)} item(s) to ``{path}`` ({humanize.naturalsize(len(jsn.encode("utf-8")))})')
        return True


## orchestration ----------------------------------------------------


class FileResult:
    """
    Counts for one destination file.
    """

    def __init__(self, output_file: str) -> None:
        self.output_file: str = output_file
        self.existing_count: int = 0
        self.new_count: int = 0
        self.duplicate_count: int = 0
        self.total_count: int = 0
        self.saved: bool = False
        self.failed_sources: list[str] = []


class RunOutcome:
    """
    The structured result of a run; `main()` maps it to an exit code.
    """

    def __init__(self) -> None:
        self.file_results: list[FileResult] = []
        self.fatal_error: str | None = None
        self.elapsed_s: float = 0.0

    @property
    def success(self) -> bool:
        return self.fatal_error is None and all(fr.saved for fr in self.file_results)


class RunOrchestrator:
    """
    Runs every source, one destination file at a time.
    - Groups sources by output file, keeping the order they were listed in.
    - Per file: loads existing items once, walks each of its sources in order against a shared known-id set,
      then saves once.
    - A failed source doesn't stop its siblings; a failed save doesn't stop other files.
    - Any other exception is logged and ends the run with `fatal_error` set.
    """

    def __init__(self, walker: SourceWalker, writer: CollectionWriter, output_dir: Path) -> None:
        self.walker: SourceWalker = walker
        self.writer: CollectionWriter = writer
        self.output_dir: Path = output_dir

    @staticmethod
    def group_by_output_file(sources: list[CatalogSource]) -> dict[str, list[CatalogSource]]:
        groups: dict[str, list[CatalogSource]] = {}
        for source in sources:
            groups.setdefault(source.output_file, []).append(source)
        return groups

    def resolve_path(self, output_file: str) -> Path:
        return self.output_dir / output_file

    def run(self, sources: list[CatalogSource]) -> RunOutcome:
        outcome = RunOutcome()
        start_time: float = time.monotonic()
        try:
            for output_file, file_sources in self.group_by_output_file(sources).items():
                outcome.file_results.append(self.process_file(output_file, file_sources))
        except Exception as exc:
            log.exception(f'run aborted; {exc!r}')
            outcome.fatal_error = repr(exc)
        outcome.elapsed_s = time.monotonic() - start_time
        log.info(
            f'run {"succeeded" if outcome.success else "failed"}; '
            f'{sum(fr.new_count for fr in outcome.file_results)} new item(s) across {len(outcome.file_results)} file(s) '
            f'in {humanize.naturaldelta(timedelta(seconds=outcome.elapsed_s))}'
        )
        return outcome

    def process_file(self, output_file: str, file_sources: list[CatalogSource]) -> FileResult:
        """
        Loads, walks, and saves one destination file.
        Called by: run()
        """
        file_result = FileResult(output_file)
        path: Path = self.resolve_path(output_file)
        existing: ExistingItems = load_existing(path)
        file_result.existing_count = len(existing.items)

        known_ids: set[int] = existing.ids
        new_items: list[dict[str, object]] = []
        for source in file_sources:
            walk_result: WalkResult = self.walker.walk(source, known_ids)
            new_items.extend(walk_result.new_items)
            file_result.new_count += walk_result.new_count
            file_result.duplicate_count += walk_result.duplicate_count
            if walk_result.error is not None:
                file_result.failed_sources.append(source.name)

        file_result.saved = self.writer.merge_and_save(existing.items, new_items, path)
        file_result.total_count = len(existing.items) + len(new_items)
        log.info(
            f'file ``{output_file}``: {file_result.existing_count} existing, {file_result.new_count} new, '
            f'{file_result.duplicate_count} duplicate, saved={file_result.saved}'
        )
        return file_result


class CLI:
    """
    Manages command-line parsing for the script entrypoint.
    - Accepts an optional sources-json path; the built-in emotes source is used otherwise.
    - Accepts an output directory that relative output files resolve against.
    - Accepts retry, backoff, and page-pause knobs.
    - Exposes a parse helper to support testing with custom argv.
    """

    @staticmethod
    def build_parser() -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(description='Gather new catalog items into local JSON files.')
        parser.add_argument('--sources-json', default=None, help='Optional. JSON list of source descriptors.')
        parser.add_argument('--output-dir', default='.', help='Directory for output files (default: current directory).')
        parser.add_argument(
            '--max-tries',
            type=int,
            default=DEFAULT_MAX_TRIES,
            metavar='INTEGER',
            help=f'Attempts per page before giving up (default: {DEFAULT_MAX_TRIES}).',
        )
        parser.add_argument(
            '--retry-delay',
            type=float,
            default=DEFAULT_RETRY_DELAY_SECONDS,
            metavar='SECONDS',
            help=f'Backoff base; the wait after attempt N is N times this (default: {DEFAULT_RETRY_DELAY_SECONDS}).',
        )
        parser.add_argument(
            '--page-pause',
            type=float,
            default=DEFAULT_PAGE_PAUSE_SECONDS,
            metavar='SECONDS',
            help=f'Pause between pages (default: {DEFAULT_PAGE_PAUSE_SECONDS}).',
        )
        parser.add_argument(
            '--append-new', action='store_true', help='Write existing items first, then new ones (default: new first).'
        )
        return parser

    @staticmethod
    def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
        return CLI.build_parser().parse_args(argv)


def _now_iso() -> str:
    """
    Returns an ISO-8601 local timestamp with timezone info.
    """
    return datetime.now().astimezone().isoformat()


def _sleep(seconds: float) -> None:
    """
    Sleeps for given seconds; centralizes sleep for easier tweaking (and patching in tests).
    """
    if seconds > 0:
        time.sleep(seconds)


def main(argv: list[str] | None = None) -> int:
    """
    Loads sources, walks them, saves each destination file, and returns an exit code.

    Flow:
    - Parses CLI args; loads sources from sources-json, or uses the built-in emotes source.
    - Creates an httpx client with the identifying user-agent and a 30-second timeout.
    - Runs the orchestrator, which loads, walks, and saves one destination file at a time.
    - Returns 0 if every file saved, 1 if any save failed or the run aborted, 2 for bad source config.

    Called by: dundermain
    """
    ## handle args --------------------------------------------------
    args: argparse.Namespace = CLI.parse_args(argv)
    out_dir: Path = Path(args.output_dir).expanduser().resolve()

    ## load sources -------------------------------------------------
    try:
        sources: list[CatalogSource] = (
            load_sources(Path(args.sources_json).expanduser()) if args.sources_json else list(DEFAULT_SOURCES)
        )
    except SourceConfigError as exc:
        log.error(f'bad source configuration; {exc}')
        return 2
    log.info(f'gathering from {len(sources)} source(s) into ``{out_dir}``')

    ## run ----------------------------------------------------------
    headers: dict[str, str] = {'User-Agent': USER_AGENT}
    timeout: httpx.Timeout = httpx.Timeout(REQUEST_TIMEOUT_SECONDS)
    with httpx.Client(headers=headers, timeout=timeout) as client:
        api = ApiClient(client, max_tries=args.max_tries, retry_delay_s=args.retry_delay)
        walker = SourceWalker(api, page_pause_s=args.page_pause)
        writer = CollectionWriter(new_first=not args.append_new)
        orchestrator = RunOrchestrator(walker, writer, out_dir)
        outcome: RunOutcome = orchestrator.run(sources)

    return 0 if outcome.success else 1

    ## end def main()


if __name__ == '__main__':
    raise SystemExit(main())
