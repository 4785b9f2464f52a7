import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import httpx

import gather_catalog_items
from gather_catalog_items import (
    POLICY_COUNT_ALL,
    POLICY_STOP_AT_KNOWN,
    ApiClient,
    CatalogSource,
    CollectionWriter,
    RunOrchestrator,
    RunOutcome,
    SourceWalker,
)

BASE = 'https://catalog.example.test/v1/search/items/details'
REAL_CLIENT = httpx.Client

## canned catalog: newest-first emotes over two pages, plus two bundle sources that overlap
PAGES: dict = {
    ('emotes', ''): {'data': [{'id': 30, 'name': 'Wave'}, {'id': 29, 'name': 'Shrug'}], 'nextPageCursor': 'e2'},
    ('emotes', 'e2'): {'data': [{'id': 28, 'name': 'Dab', 'price': None}], 'nextPageCursor': None},
    ('recent', ''): {
        'data': [
            {'id': 5, 'name': 'Mage', 'bundledItems': [{'id': 51, 'type': 'Asset'}, {'id': 52, 'type': 'UserOutfit'}]},
            {'id': 6, 'name': 'Knight'},
        ],
        'nextPageCursor': None,
    },
    ('relevance', ''): {'data': [{'id': 6, 'name': 'Knight'}, {'id': 5, 'name': 'Mage'}], 'nextPageCursor': 'r2'},
    ('relevance', 'r2'): {'data': [{'id': 7, 'name': 'Rogue'}], 'nextPageCursor': None},
}


def handler(request: httpx.Request) -> httpx.Response:
    key: tuple = (request.url.params.get('src'), request.url.params.get('Cursor', ''))
    if key not in PAGES:
        return httpx.Response(503)
    return httpx.Response(200, json=PAGES[key])


def make_sources() -> list:
    return [
        CatalogSource('emotes', f'{BASE}?src=emotes', 'emotes.json', POLICY_STOP_AT_KNOWN),
        CatalogSource('bundles-recent', f'{BASE}?src=recent', 'bundles.json', POLICY_COUNT_ALL),
        CatalogSource('bundles-relevance', f'{BASE}?src=relevance', 'bundles.json', POLICY_COUNT_ALL),
    ]


class TestRunOrchestrator(unittest.TestCase):
    """
    Tests full runs against a mocked catalog, writing into a temp directory.
    """

    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.out_dir: Path = Path(tmp.name)
        patcher = mock.patch('gather_catalog_items._sleep')
        patcher.start()
        self.addCleanup(patcher.stop)
        client = REAL_CLIENT(transport=httpx.MockTransport(handler))
        self.addCleanup(client.close)
        self.walker = SourceWalker(ApiClient(client, max_tries=2), page_pause_s=0)

    def make_orchestrator(self) -> RunOrchestrator:
        return RunOrchestrator(self.walker, CollectionWriter(), self.out_dir)

    def read_data(self, name: str) -> list:
        with (self.out_dir / name).open('r', encoding='utf-8') as fh:
            doc: dict = json.load(fh)
        self.assertEqual(doc['totalItems'], len(doc['data']))
        return doc['data']

    def test_group_by_output_file_keeps_listed_order(self) -> None:
        groups: dict = RunOrchestrator.group_by_output_file(make_sources())
        self.assertEqual(list(groups.keys()), ['emotes.json', 'bundles.json'])
        self.assertEqual([s.name for s in groups['bundles.json']], ['bundles-recent', 'bundles-relevance'])

    def test_first_run_counts_and_files(self) -> None:
        outcome: RunOutcome = self.make_orchestrator().run(make_sources())
        self.assertTrue(outcome.success)
        emotes_result, bundles_result = outcome.file_results
        self.assertEqual((emotes_result.new_count, emotes_result.duplicate_count), (3, 0))
        self.assertEqual((bundles_result.new_count, bundles_result.duplicate_count), (3, 2))
        self.assertEqual([item['id'] for item in self.read_data('emotes.json')], [30, 29, 28])
        bundles: list = self.read_data('bundles.json')
        self.assertEqual(sorted(item['id'] for item in bundles), [5, 6, 7])
        mage: dict = next(item for item in bundles if item['id'] == 5)
        self.assertEqual(mage['bundledItems'], {'1': [51]})

    def test_second_run_adds_nothing_and_keeps_data(self) -> None:
        """
        Checks re-running against the same catalog adds zero items and leaves `data` unchanged.
        """
        self.make_orchestrator().run(make_sources())
        first_emotes: list = self.read_data('emotes.json')
        first_bundles: list = self.read_data('bundles.json')

        outcome: RunOutcome = self.make_orchestrator().run(make_sources())
        self.assertTrue(outcome.success)
        self.assertEqual([fr.new_count for fr in outcome.file_results], [0, 0])
        self.assertEqual(outcome.file_results[0].duplicate_count, 1)  # stopped at the first known emote
        self.assertEqual(self.read_data('emotes.json'), first_emotes)
        self.assertEqual(self.read_data('bundles.json'), first_bundles)

    def test_newer_items_go_first_on_a_later_run(self) -> None:
        self.make_orchestrator().run(make_sources())
        newer_page: dict = {'data': [{'id': 31, 'name': 'Salute'}, {'id': 30, 'name': 'Wave'}], 'nextPageCursor': 'e2'}
        with mock.patch.dict(PAGES, {('emotes', ''): newer_page}):
            self.make_orchestrator().run(make_sources()[:1])
        self.assertEqual([item['id'] for item in self.read_data('emotes.json')], [31, 30, 29, 28])

    def test_failed_save_fails_run_but_other_files_still_save(self) -> None:
        (self.out_dir / 'emotes.json').mkdir()
        with self.assertLogs('gather_catalog_items', level='ERROR'):
            outcome: RunOutcome = self.make_orchestrator().run(make_sources())
        self.assertFalse(outcome.success)
        self.assertEqual([fr.saved for fr in outcome.file_results], [False, True])
        self.assertEqual(len(self.read_data('bundles.json')), 3)

    def test_failed_source_keeps_siblings_and_still_saves(self) -> None:
        sources: list = make_sources()
        sources.insert(1, CatalogSource('down', f'{BASE}?src=down', 'bundles.json', POLICY_COUNT_ALL))
        with self.assertLogs('gather_catalog_items', level='ERROR'):
            outcome: RunOutcome = self.make_orchestrator().run(sources)
        self.assertTrue(outcome.success)
        self.assertEqual(outcome.file_results[1].failed_sources, ['down'])
        self.assertEqual(outcome.file_results[1].new_count, 3)

    def test_unexpected_error_is_fatal(self) -> None:
        orchestrator: RunOrchestrator = self.make_orchestrator()
        with mock.patch.object(orchestrator.walker, 'walk', side_effect=RuntimeError('boom')):
            with self.assertLogs('gather_catalog_items', level='ERROR'):
                outcome: RunOutcome = orchestrator.run(make_sources())
        self.assertFalse(outcome.success)
        self.assertIn('boom', outcome.fatal_error)


class TestMain(unittest.TestCase):
    """
    Tests main()'s exit codes.
    """

    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.tmp_dir: Path = Path(tmp.name)
        patcher = mock.patch('gather_catalog_items._sleep')
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_sources_json_run_exits_zero(self) -> None:
        sources_path: Path = self.tmp_dir / 'sources.json'
        sources_path.write_text(
            json.dumps([{'name': 'emotes', 'base_url': f'{BASE}?src=emotes', 'output_file': 'out/emotes.json'}]),
            encoding='utf-8',
        )
        mocked_client = lambda **kwargs: REAL_CLIENT(transport=httpx.MockTransport(handler), **kwargs)  # noqa: E731
        with mock.patch.object(gather_catalog_items.httpx, 'Client', side_effect=mocked_client):
            code: int = gather_catalog_items.main(
                ['--sources-json', str(sources_path), '--output-dir', str(self.tmp_dir), '--page-pause', '0']
            )
        self.assertEqual(code, 0)
        self.assertTrue((self.tmp_dir / 'out' / 'emotes.json').exists())

    def test_unreachable_catalog_still_saves_and_exits_zero(self) -> None:
        """
        Checks a source failure alone doesn't fail the run; the (empty) file is still saved.
        """
        mocked_client = lambda **kwargs: REAL_CLIENT(  # noqa: E731
            transport=httpx.MockTransport(lambda request: httpx.Response(500)), **kwargs
        )
        with mock.patch.object(gather_catalog_items.httpx, 'Client', side_effect=mocked_client):
            with self.assertLogs('gather_catalog_items', level='ERROR'):
                code: int = gather_catalog_items.main(['--output-dir', str(self.tmp_dir), '--max-tries', '1'])
        self.assertEqual(code, 0)
        with (self.tmp_dir / 'emotes.json').open('r', encoding='utf-8') as fh:
            self.assertEqual(json.load(fh)['totalItems'], 0)

    def test_bad_sources_json_exits_two(self) -> None:
        sources_path: Path = self.tmp_dir / 'sources.json'
        sources_path.write_text(json.dumps([{'name': 'no-url'}]), encoding='utf-8')
        with self.assertLogs('gather_catalog_items', level='ERROR'):
            code: int = gather_catalog_items.main(['--sources-json', str(sources_path), '--output-dir', str(self.tmp_dir)])
        self.assertEqual(code, 2)


if __name__ == '__main__':
    unittest.main()
