"""Tests for the key lookup tasks."""

import io
import json
from unittest.mock import patch

from invoke import Context

from fetchyourkeys import FetchYourKeys, tasks
from fetchyourkeys.api_client import InMemoryKeysClient
from .base import API_KEY, BaseCacheTest, make_record


class TestKeyTasks(BaseCacheTest):

    def setUp(self):
        super().setUp()
        self.remote = InMemoryKeysClient([
            make_record('groq', service='ai', value='gsk_abc'),
            make_record('stripe', service='payments'),
        ])
        factory = patch.object(tasks, '_create_client', side_effect=self.build_client)
        factory.start()
        self.addCleanup(factory.stop)

    def build_client(self, environment=None, debug=False):
        return FetchYourKeys(api_key=API_KEY, environment=environment,
                             cache_dir=self.cache_root, keys_client=self.remote)

    def run_task(self, task, *args, **kwargs):
        with patch('sys.stdout', new_callable=io.StringIO) as out:
            task(Context(), *args, **kwargs)
        return out.getvalue()

    def test_get_masks_value(self):
        output = json.loads(self.run_task(tasks.get, 'groq'))
        self.assertTrue(output['success'])
        self.assertEqual(output['data']['value'], '***')

    def test_get_show(self):
        output = json.loads(self.run_task(tasks.get, 'groq', show=True))
        self.assertEqual(output['data']['value'], 'gsk_abc')

    def test_get_missing_exits_non_zero(self):
        with self.assertRaises(SystemExit) as ctx:
            self.run_task(tasks.get, 'missing')
        self.assertEqual(ctx.exception.code, 1)

    def test_list_by_service(self):
        output = json.loads(self.run_task(tasks.list, service='payments'))
        self.assertEqual([entry['label'] for entry in output], ['stripe'])
        self.assertNotIn('value', output[0])

    def test_stats(self):
        output = json.loads(self.run_task(tasks.stats))
        self.assertEqual(output['cached_keys'], 2)
        self.assertEqual(output['state'], 'online-valid')
