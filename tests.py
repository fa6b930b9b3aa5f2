#!/usr/bin/env python3
"""
SegmentDiff Test Suite v1.0.0
=============================
Validates the API endpoints, error envelopes and configuration defaults.

Run with: python -m pytest tests.py -v
Or standalone: python tests.py
"""

import os
import sys
import json
import unittest
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

# Regex sentence splitting keeps the suite independent of installed models
os.environ.setdefault('SD_SENTENCE_DETECTOR', 'regex')
os.environ.setdefault('SD_LOG_LEVEL', 'WARNING')

from app import create_app
from config_logging import VERSION, get_config, reset_config, ValidationError
from segment_diff import SegmentDiffer, TextSegmenter


def make_client():
    app = create_app(differ=SegmentDiffer(segmenter=TextSegmenter()))
    app.config['TESTING'] = True
    return app, app.test_client()


class TestAPIEndpoints(unittest.TestCase):
    """Test API endpoint functionality."""

    def setUp(self):
        """Set up test client."""
        self.app, self.client = make_client()
        self.ctx = self.app.app_context()
        self.ctx.push()

    def tearDown(self):
        """Clean up."""
        self.ctx.pop()

    def test_health_endpoint(self):
        """
        Test health endpoint returns ok status.

        Expects: 200 response with status='ok' and the application version.
        """
        response = self.client.get('/api/health')
        self.assertEqual(response.status_code, 200)
        data = json.loads(response.data)
        self.assertEqual(data['status'], 'ok')
        self.assertEqual(data['version'], VERSION)
        self.assertEqual(data['sentence_detector'], {'name': 'regex'})

    def test_health_reports_spacy_detector(self):
        """
        Test health endpoint reports the spaCy detector state.

        Expects: detector name plus enabled/loaded flags; a health check
        never loads the pipeline itself.
        """
        os.environ['SD_SENTENCE_DETECTOR'] = 'spacy'
        reset_config()
        try:
            response = self.client.get('/api/health')
        finally:
            os.environ['SD_SENTENCE_DETECTOR'] = 'regex'
            reset_config()
        self.assertEqual(response.status_code, 200)
        detector = json.loads(response.data)['sentence_detector']
        self.assertEqual(detector['name'], 'spacy')
        self.assertIn('enabled', detector)
        self.assertIn('loaded', detector)

    def test_list_algorithms(self):
        """
        Test algorithm listing for both categories.

        Expects: paragraph lists thomas then patience; sentence lists four.
        """
        response = self.client.get('/api/diff/algorithms')
        self.assertEqual(response.status_code, 200)
        data = json.loads(response.data)
        self.assertTrue(data['success'])
        paragraph = [a['name'] for a in data['algorithms']['paragraph']['algorithms']]
        self.assertEqual(paragraph, ['thomas', 'patience'])
        self.assertEqual(data['algorithms']['sentence']['count'], 4)

    def test_list_category_algorithms(self):
        """
        Test per-category listing is in display order.

        Expects: thomas, levenshtein, character, patience for sentences.
        """
        response = self.client.get('/api/diff/algorithms/sentence')
        self.assertEqual(response.status_code, 200)
        data = json.loads(response.data)
        self.assertEqual([a['name'] for a in data['algorithms']],
                         ['thomas', 'levenshtein', 'character', 'patience'])
        self.assertEqual([a['order'] for a in data['algorithms']], [1, 3, 4, 5])

    def test_compare_paragraphs(self):
        """
        Test paragraph comparison with a fuzzy pair.

        Expects: 200 with a removed/added pair tagged with similarity.
        """
        response = self.client.post('/api/diff/compare', json={
            'left': "Hello world.\nFoo bar.",
            'right': "Hello world.\nFoo baz.",
            'options': {'fuzziness': 1, 'minMatch': 0.2},
        })
        self.assertEqual(response.status_code, 200)
        result = json.loads(response.data)['result']
        self.assertEqual([e['kind'] for e in result['diff']], ['removed', 'added'])
        self.assertAlmostEqual(result['diff'][0]['similarity'], 1 / 3)
        self.assertEqual(result['metadata']['name'], 'thomas')
        self.assertEqual(result['stats']['fuzzy'], 1)
        self.assertIn('fuzzy_matched_pairs', result['extensions'])

    def test_compare_sentences(self):
        """
        Test sentence comparison with the Levenshtein algorithm.

        Expects: word_diff and sentence_info extensions in the result.
        """
        response = self.client.post('/api/diff/compare', json={
            'left': "Keep this. Change that.",
            'right': "Keep this. Change those.",
            'category': 'sentence',
            'algorithm': 'levenshtein',
            'options': {'fuzziness': 1, 'min_match': 0.2},
        })
        self.assertEqual(response.status_code, 200)
        extensions = json.loads(response.data)['result']['extensions']
        self.assertEqual(len(extensions['word_diff']), 2)
        self.assertIn('0', extensions['sentence_info']['left'])


class TestErrorHandling(unittest.TestCase):
    """Test error handling and responses."""

    def setUp(self):
        """Set up test client."""
        self.app, self.client = make_client()

    def assertError(self, response, status, code):
        self.assertEqual(response.status_code, status)
        data = json.loads(response.data)
        self.assertFalse(data['success'])
        self.assertEqual(data['error']['code'], code)
        self.assertIn('correlation_id', data['error'])
        return data

    def test_invalid_category_listing(self):
        """Expects: 400 INVALID_CATEGORY for an unknown category."""
        self.assertError(self.client.get('/api/diff/algorithms/word'), 400, 'INVALID_CATEGORY')

    def test_invalid_category_compare(self):
        """Expects: 400 INVALID_CATEGORY when comparing in an unknown category."""
        response = self.client.post('/api/diff/compare',
                                    json={'left': 'a', 'right': 'b', 'category': 'word'})
        self.assertError(response, 400, 'INVALID_CATEGORY')

    def test_unknown_algorithm(self):
        """Expects: 400 INVALID_ALGORITHM naming the algorithm."""
        response = self.client.post('/api/diff/compare',
                                    json={'left': 'a', 'right': 'b', 'algorithm': 'myers'})
        data = self.assertError(response, 400, 'INVALID_ALGORITHM')
        self.assertEqual(data['error']['details']['name'], 'myers')

    def test_malformed_options(self):
        """Expects: 400 MALFORMED_OPTIONS for a non-numeric fuzziness."""
        response = self.client.post('/api/diff/compare', json={
            'left': 'a', 'right': 'b', 'options': {'fuzziness': 'very'}
        })
        data = self.assertError(response, 400, 'MALFORMED_OPTIONS')
        self.assertEqual(data['error']['details']['option'], 'fuzziness')

    def test_non_json_body(self):
        """Expects: 400 VALIDATION_ERROR when the body is not a JSON object."""
        response = self.client.post('/api/diff/compare', data='left=a',
                                    content_type='text/plain')
        self.assertError(response, 400, 'VALIDATION_ERROR')

    def test_non_string_texts(self):
        """Expects: 400 VALIDATION_ERROR when left/right are not strings."""
        response = self.client.post('/api/diff/compare', json={'left': 1, 'right': 'b'})
        self.assertError(response, 400, 'VALIDATION_ERROR')

    def test_correlation_id_header_echoed(self):
        """Expects: the caller's correlation ID in the error envelope."""
        response = self.client.get('/api/diff/algorithms/word',
                                   headers={'X-Correlation-ID': 'req-42'})
        data = self.assertError(response, 400, 'INVALID_CATEGORY')
        self.assertEqual(data['error']['correlation_id'], 'req-42')

    def test_validation_error_structure(self):
        """
        Test ValidationError has correct structure.

        Expects: status_code=400, code=VALIDATION_ERROR, proper to_dict().
        """
        err = ValidationError("Test error", field="test_field")
        self.assertEqual(err.status_code, 400)
        error_dict = err.to_dict()
        self.assertFalse(error_dict['success'])
        self.assertEqual(error_dict['error']['details']['field'], 'test_field')


class TestTextLimits(unittest.TestCase):
    """Test request size limits."""

    def setUp(self):
        os.environ['SD_MAX_TEXT_LENGTH'] = '10'
        reset_config()
        self.app, self.client = make_client()

    def tearDown(self):
        del os.environ['SD_MAX_TEXT_LENGTH']
        reset_config()

    def test_text_too_long(self):
        """Expects: 400 VALIDATION_ERROR naming the oversized side."""
        response = self.client.post('/api/diff/compare',
                                    json={'left': 'short', 'right': 'x' * 11})
        self.assertEqual(response.status_code, 400)
        data = json.loads(response.data)
        self.assertEqual(data['error']['details']['field'], 'right')


class TestVersionConsistency(unittest.TestCase):
    """Test version consistency across modules."""

    def test_version_string_format(self):
        """
        Test version string is properly formatted.

        Expects: Three numeric parts separated by dots.
        """
        parts = VERSION.split('.')
        self.assertEqual(len(parts), 3)
        for part in parts:
            self.assertTrue(part.isdigit())

    def test_package_version_matches(self):
        """Expects: segment_diff.__version__ equals config_logging VERSION."""
        import segment_diff
        self.assertEqual(segment_diff.__version__, VERSION)


class TestCodeQuality(unittest.TestCase):
    """Static code quality checks."""

    def test_no_bare_except(self):
        """
        Test source files have no bare except clauses.

        Expects: Zero matches for '^\\s*except:\\s*$' in any package module.
        """
        import re
        base_path = Path(__file__).parent
        sources = list(base_path.glob('*.py')) + list(base_path.glob('segment_diff/**/*.py')) + \
            list(base_path.glob('nlp/**/*.py'))
        for py_file in sources:
            content = py_file.read_text(encoding='utf-8')
            bare_excepts = re.findall(r'^\s*except:\s*$', content, re.MULTILINE)
            self.assertEqual(len(bare_excepts), 0,
                             f"Found {len(bare_excepts)} bare 'except:' clauses in {py_file.name}")


class TestConfigDefaults(unittest.TestCase):
    """Test configuration defaults."""

    def test_debug_default_false(self):
        """Expects: get_config().debug is False by default."""
        self.assertFalse(get_config().debug)

    def test_matching_defaults(self):
        """Expects: strict fuzziness with the 0.5/0.9 threshold range."""
        cfg = get_config()
        self.assertEqual((cfg.default_fuzziness, cfg.default_min_match, cfg.default_max_match),
                         (0.0, 0.5, 0.9))
        self.assertEqual(cfg.word_lookahead, 5)

    def test_localhost_binding(self):
        """Expects: the server binds to localhost by default."""
        self.assertEqual(get_config().host, '127.0.0.1')


def run_tests():
    """Run all tests and return results."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    test_classes = [
        TestAPIEndpoints,
        TestErrorHandling,
        TestTextLimits,
        TestVersionConsistency,
        TestCodeQuality,
        TestConfigDefaults,
    ]

    for test_class in test_classes:
        suite.addTests(loader.loadTestsFromTestCase(test_class))

    runner = unittest.TextTestRunner(verbosity=2)
    return runner.run(suite)


if __name__ == '__main__':
    result = run_tests()
    sys.exit(0 if result.wasSuccessful() else 1)
