"""
Tests for the command line entry point
"""

import io
import json
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import Mock, patch

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

import ga_report_extractor
from report_fetcher import CombinedReportResult, ReportOutcome

CONFIG = {
    "reports": [
        {"name": "Sessions", "metrics": "ga:sessions", "dimensions": "ga:date"},
        {"name": "Pages", "metrics": "ga:pageviews", "dimensions": "ga:pagePath", "order_by": "ga:pageviews"},
    ],
}


def page(token=None):
    report = {'data': {'rows': [{'dimensions': ['x'], 'metrics': [{'values': ['1']}]}]}}
    if token:
        report['nextPageToken'] = token
    return {'reports': [report]}


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.config_path = os.path.join(self.tmpdir.name, 'config.json')
        with open(self.config_path, 'w') as f:
            json.dump(CONFIG, f)

    def run_main(self, argv, responses):
        service = Mock()
        service.reports.return_value.batchGet.return_value.execute.side_effect = responses
        out = io.StringIO()
        with patch('report_fetcher.get_reporting_service', return_value=service) as mock_get_service, \
                redirect_stdout(out):
            code = ga_report_extractor.main(argv)
        return code, out.getvalue(), service, mock_get_service

    def test_stop_policy_reports_failure(self):
        code, output, service, mock_get_service = self.run_main(
            ['123', '-c', self.config_path, '-k', 'key.json'], [page('T1'), page()])

        self.assertEqual(code, 1)
        mock_get_service.assert_called_once_with('key.json')
        self.assertIn('Sessions', output)
        self.assertIn("Invalid order_by entry 'ga:pageviews'", output)
        self.assertIn('Fetched 2 report page(s) across 1 view(s)', output)

    def test_view_ids_from_file(self):
        views = os.path.join(self.tmpdir.name, 'views.txt')
        with open(views, 'w') as f:
            f.write("111\n\n222\n")

        code, output, service, _ = self.run_main(
            [views, '-c', self.config_path, '--on-error', 'continue'], [page(), page()])

        self.assertEqual(code, 1)
        self.assertIn('111', output)
        self.assertIn('222', output)
        bodies = [c.kwargs['body'] for c in service.reports.return_value.batchGet.call_args_list]
        self.assertEqual([b['reportRequests'][0]['viewId'] for b in bodies], ['111', '222'])

    def test_read_view_ids(self):
        self.assertEqual(ga_report_extractor.read_view_ids('98765'), ['98765'])

    def test_read_view_ids_unreadable_path(self):
        long_id = '9' * 5000
        self.assertEqual(ga_report_extractor.read_view_ids(long_id), [long_id])
        with patch('builtins.open', side_effect=PermissionError("denied")):
            self.assertEqual(ga_report_extractor.read_view_ids('views.txt'), ['views.txt'])

    def test_summarize(self):
        result = CombinedReportResult()
        result.add(ReportOutcome(name='ok', pages=[page()['reports'][0]], elapsed_seconds=1.234))
        result.add(ReportOutcome(name='bad', error=ValueError('boom')))
        result.skipped = ['later']

        df = ga_report_extractor.summarize({'1': result})

        self.assertEqual(list(df['report']), ['ok', 'bad', 'later'])
        self.assertEqual(list(df['rows']), [1, 0, 0])
        self.assertEqual(list(df['error']), ['', 'boom', 'skipped'])

    def test_summarize_empty(self):
        self.assertTrue(ga_report_extractor.summarize({}).empty)


if __name__ == '__main__':
    unittest.main()
