"""
Tests for building the Analytics Reporting service from a service account key file
"""

import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from reporting_service import SCOPES, get_reporting_service


class TestGetReportingService(unittest.TestCase):

    def setUp(self):
        handle, self.key_file = tempfile.mkstemp(suffix='.json')
        os.close(handle)
        self.addCleanup(os.remove, self.key_file)

    def test_missing_key_file(self):
        with self.assertRaises(RuntimeError) as ctx:
            get_reporting_service('/no/such/key.json')
        self.assertIn('/no/such/key.json', str(ctx.exception))

    @patch('reporting_service.build')
    @patch('reporting_service.service_account.Credentials.from_service_account_file')
    def test_builds_read_only_service(self, mock_from_file, mock_build):
        service = get_reporting_service(self.key_file)

        mock_from_file.assert_called_once_with(self.key_file, scopes=SCOPES)
        mock_build.assert_called_once_with('analyticsreporting', 'v4',
                                           credentials=mock_from_file.return_value, cache_discovery=False)
        self.assertIs(service, mock_build.return_value)
        self.assertEqual(SCOPES, ['https://www.googleapis.com/auth/analytics.readonly'])

    @patch('reporting_service.service_account.Credentials.from_service_account_file',
           side_effect=ValueError("bad key"))
    def test_invalid_key_file(self, _):
        with self.assertRaises(RuntimeError) as ctx:
            get_reporting_service(self.key_file)
        self.assertIn('bad key', str(ctx.exception))

    @patch('reporting_service.build', side_effect=Exception("discovery failed"))
    @patch('reporting_service.service_account.Credentials.from_service_account_file')
    def test_build_failure(self, _, __):
        with self.assertRaises(RuntimeError) as ctx:
            get_reporting_service(self.key_file)
        self.assertIn('discovery failed', str(ctx.exception))


if __name__ == '__main__':
    unittest.main()
