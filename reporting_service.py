import logging
import os

from google.oauth2 import service_account
from googleapiclient.discovery import build

SCOPES = ['https://www.googleapis.com/auth/analytics.readonly']  # Read-only access to Google Analytics


def get_reporting_service(key_file_path, api_name='analyticsreporting', api_version='v4', scopes=None):
  """Get a service that communicates to the Analytics Reporting API.

  Args:
    key_file_path: string A path to a service account key file (JSON).
    api_name: string The name of the api to connect to.
    api_version: string The api version to connect to.
    scopes: A list of strings representing the auth scopes to authorize for the
      connection. Defaults to read-only analytics.

  Returns:
    A service that is connected to the specified API.
  """
  logger = logging.getLogger('reporting_service')
  scopes = scopes or SCOPES

  logger.info(f"Attempting to use service account key file: {key_file_path}")
  if not os.path.exists(key_file_path):
    raise RuntimeError(f"Could not find service account key file '{key_file_path}'. Set KEY_FILE_PATH or 'key_file_name' in the report configuration.")

  try:
    credentials = service_account.Credentials.from_service_account_file(key_file_path, scopes=scopes)
    logger.debug(f"Loaded service account credentials for {getattr(credentials, 'service_account_email', 'unknown')}")
  except Exception as e:
    logger.error(f"Failed to load service account key file '{key_file_path}'.", exc_info=True)
    raise RuntimeError(f"Could not load service account key file '{key_file_path}'. Details: {e}") from e

  # Build the service object.
  try:
    logger.debug(f"Building Google API service for '{api_name}' v'{api_version}'...")
    service = build(api_name, api_version, credentials=credentials, cache_discovery=False)
    logger.info(f"Successfully built Google API service for '{api_name}' version '{api_version}'.")
  except Exception as e:
    logger.error(f"Failed to build Google API service for '{api_name}'.", exc_info=True)
    raise RuntimeError(f"Failed to build Google API service. Details: {e}") from e

  return service
