"""
Report fetch orchestration for the Analytics Reporting API v4.

Builds one ReportRequest per configured report definition, follows
nextPageToken until the API stops returning one, and collects every
returned report page into a CombinedReportResult.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from date_ranges import resolve_date_ranges
from report_config import (
    ReportConfiguration,
    ReportDefinition,
    get_key_file_path,
    load_report_configuration,
)
from reporting_service import get_reporting_service

logger = logging.getLogger(__name__)

# The Reporting API returns at most 10,000 rows per request, no matter how many you ask for.
MAX_PAGE_SIZE = 10000
SAMPLING_LEVEL = 'LARGE'
ON_ERROR_POLICIES = ('stop', 'continue')


class OrderBySpecError(ValueError):
    """An order_by entry that is not a field-direction pair"""

    def __init__(self, entry: str, order_by: str):
        self.entry = entry
        self.order_by = order_by
        super().__init__(f"Invalid order_by entry {entry!r} in {order_by!r}; expected 'field-DIRECTION'")


@dataclass
class ReportOutcome:
    """What happened for one report definition."""
    name: str
    pages: List[Dict[str, Any]] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def row_count(self) -> int:
        return sum(len(page.get('data', {}).get('rows', [])) for page in self.pages)


@dataclass
class CombinedReportResult:
    """Report pages from every processed definition, in fetch order."""
    reports: List[Dict[str, Any]] = field(default_factory=list)
    outcomes: List[ReportOutcome] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def add(self, outcome: ReportOutcome):
        self.outcomes.append(outcome)
        self.reports.extend(outcome.pages)

    @property
    def failed(self) -> List[ReportOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def complete(self) -> bool:
        return not self.failed and not self.skipped


def split_fields(value: str) -> List[str]:
    """Split a comma-separated setting. Segments are kept as-is, empty ones included."""
    return value.split(',')


def parse_order_by(order_by: Optional[str]) -> List[Dict[str, str]]:
    """
    Turn 'ga:sessions-DESCENDING,ga:date-ASCENDING' into Reporting API orderBys.

    Raises:
        OrderBySpecError: if an entry has no '-' separator.
    """
    if not order_by:
        return []
    order_bys = []
    for entry in split_fields(order_by):
        parts = entry.split('-')
        if len(parts) < 2:
            raise OrderBySpecError(entry, order_by)
        order_bys.append({'fieldName': parts[0], 'sortOrder': parts[1]})
    return order_bys


def build_report_request(view_id: str, report: ReportDefinition, date_ranges: List[Dict[str, str]]) -> Dict[str, Any]:
    """Build the ReportRequest body for one report definition."""
    page_size = report.record_count if report.record_count > 0 else MAX_PAGE_SIZE
    request = {
        'viewId': view_id.strip(),
        'dateRanges': date_ranges,
        'metrics': [{'expression': metric} for metric in split_fields(report.metrics)],
        'dimensions': [{'name': dimension} for dimension in split_fields(report.dimensions)],
        'samplingLevel': SAMPLING_LEVEL,
        'pageSize': min(page_size, MAX_PAGE_SIZE),
    }
    if report.order_by:
        request['orderBys'] = parse_order_by(report.order_by)
    return request


def fetch_report(service, report_request: Dict[str, Any], max_pages: Optional[int] = None,
                 pages: Optional[List[Dict[str, Any]]] = None) -> List[Dict[str, Any]]:
    """
    Execute a report request and follow its page tokens.

    Args:
        service: Analytics Reporting API v4 service
        report_request: ReportRequest body; its pageToken is advanced per page
        max_pages: Stop after this many requests. None follows every page.
        pages: List to append report pages to. A new list is used when omitted.

    Returns:
        The list of report pages, in the order received
    """
    pages = [] if pages is None else pages
    requests_made = 0
    while True:
        logger.debug(f"batchGet viewId={report_request.get('viewId')} pageToken={report_request.get('pageToken')}")
        response = service.reports().batchGet(body={'reportRequests': [dict(report_request)]}).execute()
        requests_made += 1
        if not response:
            break

        reports = response.get('reports', [])
        pages.extend(reports)

        next_page_token = reports[0].get('nextPageToken') if reports else None
        if not next_page_token:
            break
        if max_pages is not None and requests_made >= max_pages:
            logger.warning(f"Stopping after {requests_made} page(s) for view {report_request.get('viewId')}; "
                           f"more data is available (nextPageToken={next_page_token})")
            break
        report_request['pageToken'] = next_page_token
    return pages


def format_elapsed(seconds: float) -> str:
    """hh:mm:ss"""
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class ReportingApi:
    """Fetches every configured report for a view"""

    def __init__(self, config: Optional[ReportConfiguration] = None, key_file_path: Optional[str] = None,
                 service=None, on_error: str = 'stop', max_pages: Optional[int] = None):
        if on_error not in ON_ERROR_POLICIES:
            raise ValueError(f"on_error must be one of {ON_ERROR_POLICIES}, got {on_error!r}")
        self.config = config if config is not None else load_report_configuration()
        self.on_error = on_error
        self.max_pages = max_pages if max_pages is not None else self.config.max_pages
        if service is None:
            service = get_reporting_service(key_file_path or get_key_file_path(self.config))
        self.service = service

    def fetch_definition(self, view_id: str, report: ReportDefinition) -> ReportOutcome:
        """Fetch all pages of one report definition, recording any failure on the outcome."""
        outcome = ReportOutcome(name=report.name)
        logger.info(f"Started fetching report: {report.name}")
        started = time.time()
        try:
            date_ranges = resolve_date_ranges(self.config.date_configuration)
            report_request = build_report_request(view_id, report, date_ranges)
            fetch_report(self.service, report_request, max_pages=self.max_pages, pages=outcome.pages)
        except Exception as e:
            outcome.error = e
            logger.error(f"Error in fetching report '{report.name}' for view {view_id.strip()}: {e}", exc_info=True)
        finally:
            outcome.elapsed_seconds = time.time() - started

        if outcome.ok:
            logger.info(f"Finished fetching report: {report.name} ({len(outcome.pages)} page(s), {outcome.row_count} row(s))")
        logger.info(f"Time elapsed: {format_elapsed(outcome.elapsed_seconds)}")
        return outcome

    def fetch_all(self, view_id: str) -> CombinedReportResult:
        """
        Fetch every configured report for a view.

        Never raises for per-report faults. With on_error='stop' the first
        failure ends the batch and the remaining report names are listed in
        CombinedReportResult.skipped; with 'continue' every report is tried.
        """
        result = CombinedReportResult()
        logger.info(f"Processing View Id: {view_id}")
        reports = list(self.config.reports)
        for index, report in enumerate(reports):
            outcome = self.fetch_definition(view_id, report)
            result.add(outcome)
            if not outcome.ok and self.on_error == 'stop':
                result.skipped = [remaining.name for remaining in reports[index + 1:]]
                if result.skipped:
                    logger.warning(f"Skipping {len(result.skipped)} remaining report(s) after failure: {', '.join(result.skipped)}")
                break
        return result
