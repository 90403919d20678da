"""
Client for fetching parsed CGM report summaries from the report service.
"""
import logging
from typing import Optional

from api_clients.conversion import summary_from_payload
from api_clients.report_service_client import ReportServiceClient
from models.therapy_models import GlucoseSummaryPayload, GlucoseSummaryRequest

from therapy_insights.models import GlucoseSummary

GLUCOSE_SUMMARY_ENDPOINT = "/reports/glucose-summary"


class ReportClient:
    """
    Client for making API calls to the report service via ReportServiceClient.
    """

    def __init__(self, client: Optional[ReportServiceClient] = None):
        self.client = client or ReportServiceClient()

    async def get_glucose_summary(self, report_id: str) -> GlucoseSummaryPayload:
        """Get a parsed report summary with strict validation and logging."""
        request_data = GlucoseSummaryRequest(reportId=report_id)
        data = await self.client._make_request(
            method="POST",
            endpoint=GLUCOSE_SUMMARY_ENDPOINT,
            json_data=request_data.model_dump(),
        )

        if not isinstance(data, dict):
            raise RuntimeError(f"Unexpected non-JSON response from {GLUCOSE_SUMMARY_ENDPOINT}: {data!r}")
        code = data.get("code")
        payload = data.get("data")
        if code not in (0, 200) or payload in (None, {}, []):
            logging.error(
                f"Glucose summary failed: code={code}, endpoint={GLUCOSE_SUMMARY_ENDPOINT}, body={data!r}"
            )
            raise RuntimeError(
                f"Glucose summary API error (code={code})"
            )
        return GlucoseSummaryPayload(**payload)


_client: ReportClient | None = None


def _get_client() -> ReportClient:
    global _client
    if _client is None:
        _client = ReportClient()
    return _client


async def get_glucose_summary(report_id: str) -> GlucoseSummaryPayload:
    return await _get_client().get_glucose_summary(report_id)


async def fetch_glucose_summary(report_id: str, client: Optional[ReportClient] = None) -> GlucoseSummary:
    report_client = client or _get_client()
    payload = await report_client.get_glucose_summary(report_id)
    return summary_from_payload(payload)
