"""
Report service API client for calling the CGM report-parsing service.
"""
import os
import logging
from typing import Optional

import httpx

# get report service environment variables
REPORT_API_BASE_URL = os.getenv("THERAPY_INSIGHTS_REPORT_API_BASE_URL")
REPORT_API_TOKEN = os.getenv("THERAPY_INSIGHTS_REPORT_API_TOKEN")
REPORT_API_ENV = os.getenv("THERAPY_INSIGHTS_ENVIRONMENT", "dev")


class ReportServiceClient:
    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None):
        self.base_url = base_url or REPORT_API_BASE_URL
        self.token = token or REPORT_API_TOKEN
        if not self.base_url or not self.token:
            raise ValueError(f"[Report service] base URL/token not set for environment: {REPORT_API_ENV}")

        self.headers = {
            "content-type": "application/json",
            "authorization": f"Bearer {self.token}",
        }

    async def _make_request(self, method: str, endpoint: str, params=None, json_data=None):
        url = f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        timeout = httpx.Timeout(30.0, connect=10.0)

        try:
            async with httpx.AsyncClient(follow_redirects=True, timeout=timeout) as client:
                response = await client.request(
                    method=method.upper(),
                    url=url,
                    params=params,
                    json=json_data,
                    headers=self.headers
                )
                logging.info(f"Request {url} completed with status: {response.status_code}")
                response.raise_for_status()
                return response.json() if response.text else {}
        except httpx.TimeoutException as e:
            logging.error(f"Timeout error calling report service {method} {url}: {e}")
            raise
        except httpx.HTTPStatusError as e:
            logging.error(f"HTTP error calling report service {method} {url}: {e}")
            logging.error(f"Response status: {e.response.status_code}")
            logging.error(f"Response text: {e.response.text}")
            raise
        except httpx.RequestError as e:
            logging.error(f"Request error calling report service {method} {url}: {e}")
            raise
