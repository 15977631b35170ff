"""
HTTP client for the external ML service.

Parsing, skill extraction, fit scoring, gap analysis and interview question
generation all live behind this service; this module only ships payloads,
retries transient failures and validates the shape of what comes back.
"""
import logging
import numbers
from typing import Any, Dict, List, Optional

import requests
from tenacity import Retrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

from hiring_engine.core.config import settings
from hiring_engine.core.exceptions import UpstreamError
from hiring_engine.schemas.resume import skill_name

logger = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    """Timeouts, dropped connections and 5xx answers are worth another attempt."""
    if isinstance(exc, (requests.exceptions.Timeout, requests.exceptions.ConnectionError)):
        return True
    if isinstance(exc, requests.exceptions.HTTPError) and exc.response is not None:
        return exc.response.status_code >= 500
    return False


def _upstream_message(response: Optional[requests.Response]) -> Optional[str]:
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return response.text[:500] or None
    if isinstance(body, dict):
        return body.get("error") or body.get("detail") or body.get("message")
    return None


class MLServiceClient:
    def __init__(
        self,
        base_url: Optional[str],
        timeout: float = 30,
        upload_timeout: float = 60,
        max_attempts: int = 3,
        retry_backoff: float = 1.0,
    ):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = timeout
        self.upload_timeout = upload_timeout
        self.max_attempts = max(1, max_attempts)
        self.retry_backoff = retry_backoff

    @classmethod
    def from_settings(cls) -> "MLServiceClient":
        return cls(
            base_url=settings.ml.base_url,
            timeout=settings.ml.timeout_seconds,
            upload_timeout=settings.ml.upload_timeout_seconds,
            max_attempts=settings.ml.max_attempts,
            retry_backoff=settings.ml.retry_backoff_seconds,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _send(self, url: str, timeout: float, **kwargs) -> requests.Response:
        response = requests.post(url, timeout=timeout, **kwargs)
        response.raise_for_status()
        return response

    def _post(self, endpoint: str, timeout: Optional[float] = None, **kwargs) -> Dict[str, Any]:
        if not self.base_url:
            raise UpstreamError("ML_SERVICE_URL is not configured", details={"endpoint": endpoint})

        url = f"{self.base_url}/{endpoint}"
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.retry_backoff, max=10),
            retry=retry_if_exception(_is_transient),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        logger.info(f"Calling ML service: POST /{endpoint}")
        try:
            response = retrying(self._send, url, timeout or self.timeout, **kwargs)
        except requests.exceptions.Timeout:
            logger.error(f"ML service timeout on /{endpoint}")
            raise UpstreamError(
                f"ML service timed out on /{endpoint}",
                details={"endpoint": endpoint},
            )
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            upstream_error = _upstream_message(e.response)
            logger.error(f"ML service /{endpoint} returned {status}: {upstream_error}")
            raise UpstreamError(
                f"ML service returned error {status} on /{endpoint}",
                details={"endpoint": endpoint, "upstreamStatus": status, "upstreamError": upstream_error},
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"ML service /{endpoint} unreachable: {e}")
            raise UpstreamError(
                f"ML service unreachable on /{endpoint}",
                details={"endpoint": endpoint, "upstreamError": str(e)},
            )

        try:
            payload = response.json()
        except ValueError:
            raise UpstreamError(
                f"Invalid response from ML service on /{endpoint}",
                details={"endpoint": endpoint, "upstreamError": "response body is not JSON"},
            )
        if not isinstance(payload, dict):
            raise UpstreamError(
                f"Invalid response from ML service on /{endpoint}",
                details={"endpoint": endpoint, "upstreamError": "response body is not an object"},
            )
        return payload

    @staticmethod
    def _malformed(endpoint: str, reason: str) -> UpstreamError:
        logger.error(f"Malformed ML payload from /{endpoint}: {reason}")
        return UpstreamError(
            f"Invalid response from ML service on /{endpoint}",
            details={"endpoint": endpoint, "upstreamError": reason},
        )

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------
    def parse_resume(self, file_path: str, filename: str, content_type: Optional[str] = None) -> Dict[str, Any]:
        # Read once so every retry sends the same bytes
        with open(file_path, "rb") as fh:
            content = fh.read()
        payload = self._post(
            "parse-resume",
            timeout=self.upload_timeout,
            files={"resume": (filename, content, content_type or "application/octet-stream")},
        )
        parsed = payload.get("parsedData")
        if not isinstance(parsed, dict):
            raise self._malformed("parse-resume", "parsedData missing")
        if parsed.get("skills") is not None:
            skills = parsed["skills"]
            names = [skill_name(s) for s in skills] if isinstance(skills, list) else [None]
            if None in names:
                raise self._malformed("parse-resume", "skills must be strings or objects with a name")
            parsed = {**parsed, "skills": [name for name in names if name]}
        return {
            "extractedText": payload.get("extractedText") or "",
            "parsedData": parsed,
        }

    def parse_jd(self, title: str, company: str, description: str) -> Dict[str, Any]:
        payload = self._post(
            "parse-jd",
            json={"title": title, "company": company, "description": description},
        )
        if not isinstance(payload.get("parsedData"), dict):
            raise self._malformed("parse-jd", "parsedData missing")
        return payload["parsedData"]

    def match(self, resume: Dict[str, Any], job_description: Dict[str, Any]) -> Dict[str, Any]:
        payload = self._post("match", json={"resume": resume, "jobDescription": job_description})
        fit_score = payload.get("fitScore")
        if isinstance(fit_score, bool) or not isinstance(fit_score, numbers.Real):
            raise self._malformed("match", "fitScore is not a number")
        if not 0 <= fit_score <= 100:
            raise self._malformed("match", f"fitScore {fit_score} outside 0-100")
        match_details = payload.get("matchDetails") or {}
        if not isinstance(match_details, dict):
            raise self._malformed("match", "matchDetails is not an object")
        return {"fitScore": float(fit_score), "matchDetails": match_details}

    def improve(
        self,
        resume: Dict[str, Any],
        job_description: Dict[str, Any],
        match_details: Dict[str, Any],
    ) -> Dict[str, Any]:
        return self._post(
            "improve",
            json={"resume": resume, "jobDescription": job_description, "matchDetails": match_details},
        )

    def interview(self, resume: Dict[str, Any], job_description: Dict[str, Any]) -> List[Any]:
        payload = self._post("interview", json={"resume": resume, "jobDescription": job_description})
        questions = payload.get("questions")
        if not isinstance(questions, list):
            raise self._malformed("interview", "questions is not a list")
        return questions


def get_ml_client() -> MLServiceClient:
    """FastAPI dependency; overridden in tests."""
    return MLServiceClient.from_settings()
