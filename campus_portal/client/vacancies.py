"""
Job-search client.

Talks to the portal's ``/api/hh/vacancies`` proxy (or any endpoint with the
same contract), shapes the query and normalizes the listings. A search can be
aborted through a caller-supplied `asyncio.Event`: once the event is set the
in-flight request is cancelled and `asyncio.CancelledError` is raised, so the
caller never receives a result.
"""

import asyncio
import logging
from typing import Optional

import httpx
from pydantic import Field

from campus_portal.api.models import WireModel
from campus_portal.client.errors import NetworkError, error_for_status
from campus_portal.database.config.config import settings

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 20


class Salary(WireModel):
    from_: Optional[float] = Field(default=None, alias="from")
    to: Optional[float] = None
    currency: Optional[str] = None
    gross: Optional[bool] = None


class Vacancy(WireModel):
    id: str
    name: str
    employer_name: Optional[str] = None
    area_name: Optional[str] = None
    published_at: Optional[str] = None
    url: Optional[str] = None
    salary: Optional[Salary] = None


class VacancyPage(WireModel):
    items: list[Vacancy]
    found: int
    page: int
    pages: int
    per_page: int


def shape_query(params: dict) -> dict:
    """Drop empty parameters (None or empty string)."""
    return {key: value for key, value in params.items() if value is not None and value != ""}


def normalize_vacancy(raw: dict) -> Vacancy:
    salary = raw.get("salary")
    return Vacancy(
        id=str(raw.get("id")),
        name=str(raw.get("name") or ""),
        employer_name=(raw.get("employer") or {}).get("name"),
        area_name=(raw.get("area") or {}).get("name"),
        published_at=raw.get("published_at"),
        url=raw.get("alternate_url") or raw.get("url"),
        salary=Salary.model_validate(salary) if salary else None,
    )


def normalize_page(data: dict, page: int, per_page: int) -> VacancyPage:
    items = [normalize_vacancy(raw) for raw in data.get("items") or []]
    return VacancyPage(
        items=items,
        found=int(data.get("found", len(items)) or 0),
        page=int(data.get("page", page) or 0),
        pages=int(data.get("pages") or 0),
        per_page=per_page,
    )


NBSP = "\u00a0"


def _format_amount(value: float, thousands_separator: str) -> str:
    amount = int(value) if float(value).is_integer() else value
    return f"{amount:,}".replace(",", thousands_separator)


def format_salary(
    salary: Salary | None,
    from_label: str = "от",
    to_label: str = "до",
    range_separator: str = "–",
    thousands_separator: str = NBSP,
) -> str | None:
    """
    Human-readable salary range, e.g. ``"150 000–250 000 KZT"`` or ``"от 150 000 KZT"``.

    Thousands are grouped with a no-break space (U+00A0) by default, the way
    ``ru-RU`` number formatting does.

    Returns None when the salary or both bounds are missing.
    """
    if salary is None or (salary.from_ is None and salary.to is None):
        return None
    currency = salary.currency or ""
    if salary.from_ is not None and salary.to is not None:
        text = (
            f"{_format_amount(salary.from_, thousands_separator)}{range_separator}"
            f"{_format_amount(salary.to, thousands_separator)} {currency}"
        )
    elif salary.from_ is not None:
        text = f"{from_label} {_format_amount(salary.from_, thousands_separator)} {currency}"
    else:
        text = f"{to_label} {_format_amount(salary.to, thousands_separator)} {currency}"
    return text.strip()


class VacancySearchClient:
    """
    Parameters
    ----------
    base_url : str | None
        Proxy base (defaults to ``settings.HH_PROXY_BASE``); ``/vacancies`` is appended.
    default_area : str | None
        Area used when a search passes none (defaults to ``settings.HH_DEFAULT_AREA``).
    transport : httpx.AsyncBaseTransport | None
        Custom transport (tests).
    """

    def __init__(
        self,
        base_url: str | None = None,
        default_area: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.HH_PROXY_BASE).rstrip("/")
        self.default_area = default_area or settings.HH_DEFAULT_AREA
        self._client = httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.PORTAL_API_TIMEOUT,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _fetch(self, params: dict) -> dict:
        try:
            response = await self._client.get(f"{self.base_url}/vacancies", params=params)
        except httpx.HTTPError as e:
            raise NetworkError(f"vacancy search failed: {e}") from e
        if response.is_error:
            raise error_for_status(response.status_code, response.text[:200] or response.reason_phrase)
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError("vacancy search: invalid JSON response", status=response.status_code) from e

    async def search(
        self,
        text: str,
        area: str | None = None,
        page: int = 0,
        per_page: int = DEFAULT_PER_PAGE,
        cancel_event: asyncio.Event | None = None,
    ) -> VacancyPage:
        """
        Search vacancies.

        Parameters
        ----------
        text : str
            Free-text query.
        area : str | None
            Region id; `default_area` when omitted.
        page, per_page : int
            Zero-based page and page size.
        cancel_event : asyncio.Event | None
            Setting it aborts the search.

        Raises
        ------
        asyncio.CancelledError
            The search was aborted through `cancel_event`.
        PortalError
            Transport failure or non-2xx response.
        """
        params = shape_query({"text": text, "area": area or self.default_area, "page": page, "per_page": per_page})
        if cancel_event is None:
            return normalize_page(await self._fetch(params), page, per_page)
        if cancel_event.is_set():
            raise asyncio.CancelledError("vacancy search aborted")

        fetch_task = asyncio.ensure_future(self._fetch(params))
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait({fetch_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            # also reached when the caller's own task is cancelled mid-wait
            for task in (fetch_task, cancel_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(fetch_task, cancel_task, return_exceptions=True)
        if fetch_task not in done:
            logger.info("Vacancy search aborted: %r", text)
            raise asyncio.CancelledError("vacancy search aborted")
        return normalize_page(fetch_task.result(), page, per_page)
