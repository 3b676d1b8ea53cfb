import asyncio

import httpx
import pytest

from campus_portal.client.errors import NetworkError, ValidationError
from campus_portal.client.vacancies import NBSP, Salary, VacancySearchClient, format_salary, shape_query
from tests.conftest import RecordingHandler, json_response

HH_PAGE = {
    "found": 42,
    "page": 1,
    "pages": 3,
    "items": [
        {
            "id": 101,
            "name": "Junior Python Developer",
            "employer": {"name": "Kazakhtelecom"},
            "area": {"name": "Кызылорда"},
            "published_at": "2024-05-01T10:00:00+0500",
            "alternate_url": "https://hh.kz/vacancy/101",
            "url": "https://api.hh.ru/vacancies/101",
            "salary": {"from": 250000, "to": None, "currency": "KZT", "gross": True},
        },
        {"id": "102", "name": "Lawyer", "url": "https://api.hh.ru/vacancies/102", "salary": None},
    ],
}


@pytest.fixture
async def hh():
    handler = RecordingHandler({"GET /api/hh/vacancies": json_response(200, HH_PAGE)})
    client = VacancySearchClient(
        base_url="http://portal.test/api/hh", default_area="40", transport=httpx.MockTransport(handler)
    )
    client.handler = handler
    yield client
    await client.aclose()


class TestSearch:

    async def test_normalizes_items_and_page(self, hh):
        result = await hh.search("python", page=1, per_page=10)
        assert (result.found, result.page, result.pages, result.per_page) == (42, 1, 3, 10)

        first, second = result.items
        assert first.id == "101"
        assert first.employer_name == "Kazakhtelecom"
        assert first.area_name == "Кызылорда"
        assert first.url == "https://hh.kz/vacancy/101"
        assert first.salary.from_ == 250000
        assert first.salary.currency == "KZT"
        assert second.url == "https://api.hh.ru/vacancies/102"
        assert second.salary is None
        assert second.employer_name is None

    async def test_query_uses_default_area(self, hh):
        await hh.search("python")
        params = dict(hh.handler.requests[0].url.params)
        assert params == {"text": "python", "area": "40", "page": "0", "per_page": "20"}

    async def test_missing_page_metadata_is_derived(self, hh):
        hh.handler.routes["GET /api/hh/vacancies"] = json_response(200, {"items": HH_PAGE["items"]})
        result = await hh.search("python", page=2)
        assert (result.found, result.page, result.pages) == (2, 2, 0)

    async def test_http_error_is_raised(self, hh):
        hh.handler.routes["GET /api/hh/vacancies"] = json_response(400, {"error": "bad area"})
        with pytest.raises(ValidationError):
            await hh.search("python", area="x")

    async def test_transport_failure_is_network_error(self, hh):
        hh.handler.routes["GET /api/hh/vacancies"] = httpx.ConnectError("refused")
        with pytest.raises(NetworkError):
            await hh.search("python")


class TestCancellation:

    async def test_already_cancelled_search_sends_nothing(self, hh):
        event = asyncio.Event()
        event.set()
        with pytest.raises(asyncio.CancelledError):
            await hh.search("python", cancel_event=event)
        assert hh.handler.requests == []

    async def test_cancel_during_request(self):
        started = asyncio.Event()

        async def slow(request):
            started.set()
            await asyncio.sleep(10)
            return json_response(200, HH_PAGE)

        client = VacancySearchClient(base_url="http://portal.test/api/hh", transport=httpx.MockTransport(slow))
        cancel = asyncio.Event()

        async def cancel_when_started():
            await started.wait()
            cancel.set()

        canceller = asyncio.create_task(cancel_when_started())
        with pytest.raises(asyncio.CancelledError):
            await asyncio.wait_for(client.search("python", cancel_event=cancel), timeout=5)
        await canceller
        await client.aclose()

    async def test_cancelling_caller_task_stops_request(self):
        started = asyncio.Event()
        stopped = asyncio.Event()

        async def slow(request):
            started.set()
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                stopped.set()
                raise
            return json_response(200, HH_PAGE)

        client = VacancySearchClient(base_url="http://portal.test/api/hh", transport=httpx.MockTransport(slow))
        search = asyncio.create_task(client.search("python", cancel_event=asyncio.Event()))
        await asyncio.wait_for(started.wait(), timeout=5)
        search.cancel()
        with pytest.raises(asyncio.CancelledError):
            await search
        assert stopped.is_set()
        await client.aclose()

    async def test_uncancelled_event_returns_result(self, hh):
        result = await hh.search("python", cancel_event=asyncio.Event())
        assert len(result.items) == 2


class TestFormatSalary:

    def test_range(self):
        assert format_salary(Salary(from_=150000, to=250000, currency="KZT")) == f"150{NBSP}000–250{NBSP}000 KZT"

    def test_lower_bound_only(self):
        assert format_salary(Salary(from_=150000, currency="KZT")) == f"от 150{NBSP}000 KZT"

    def test_upper_bound_only_with_custom_labels(self):
        salary = Salary(to=900, currency="USD")
        assert format_salary(salary, from_label="from", to_label="up to", thousands_separator=",") == "up to 900 USD"

    def test_missing_currency_is_trimmed(self):
        assert format_salary(Salary(from_=1000)) == f"от 1{NBSP}000"

    def test_plain_space_grouping(self):
        salary = Salary(from_=1500000, to=2000000.5, currency="KZT")
        assert format_salary(salary, thousands_separator=" ") == "1 500 000–2 000 000.5 KZT"

    def test_nothing_to_format(self):
        assert format_salary(None) is None
        assert format_salary(Salary(currency="KZT")) is None

    def test_parses_wire_key(self):
        assert Salary.model_validate({"from": 5, "to": 7}).from_ == 5


def test_shape_query_drops_empty_values():
    assert shape_query({"text": "", "area": None, "page": 0}) == {"page": 0}
