"""Tests for adapter paging, filtering, cancellation and error degradation."""

import threading

import pytest
import requests

from litsearch.sources import ArxivAdapter, PubMedAdapter, ScopusAdapter, ZenodoAdapter

from tests.fakes import FakePdfFetcher, FakeResponse, FakeSession, no_sleep
from tests.unit.test_mappers import ARXIV_FEED, PUBMED_XML


def _adapter(cls, resolver, pdf_fetcher, responses=None, route=None, **kwargs):
    http = FakeSession(responses=responses, route=route)
    return cls(resolver, http=http, pdf_fetcher=pdf_fetcher, sleep=no_sleep, **kwargs), http


def test_missing_credentials_raise(resolver):
    with pytest.raises(ValueError):
        PubMedAdapter(resolver)
    with pytest.raises(ValueError):
        ZenodoAdapter(resolver, api_key="")
    with pytest.raises(ValueError):
        ScopusAdapter(resolver, api_key="k")


def test_pubmed_search_and_fetch(resolver, pdf_fetcher):
    def route(url, params):
        if url.endswith("esearch.fcgi"):
            return FakeResponse({"esearchresult": {"count": "2", "idlist": ["1", "2"]}})
        return FakeResponse(text=PUBMED_XML)

    adapter, http = _adapter(PubMedAdapter, resolver, pdf_fetcher, route=route, api_key="key")
    results = adapter.search("cells", 2018, False, 10)

    assert [r.doi for r in results] == ["10.1038/xyz", "10.5/second"]
    assert results[0].portal_name == "PubMed"
    assert results[0].issn == "1476-4687"
    term = http.calls[0]["params"]["term"]
    assert term == "cells AND eng[Language] AND 2018:3000[dp]"
    assert http.calls[0]["params"]["api_key"] == "key"
    assert pdf_fetcher.landing_pages[0] == "https://www.ncbi.nlm.nih.gov/pmc/articles/PMC999/"


def test_pubmed_skips_articles_before_start_year(resolver, pdf_fetcher):
    def route(url, params):
        if url.endswith("esearch.fcgi"):
            return FakeResponse({"esearchresult": {"count": "2", "idlist": ["1", "2"]}})
        return FakeResponse(text=PUBMED_XML)

    adapter, _ = _adapter(PubMedAdapter, resolver, pdf_fetcher, route=route, api_key="key")
    results = adapter.search("cells", 2020, False, 10)
    assert [r.doi for r in results] == ["10.1038/xyz"]


def test_arxiv_network_error_returns_empty(resolver, pdf_fetcher):
    adapter, _ = _adapter(
        ArxivAdapter, resolver, pdf_fetcher, responses=[requests.ConnectionError("down")]
    )
    assert adapter.search("ml", None, False, 10) == []


def test_arxiv_maps_feed(resolver, pdf_fetcher):
    adapter, http = _adapter(ArxivAdapter, resolver, pdf_fetcher, responses=[FakeResponse(text=ARXIV_FEED)])
    results = adapter.search("ml", 2020, False, 10)

    assert len(results) == 1
    assert results[0].doi == "2101.01234v2"
    assert results[0].pdf_url == "http://arxiv.org/pdf/2101.01234v2"
    assert http.calls[0]["params"]["sortBy"] == "submittedDate"
    # short page ends paging
    assert len(http.calls) == 1


def test_arxiv_stops_when_whole_page_is_too_old(resolver, pdf_fetcher):
    adapter, http = _adapter(ArxivAdapter, resolver, pdf_fetcher, responses=[FakeResponse(text=ARXIV_FEED)])
    assert adapter.search("ml", 2022, False, 10) == []


def _zenodo_hit(i, **overrides):
    metadata = {
        "title": f"Record {i}",
        "description": "Real description",
        "publication_date": "2022-01-01",
        "language": "eng",
        "creators": [{"name": f"Author {i}"}],
    }
    metadata.update(overrides)
    return {"doi": f"10.5281/zenodo.{i}", "metadata": metadata, "files": []}


def test_zenodo_filters_and_pages(resolver, pdf_fetcher):
    page1 = [_zenodo_hit(i) for i in range(9)] + [_zenodo_hit(9, language="fre")]
    page2 = [
        _zenodo_hit(10, description="n/a"),
        _zenodo_hit(11, publication_date="2001-01-01"),
        _zenodo_hit(12),
    ]
    adapter, http = _adapter(
        ZenodoAdapter,
        resolver,
        pdf_fetcher,
        responses=[FakeResponse({"hits": {"hits": page1}}), FakeResponse({"hits": {"hits": page2}})],
        api_key="secret",
    )
    results = adapter.search("data", 2020, False, 10)

    assert [r.doi for r in results] == [f"10.5281/zenodo.{i}" for i in list(range(9)) + [12]]
    assert [c["params"]["page"] for c in http.calls] == [1, 2]
    assert http.calls[0]["params"]["size"] == 10
    assert adapter.default_headers()["Authorization"] == "Bearer secret"


def test_zenodo_batch_size_caps_results(resolver, pdf_fetcher):
    hits = [_zenodo_hit(i) for i in range(10)]
    adapter, http = _adapter(
        ZenodoAdapter, resolver, pdf_fetcher, responses=[FakeResponse({"hits": {"hits": hits}})], api_key="k"
    )
    results = adapter.search("data", None, False, 3)
    assert len(results) == 3
    assert len(http.calls) == 1


def test_cancelled_adapter_returns_partial(resolver, pdf_fetcher):
    cancel = threading.Event()
    cancel.set()
    adapter, http = _adapter(ZenodoAdapter, resolver, pdf_fetcher, responses=[], api_key="k")
    assert adapter.search("data", None, False, 10, cancel=cancel) == []
    assert http.calls == []


def test_scopus_search_with_details(resolver, pdf_fetcher):
    def route(url, params):
        if "search/scopus" in url:
            return FakeResponse({
                "search-results": {
                    "opensearch:totalResults": "2",
                    "entry": [
                        {"dc:identifier": "SCOPUS_ID:1", "prism:doi": "10.1/s1", "dc:title": "S1", "prism:issn": "12345678"},
                        {"dc:identifier": "SCOPUS_ID:2", "prism:doi": "10.1/s2", "dc:title": "S2"},
                    ],
                }
            })
        if url.endswith("/1"):
            return FakeResponse({
                "abstracts-retrieval-response": {
                    "coredata": {"dc:description": "Abs", "prism:coverDate": "2021-06-01"},
                    "authors": {"author": [{"preferred-name": {"ce:indexed-name": "Roe R."}}]},
                }
            })
        return FakeResponse(text="", status_code=500)

    adapter, http = _adapter(ScopusAdapter, resolver, pdf_fetcher, route=route, api_key="k", inst_token="t")
    results = adapter.search("graphene", 2015, False, 10)

    assert [r.doi for r in results] == ["10.1/s1", "10.1/s2"]
    assert results[0].abstract == "Abs"
    assert results[0].authors == ["Roe R."]
    assert results[0].issn == "1234-5678"
    # failed detail call keeps the entry without abstract
    assert results[1].abstract == ""
    assert http.calls[0]["params"]["query"] == "graphene AND LANGUAGE(English) AND PUBYEAR > 2014"
    assert pdf_fetcher.landing_pages == ["https://doi.org/10.1/s1", "https://doi.org/10.1/s2"]
    headers = adapter.default_headers()
    assert headers["X-ELS-APIKey"] == "k" and headers["X-ELS-Insttoken"] == "t"


def test_scopus_empty_result_marker(resolver, pdf_fetcher):
    adapter, _ = _adapter(
        ScopusAdapter,
        resolver,
        pdf_fetcher,
        responses=[FakeResponse({"search-results": {"opensearch:totalResults": "0", "entry": [{"error": "Result set was empty"}]}})],
        api_key="k",
        inst_token="t",
    )
    assert adapter.search("nothing", None, False, 10) == []


def test_scopus_start_year_is_inclusive(resolver):
    adapter = ScopusAdapter(resolver, http=FakeSession(), sleep=no_sleep, api_key="k", inst_token="t")
    assert adapter.build_query("cells", 2020) == "cells AND LANGUAGE(English) AND PUBYEAR > 2019"
    assert adapter.build_query("cells", None) == "cells AND LANGUAGE(English)"


def test_malformed_record_is_skipped_rest_kept(resolver, pdf_fetcher):
    hits = [_zenodo_hit(1), {"doi": "10.5281/zenodo.bad", "metadata": "not a mapping"}, _zenodo_hit(2)]
    adapter, _ = _adapter(
        ZenodoAdapter, resolver, pdf_fetcher, responses=[FakeResponse({"hits": {"hits": hits}})], api_key="k"
    )
    results = adapter.search("data", None, False, 10)
    assert [r.doi for r in results] == ["10.5281/zenodo.1", "10.5281/zenodo.2"]


def test_network_error_on_later_page_keeps_earlier_pages(resolver, pdf_fetcher):
    page1 = [_zenodo_hit(i) for i in range(100)]
    adapter, http = _adapter(
        ZenodoAdapter,
        resolver,
        pdf_fetcher,
        responses=[FakeResponse({"hits": {"hits": page1}}), requests.ConnectionError("reset")],
        api_key="k",
    )
    results = adapter.search("data", None, False, 150)

    assert len(results) == 100
    assert [c["params"]["page"] for c in http.calls] == [1, 2]


class CancellingPdfFetcher(FakePdfFetcher):
    """Sets the cancel event once `after` records have been looked at."""

    def __init__(self, cancel, after):
        super().__init__()
        self.cancel = cancel
        self.after = after
        self.seen = 0

    def fetch(self, pdf_url, download):
        self.seen += 1
        if self.seen >= self.after:
            self.cancel.set()
        return super().fetch(pdf_url, download)


def test_cancel_mid_page_returns_partial_results(resolver):
    cancel = threading.Event()
    hits = [_zenodo_hit(i) for i in range(100)]
    adapter, http = _adapter(
        ZenodoAdapter,
        resolver,
        CancellingPdfFetcher(cancel, after=3),
        responses=[FakeResponse({"hits": {"hits": hits}}), FakeResponse({"hits": {"hits": hits}})],
        api_key="k",
    )
    results = adapter.search("data", None, False, 200, cancel=cancel)

    assert [r.doi for r in results] == ["10.5281/zenodo.0", "10.5281/zenodo.1", "10.5281/zenodo.2"]
    # no further page requested after cancellation
    assert len(http.calls) == 1
