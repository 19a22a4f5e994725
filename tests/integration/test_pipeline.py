"""End-to-end search runs against in-memory storage with stubbed sources."""

from sqlalchemy import func, select

from litsearch.pipeline import RetryingOrchestrator, export_search, forget_search, run_search
from litsearch.records import CategoryEntry
from litsearch.sources.base import SourceAdapter
from litsearch.store.models import Portal, Publication, Result
from litsearch.store.portals import PortalResolver

from tests.fakes import FakePdfFetcher, no_sleep


class StubAdapter(SourceAdapter):
    """Emits scripted field dicts through the regular record construction path."""

    def __init__(self, name, items, portal_resolver):
        self.source_name = name
        self.items = items
        self.batch_sizes = []
        super().__init__(portal_resolver, http=object(), pdf_fetcher=FakePdfFetcher(), sleep=no_sleep)

    def _collect(self, ctx):
        self.batch_sizes.append(ctx.batch_size)
        for fields in self.items:
            if ctx.full:
                break
            ctx.results.append(self.build_record(ctx, fields, self.pdf_fetcher.fetch(None, False)))


def _adapters(session_factory):
    resolver = PortalResolver(session_factory)
    pubmed = StubAdapter("PubMed", [{"doi": "10.1/x", "title": "T1", "abstract": "", "authors": ["Alice"]}], resolver)
    scopus = StubAdapter(
        "Scopus",
        [{"doi": "10.1/X", "title": "T2", "abstract": "A", "authors": ["alice", "Bob"], "issn": "12345678", "year": 2021}],
        resolver,
    )
    arxiv = StubAdapter("ArXiv", [{"doi": "2101.00001", "title": "No authors", "abstract": "B", "authors": []}], resolver)
    return [pubmed, scopus, arxiv]


def _orchestrator(adapters):
    return RetryingOrchestrator(adapters, sleep=no_sleep)


def test_search_merges_enriches_and_stores(session_factory, tmp_path):
    cats = tmp_path / "cats.csv"
    cats.write_text('Issn;Categories\n"12345678";"Biology (Q1); Biology (Q2)"\n', encoding="utf-8")
    adapters = _adapters(session_factory)

    outcome = run_search(
        session_factory, adapters, "cells", 2020, 5,
        category_paths=[cats], orchestrator=_orchestrator(adapters),
    )

    assert outcome.search_id is not None
    assert all(a.batch_sizes == [10] for a in adapters)
    assert len(outcome.publications) == 1
    rec = outcome.publications[0]
    assert rec.title == "T1"
    assert rec.abstract == "A"
    assert rec.authors == ["Alice", "Bob"]
    assert rec.issn == "1234-5678"
    assert rec.categories == [CategoryEntry("Biology", "Q1")]
    assert rec.portal_name == "PubMed"
    assert "All attempts failed for ArXiv" not in outcome.logs
    assert "PubMed returned 1 results" in outcome.logs
    assert not outcome.report.failed

    exported = export_search(session_factory(), outcome.search_id)
    assert [e["doi"] for e in exported] == ["10.1/x"]
    assert exported[0]["categories"] == [{"category_name": "Biology", "quartile": "Q1"}]

    session = session_factory()
    assert session.scalar(select(func.count()).select_from(Portal)) == 5
    session.close()


def test_repeat_search_reuses_publication_then_forget(session_factory):
    adapters = _adapters(session_factory)
    first = run_search(session_factory, adapters, "cells", None, 10, orchestrator=_orchestrator(adapters))
    second = run_search(session_factory, adapters, "cells", None, 10, orchestrator=_orchestrator(adapters))

    assert second.report.updated == 1
    assert first.publications[0].id == second.publications[0].id

    session = session_factory()
    assert session.scalar(select(func.count()).select_from(Publication)) == 1
    assert session.scalar(select(func.count()).select_from(Result)) == 2
    session.close()

    outcome = forget_search(session_factory, first.search_id)
    assert outcome.removed_publications == 0
    outcome = forget_search(session_factory, second.search_id)
    assert outcome.removed_publications == 1


def test_unexpected_error_is_reported_in_logs(session_factory, monkeypatch):
    def explode(records):
        raise RuntimeError("kaboom")

    monkeypatch.setattr("litsearch.pipeline.run.clean", explode)
    adapters = _adapters(session_factory)
    outcome = run_search(session_factory, adapters, "cells", None, 10, orchestrator=_orchestrator(adapters))

    assert outcome.search_id is not None
    # records fetched before the failure are still handed back
    assert sorted(r.doi for r in outcome.publications) == ["10.1/X", "10.1/x", "2101.00001"]
    assert "Unexpected error during search: kaboom" in outcome.logs


def test_unreadable_category_file_still_stores_records(session_factory, tmp_path):
    cats = tmp_path / "cats.csv"
    cats.write_bytes(b'Issn;Categories\n"12345678";"Biolog\xe9 (Q1)"\n')
    adapters = _adapters(session_factory)

    outcome = run_search(
        session_factory, adapters, "cells", None, 10,
        category_paths=[cats], orchestrator=_orchestrator(adapters),
    )

    assert [r.doi for r in outcome.publications] == ["10.1/x"]
    assert outcome.publications[0].id is not None
    assert outcome.publications[0].categories == []
    assert any(line.startswith("Error during category enrichment:") for line in outcome.logs)
    assert not any(line.startswith("Unexpected error during search") for line in outcome.logs)

    session = session_factory()
    assert session.scalar(select(func.count()).select_from(Publication)) == 1
    session.close()
