"""Tests for DOI merge and record cleaning."""

from litsearch.records import CategoryEntry
from litsearch.store.deduplication import clean, merge_by_doi

from tests.fakes import make_record


def test_merge_keeps_first_title_and_fills_blank_abstract():
    a = make_record(doi="10.1/x", title="T1", abstract="", authors=["Alice"], portal="PubMed")
    b = make_record(doi="10.1/X", title="T2", abstract="A", authors=["alice", "Bob"], portal="Scopus")

    merged = merge_by_doi([a, b])

    assert len(merged) == 1
    rec = merged[0]
    assert rec.title == "T1"
    assert rec.abstract == "A"
    assert rec.authors == ["Alice", "Bob"]
    assert rec.portal_name == "PubMed"


def test_merge_does_not_mutate_inputs():
    a = make_record(doi="10.1/x", abstract="", authors=["Alice"])
    b = make_record(doi="10.1/x", abstract="A", authors=["Bob"])
    merge_by_doi([a, b])
    assert a.abstract == ""
    assert a.authors == ["Alice"]


def test_merge_is_idempotent():
    records = [
        make_record(doi="10.1/a", title="A"),
        make_record(doi="10.1/A", title="", abstract="other", authors=["Zed"]),
        make_record(doi="10.1/b", title="B"),
    ]
    once = merge_by_doi(records)
    twice = merge_by_doi(once)
    assert [r.to_dict() for r in once] == [r.to_dict() for r in twice]


def test_merge_drops_blank_doi_and_adopts_portal_when_missing():
    a = make_record(doi="10.1/a", portal=None)
    b = make_record(doi="10.1/a", portal="ArXiv")
    c = make_record(doi="  ", title="no doi")
    merged = merge_by_doi([a, b, c])
    assert len(merged) == 1
    assert merged[0].portal_name == "ArXiv"


def test_merge_unions_categories_by_exact_pair():
    a = make_record(doi="10.1/a", categories=[("Biology", "Q1")])
    b = make_record(doi="10.1/a", categories=[("Biology", "Q1"), ("Biology", "Q2")])
    merged = merge_by_doi([a, b])
    assert merged[0].categories == [CategoryEntry("Biology", "Q1"), CategoryEntry("Biology", "Q2")]


def test_clean_removes_records_without_authors_or_abstract():
    keep = make_record(doi="10.1/keep")
    no_authors = make_record(doi="10.1/none", authors=[])
    blank_author = make_record(doi="10.1/blank", authors=[" "])
    no_abstract = make_record(doi="10.1/abs", abstract="  ")

    cleaned = clean([keep, no_authors, blank_author, no_abstract])

    assert [r.doi for r in cleaned] == ["10.1/keep"]
