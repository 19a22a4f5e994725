"""Tests for the journal-category index and attachment."""

from litsearch.enrich import attach_categories, build_journal_index, parse_category_token
from litsearch.records import CategoryEntry

from tests.fakes import make_record


def test_parse_category_token():
    assert parse_category_token("Oncology (Q1)") == CategoryEntry("Oncology", "Q1")
    assert parse_category_token("  Cell Biology(Q4) ") == CategoryEntry("Cell Biology", "Q4")
    assert parse_category_token("Oncology (Q5)") is None
    assert parse_category_token("Oncology") is None
    assert parse_category_token("") is None


def test_build_index_from_folder(tmp_path):
    (tmp_path / "scimagojr 2022.csv").write_text(
        "Rank;Title;Issn;Categories\n"
        '1;Nature;"00280836, 14764687";"Multidisciplinary (Q1)"\n'
        '2;Cell;"00928674";"Biology (Q1); Biology (Q2); junk"\n',
        encoding="utf-8",
    )
    (tmp_path / "scimagojr 2023.csv").write_text(
        "rank;title;ISSN;CATEGORIES\n"
        '2;Cell;"00928674";"Biology (Q1); Genetics (Q1)"\n',
        encoding="utf-8",
    )

    index = build_journal_index([tmp_path])

    assert set(index) == {"0028-0836", "1476-4687", "0092-8674"}
    assert index["0092-8674"].categories == [
        CategoryEntry("Biology", "Q1"),
        CategoryEntry("Biology", "Q2"),
        CategoryEntry("Genetics", "Q1"),
    ]


def test_missing_category_path_is_skipped(tmp_path):
    assert build_journal_index([tmp_path / "missing.csv"]) == {}


def test_attach_keeps_first_quartile_per_name(tmp_path):
    path = tmp_path / "cats.csv"
    path.write_text('Issn;Categories\n"12345678";"Biology (Q1); Biology (Q2)"\n', encoding="utf-8")
    index = build_journal_index([path])

    rec = make_record(doi="10.1/a", issn="1234-5678")
    other = make_record(doi="10.1/b", issn="")
    attach_categories([rec, other], index)

    assert rec.categories == [CategoryEntry("Biology", "Q1")]
    assert other.categories == []
