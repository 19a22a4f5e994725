"""Tests for ISSN, date and name normalization."""

from litsearch.utils.normalize import (
    AuthorCache,
    clean_text,
    date_parts,
    normalize_issn,
    normalize_title,
    parse_date_parts,
    parse_month,
)


def test_normalize_issn_canonical_forms():
    assert normalize_issn("0028-0836") == "0028-0836"
    assert normalize_issn("00280836") == "0028-0836"
    assert normalize_issn(" abc ") == "ABC"
    assert normalize_issn("") == ""
    assert normalize_issn(None) == ""


def test_normalize_issn_x_check_digit_keeps_raw_spelling():
    assert normalize_issn("1234-567x") == "1234-567X"


def test_date_parts_range_checks():
    assert date_parts(2020, 13, 40) == (2020, None, None)
    assert date_parts(0, 5, 3) == (None, 5, 3)
    assert date_parts("2019", "Mar", "07") == (2019, 3, 7)


def test_parse_date_parts_partial_dates():
    assert parse_date_parts("2021") == (2021, None, None)
    assert parse_date_parts("2021-05") == (2021, 5, None)
    assert parse_date_parts("2021-05-03T10:00:00Z") == (2021, 5, 3)
    assert parse_date_parts("not a date") == (None, None, None)
    assert parse_date_parts(None) == (None, None, None)


def test_parse_month_names_and_numbers():
    assert parse_month("September") == 9
    assert parse_month("09") == 9
    assert parse_month("") is None
    assert parse_month("Foo") is None


def test_clean_text_and_title_key():
    assert clean_text("<p>Deep   learning\n for <i>cells</i></p>") == "Deep learning for cells"
    assert normalize_title("  Deep Learning For Cells ") == "deeplearningforcells"


def test_author_cache_dedupes_case_insensitively():
    cache = AuthorCache()
    assert cache.collect(["Ada Lovelace", "ada lovelace", " ", "Alan Turing"]) == ["Ada Lovelace", "Alan Turing"]
    # second record reuses the first spelling
    assert cache.collect(["ADA LOVELACE"]) == ["Ada Lovelace"]
    assert len(cache) == 2
