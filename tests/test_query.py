import pytest

from security_search_mcp.core.errors import InvalidInput, NotFound
from security_search_mcp.search.filters import (
    DateGate,
    clamp_limit,
    normalize_filters,
    sort_newest_first,
)
from security_search_mcp.search.models import Document

from conftest import ARTICLES

SOPHOS = ARTICLES[0]["s3_path_html"]
LOCKBIT = ARTICLES[1]["s3_path_html"]
SOLARWINDS = ARTICLES[2]["s3_path_html"]


def ids(results):
    return [r["article_id"] for r in results]


# ---------------------------------------------------------------------
# Structured filters
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_no_filters_returns_everything_newest_first(engine):
    results = await engine.search()
    assert ids(results) == [SOPHOS, LOCKBIT, SOLARWINDS]


@pytest.mark.asyncio
async def test_exact_field_filter(engine):
    results = await engine.search(filters={"vendor": ["Microsoft"]})
    assert ids(results) == [LOCKBIT]


@pytest.mark.asyncio
async def test_exact_match_is_case_sensitive(engine):
    assert await engine.search(filters={"vendor": ["microsoft"]}) == []


@pytest.mark.asyncio
async def test_candidates_are_or_fields_are_and(engine):
    either = await engine.search(filters={"severity_level": ["High", "Critical"]})
    assert len(either) == 3

    both = await engine.search(
        filters={"severity_level": ["Critical"], "cloud_platforms": ["azure"]}
    )
    assert ids(both) == [SOLARWINDS]


@pytest.mark.asyncio
async def test_sequence_field_matches_any_element(engine):
    results = await engine.search(filters={"threat_types": ["Ransomware"]})
    assert ids(results) == [LOCKBIT, SOLARWINDS]


@pytest.mark.asyncio
async def test_cloud_platforms_case_insensitive_membership(engine):
    results = await engine.search(filters={"cloud_platforms": ["aws"]})
    assert ids(results) == [SOLARWINDS]

    # Membership, not substring.
    assert await engine.search(filters={"cloud_platforms": ["Azu"]}) == []


@pytest.mark.asyncio
async def test_products_substring_match(engine):
    results = await engine.search(filters={"products_impacted": ["server"]})
    assert ids(results) == [LOCKBIT]

    results = await engine.search(filters={"products_impacted": ["orion"]})
    assert ids(results) == [SOLARWINDS]


@pytest.mark.asyncio
async def test_free_text_field_substring_match(engine):
    results = await engine.search(filters={"summary": ["lockbit"]})
    assert ids(results) == [LOCKBIT]

    results = await engine.search(filters={"title": ["Orion update"]})
    assert ids(results) == [SOLARWINDS]


@pytest.mark.asyncio
async def test_unknown_field_yields_empty_result(engine):
    assert await engine.search(filters={"no_such_field": ["x"]}) == []


@pytest.mark.asyncio
async def test_empty_candidate_list_is_ignored(engine):
    results = await engine.search(filters={"vendor": [], "severity_level": ["High"]})
    assert ids(results) == [LOCKBIT]


@pytest.mark.asyncio
async def test_filtered_results_are_subset_of_unfiltered(engine):
    everything = set(ids(await engine.search()))
    for filters in (
        {"severity_level": ["Critical"]},
        {"regions": ["NorthAmerica"]},
        {"cloud_platforms": ["Azure"], "sectors": ["Healthcare"]},
    ):
        assert set(ids(await engine.search(filters=filters))) <= everything


# ---------------------------------------------------------------------
# Dates and limits
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_since_date_is_inclusive(engine):
    results = await engine.search(since_date="2024-11-01")
    assert ids(results) == [SOPHOS, LOCKBIT]


@pytest.mark.asyncio
async def test_limit_keeps_newest(engine):
    results = await engine.search(limit=2)
    assert ids(results) == [SOPHOS, LOCKBIT]


@pytest.mark.asyncio
async def test_limit_is_clamped(make_engine):
    engine = make_engine(ARTICLES, max_limit=2)
    assert len(await engine.search(limit=100)) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("since_date", ["2024/11/01", "Nov 1 2024", "2024-1-01"])
async def test_malformed_since_date(engine, since_date):
    with pytest.raises(InvalidInput):
        await engine.search(since_date=since_date)


@pytest.mark.asyncio
async def test_corrupt_dates_never_pass_date_gate(make_engine):
    articles = [
        {"s3_path_html": "placeholder.html", "article_date": "YYYYMMDD"},
        {"s3_path_html": "bengali.html", "article_date": "২০২৪-১১-০১"},
        {"s3_path_html": "undated.html"},
        {"s3_path_html": "ok.html", "article_date": "2024-11-02 08:15:00"},
    ]
    engine = make_engine(articles)

    gated = await engine.search(since_date="2000-01-01")
    assert ids(gated) == ["ok.html"]

    # Without a cutoff they are still returned, sorted after dated articles.
    everything = await engine.search()
    assert ids(everything)[0] == "ok.html"
    assert len(everything) == 4


@pytest.mark.asyncio
async def test_original_date_takes_precedence(make_engine):
    engine = make_engine([
        {"s3_path_html": "a.html", "date_original": "2023-01-01", "article_date": "2024-06-01"},
        {"s3_path_html": "b.html", "article_date": "2024-01-01"},
    ])
    assert ids(await engine.search()) == ["b.html", "a.html"]
    assert ids(await engine.search(since_date="2023-06-01")) == ["b.html"]


def test_date_gate_placeholders_are_configurable():
    gate = DateGate(placeholders=("YYYYMMDD", "unknown"))
    assert gate.is_corrupt("unknown")
    assert not gate.is_corrupt("2024-01-01")
    assert DateGate(reject_non_ascii=False).date_of(Document({"article_date": "২০২৪"})) == "২০২৪"


def test_sort_newest_first_is_stable_for_ties():
    docs = [
        Document({"title": "first", "article_date": "2024-01-01"}),
        Document({"title": "second", "article_date": "2024-01-01"}),
    ]
    assert [d["title"] for d in sort_newest_first(docs)] == ["first", "second"]


def test_clamp_limit():
    assert clamp_limit(None, 30, 1000) == 30
    assert clamp_limit(5000, 30, 1000) == 1000
    assert clamp_limit(-3, 30, 1000) == 0


def test_normalize_filters():
    assert normalize_filters(None) == {}
    assert normalize_filters({"a": "x", "b": [], "c": None, "d": [True, 2.0]}) == {
        "a": ["x"],
        "d": ["true", "2"],
    }
    with pytest.raises(InvalidInput):
        normalize_filters(["not", "a", "mapping"])


# ---------------------------------------------------------------------
# Output shape
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_summary_projection(engine):
    first = (await engine.search(limit=1))[0]
    assert first == {
        "article_id": SOPHOS,
        "title": ARTICLES[0]["title"],
        "article_date": "2024-12-11",
        "severity_level": "Critical",
        "summary": ARTICLES[0]["summary"],
        "url": ARTICLES[0]["url"],
        "original_source_url": None,
    }


@pytest.mark.asyncio
async def test_summary_placeholders(make_engine):
    engine = make_engine([{"s3_path_html": "bare.html", "description": "d" * 300}])
    summary = (await engine.search())[0]

    assert summary["title"] == "No title"
    assert summary["article_date"] == "Unknown date"
    assert summary["severity_level"] == "Unknown"
    assert summary["url"] == "No URL"
    assert summary["summary"] == "d" * 200


@pytest.mark.asyncio
async def test_full_records_when_summary_mode_off(engine):
    results = await engine.search(filters={"vendor": ["Microsoft"]}, summary_mode=False)
    assert len(results) == 1
    assert results[0].to_dict() == ARTICLES[1]


# ---------------------------------------------------------------------
# Detail lookup
# ---------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["s3_path_html", "url", "title"])
async def test_get_details_by_identifier_field(engine, field):
    doc = await engine.get_details(ARTICLES[2][field])
    assert doc["vendor"] == "SolarWinds"


@pytest.mark.asyncio
async def test_get_details_round_trips_query_ids(engine):
    for summary in await engine.search():
        doc = await engine.get_details(summary["article_id"])
        assert doc.identifier == summary["article_id"]


@pytest.mark.asyncio
async def test_get_details_substring_fallback(engine):
    doc = await engine.get_details("2024_12_11_sichuan_silence")
    assert doc["vendor"] == "Sophos"


@pytest.mark.asyncio
async def test_get_details_prefers_exact_match(make_engine):
    engine = make_engine([
        {"s3_path_html": "reports/a.html.bak", "title": "backup"},
        {"s3_path_html": "a.html", "title": "real"},
    ])
    doc = await engine.get_details("a.html")
    assert doc["title"] == "real"


@pytest.mark.asyncio
@pytest.mark.parametrize("identifier", ["missing.html", ""])
async def test_get_details_not_found(engine, identifier):
    with pytest.raises(NotFound):
        await engine.get_details(identifier)


@pytest.mark.asyncio
async def test_get_details_round_trips_each_fallback(make_engine):
    articles = [
        {"s3_path_html": "locator.html", "url": "https://a", "title": "A"},
        {"s3_path_html": "", "url": "https://b", "title": "B"},
        {"title": "C only"},
    ]
    engine = make_engine(articles)

    summaries = await engine.search()
    assert sorted(s["article_id"] for s in summaries) == ["C only", "https://b", "locator.html"]
    for summary in summaries:
        doc = await engine.get_details(summary["article_id"])
        assert doc.identifier == summary["article_id"]
