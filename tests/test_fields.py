import pytest

from security_search_mcp.core.errors import FieldNotFound
from security_search_mcp.search.fields import (
    FIELD_CATEGORIES,
    build_field_index,
    describe_field,
    field_values,
    list_fields,
)
from security_search_mcp.search.models import Snapshot


# ---------------------------------------------------------------------
# Schema discovery
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_fields_structure(engine):
    result = await engine.list_fields()

    assert result["field_categories"] == FIELD_CATEGORIES
    assert result["dataset_info"] == {
        "total_articles": 3,
        "date_range": "2024-10-15 to 2024-12-11",
        "last_update": "2025-08-14T11:37:17.199014Z",
    }
    assert result["total_fields"] == len(result["fields"])

    by_name = {f["field"]: f for f in result["fields"]}
    severity = by_name["severity_level"]
    assert severity["type"] == "threat_intelligence"
    assert severity["description"] == "Severity classification of the threat"
    assert severity["examples"] == ["Critical", "High"]
    assert severity["total_unique_values"] == 2


@pytest.mark.asyncio
async def test_list_fields_skips_fields_without_values(engine):
    result = await engine.list_fields()
    names = {f["field"] for f in result["fields"]}

    # Absent everywhere, or only ever an empty list.
    assert "date_original" not in names
    assert "original_source_url" not in names
    assert "related_incidents" not in names
    assert result["total_fields"] == 16


@pytest.mark.asyncio
async def test_list_fields_reports_uncategorized(engine):
    result = await engine.list_fields()
    assert result["uncategorized_fields"] == ["lessons_learned", "s3_path_html", "url", "vendor"]


def test_list_fields_examples_are_capped(snapshot):
    result = list_fields(snapshot)
    threat_types = next(f for f in result["fields"] if f["field"] == "threat_types")
    assert len(threat_types["examples"]) == 3
    assert threat_types["total_unique_values"] == 5


def test_list_fields_only_samples_leading_documents(snapshot):
    result = list_fields(snapshot, sample_size=1)
    names = {f["field"] for f in result["fields"]}

    # The first article has no cloud platforms; later ones do.
    assert "cloud_platforms" not in names
    assert result["dataset_info"]["total_articles"] == 3


def test_date_range_unknown_when_undated():
    snapshot = Snapshot.from_payload([{"title": "a"}, {"article_date": "YYYYMMDD"}])
    assert list_fields(snapshot)["dataset_info"]["date_range"] == "Unknown"


def test_describe_field_fallback():
    assert describe_field("vendor") == "Field: vendor"


def test_build_field_index_flattens_and_sorts(snapshot):
    index = build_field_index(snapshot.documents)
    assert index["cloud_platforms"] == ["AWS", "Azure"]
    assert index["related_incidents"] == []
    assert "Windows Server" in index["products_impacted"]


# ---------------------------------------------------------------------
# Value enumeration
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_field_values_counts_sequence_elements(engine):
    result = await engine.field_values("threat_types")

    assert result["field_name"] == "threat_types"
    assert list(result["values_with_counts"].items()) == [
        ("Ransomware", 2),
        ("DataExfiltration", 1),
        ("SQLInjection", 1),
        ("SupplyChain", 1),
        ("Vulnerabilities", 1),
    ]
    assert result["total_values"] == 5
    assert result["metadata"] == {
        "total_unique_values": 5,
        "filter_applied": None,
        "total_values_after_filter": 5,
    }


@pytest.mark.asyncio
async def test_field_values_scalar_field(engine):
    result = await engine.field_values("severity_level")
    assert result["values_with_counts"] == {"Critical": 2, "High": 1}


@pytest.mark.asyncio
async def test_field_values_search_term_is_case_insensitive(engine):
    result = await engine.field_values("threat_types", search_term="RAN")

    assert result["values_with_counts"] == {"Ransomware": 2}
    assert result["metadata"]["filter_applied"] == "RAN"
    assert result["metadata"]["total_unique_values"] == 5
    assert result["metadata"]["total_values_after_filter"] == 1


@pytest.mark.asyncio
async def test_field_values_unknown_field(engine):
    with pytest.raises(FieldNotFound) as info:
        await engine.field_values("no_such_field")
    assert "show_searchable_fields" in info.value.hint


def test_field_values_present_but_null():
    snapshot = Snapshot.from_payload([{"vendor": None}, {"vendor": ""}, {"title": "x"}])
    result = field_values(snapshot, "vendor")
    assert result["values_with_counts"] == {}
    assert result["total_values"] == 0


def test_field_values_renders_booleans_and_numbers():
    snapshot = Snapshot.from_payload([
        {"exploited": True, "score": 9.0},
        {"exploited": False, "score": 7.5},
        {"exploited": True, "score": 9},
    ])
    assert field_values(snapshot, "exploited")["values_with_counts"] == {"true": 2, "false": 1}
    assert field_values(snapshot, "score")["values_with_counts"] == {"9": 2, "7.5": 1}


def test_field_values_counts_occurrences_not_documents():
    snapshot = Snapshot.from_payload([
        {"regions": ["Europe", "Europe", "Asia"]},
        {"regions": ["Europe"]},
    ])
    result = field_values(snapshot, "regions")
    assert result["values_with_counts"] == {"Europe": 3, "Asia": 1}
    assert sum(result["values_with_counts"].values()) == 4
