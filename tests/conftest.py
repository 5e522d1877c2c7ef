import asyncio
import copy
from typing import Any, Dict, List, Optional

import pytest

from security_search_mcp.core.errors import SourceUnavailable
from security_search_mcp.search.cache import DocumentCache
from security_search_mcp.search.engine import SearchEngine
from security_search_mcp.search.models import Snapshot


# Sample articles modelled on the published search_metadata.json
ARTICLES: List[Dict[str, Any]] = [
    {
        "url": "https://www.theregister.com/2024/12/11/sichuan_silence_sophos_zeroday_sanctions/",
        "s3_path_html": "register_security/2024/12/2024_12_11_sichuan_silence_sophos_zeroday_sanctions/2024_12_11_sichuan_silence_sophos_zeroday_sanctions.html",
        "article_type": "APTActivity",
        "article_date": "2024-12-11",
        "sectors": ["PrivacyandSecurity"],
        "threat_types": ["SQLInjection", "Vulnerabilities"],
        "threat_actor_name": ["GuanTianfeng", "SichuanSilenceInformationTechnologyCoLtd"],
        "severity_level": "Critical",
        "regions": ["China", "UnitedStates"],
        "products_impacted": ["SophosXGfirewall"],
        "cloud_platforms": [],
        "affected_organizations": ["SichuanSilenceInformationTechnologyCoLtd"],
        "cve_identifiers": ["CVE-2020-12271"],
        "related_incidents": [],
        "lessons_learned": ["Patch perimeter devices quickly"],
        "summary": "A Chinese man and his company are being charged with exploitation of a zero-day SQL injection flaw in Sophos firewall",
        "ciso_summary_key_points": ["Attack affected over 81,000 Sophos firewalls"],
        "title": "US names Chinese man alleged to have exploited Sophos 0-day",
        "article_text_md_original": "The US Departments of Treasury and Justice have named a Chinese business accused of exploiting firewalls.",
        "vendor": "Sophos",
        "original_source_name": "The Register",
    },
    {
        "url": "https://example.com/article2",
        "s3_path_html": "example/2024/11/article2.html",
        "article_type": "Ransomware",
        "article_date": "2024-11-01",
        "sectors": ["Healthcare", "Finance"],
        "threat_types": ["Ransomware", "DataExfiltration"],
        "threat_actor_name": ["LockBit"],
        "severity_level": "High",
        "regions": ["Europe", "NorthAmerica"],
        "products_impacted": ["Windows Server", "Exchange Server"],
        "cloud_platforms": ["Azure"],
        "affected_organizations": ["HealthcareOrg1"],
        "cve_identifiers": ["CVE-2024-1234"],
        "summary": "The LockBit gang encrypted hospital systems and leaked patient records.",
        "title": "Ransomware crew hits European hospitals",
        "article_text_md_original": "Hospitals across Europe were disrupted after ransomware spread through exposed RDP.",
        "vendor": "Microsoft",
    },
    {
        "url": "https://example.com/article3",
        "s3_path_html": "example/2024/10/article3.html",
        "article_type": "SupplyChain",
        "article_date": "2024-10-15",
        "sectors": ["Technology"],
        "threat_types": ["SupplyChain", "Ransomware"],
        "threat_actor_name": ["APT29"],
        "severity_level": "Critical",
        "regions": ["NorthAmerica"],
        "products_impacted": ["Orion Platform"],
        "cloud_platforms": ["AWS", "Azure"],
        "affected_organizations": ["SolarWinds"],
        "cve_identifiers": [],
        "summary": "Attackers tampered with an Orion update; some victims later saw a ransomware payload.",
        "title": "SolarWinds Orion update abused in supply chain attack",
        "article_text_md_original": "Investigators traced the intrusion to a signed update.",
        "vendor": "SolarWinds",
    },
]

GENERATED_AT = "2025-08-14T11:37:17.199014Z"


def metadata_payload(articles: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    articles = copy.deepcopy(ARTICLES if articles is None else articles)
    return {
        "generated_at": GENERATED_AT,
        "last_update": GENERATED_AT,
        "total_articles": len(articles),
        "bucket": "security-article-search-data",
        "articles": articles,
    }


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticSource:
    """
    In-memory document source.

    ``fail`` makes the next fetches raise SourceUnavailable; ``error`` makes
    them raise that exception instead. ``gate`` holds fetches until it is
    set, to test refresh coalescing.
    """

    def __init__(self, payload: Any = None) -> None:
        self.payload = metadata_payload() if payload is None else payload
        self.calls = 0
        self.fail = False
        self.error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None

    async def fetch_documents(self) -> Snapshot:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if self.fail:
            raise SourceUnavailable("storage offline")
        return Snapshot.from_payload(self.payload)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def source():
    return StaticSource()


@pytest.fixture
def cache(source, clock):
    return DocumentCache(source, ttl_seconds=60, clock=clock)


@pytest.fixture
def engine(cache):
    return SearchEngine(cache, max_limit=1000, default_limit=30, sample_size=100)


@pytest.fixture
def snapshot():
    return Snapshot.from_payload(metadata_payload())


@pytest.fixture
def make_engine():
    """Build an engine over a custom article list."""
    def _make(articles: List[Dict[str, Any]], **kwargs: Any) -> SearchEngine:
        source = StaticSource(metadata_payload(articles))
        return SearchEngine(DocumentCache(source, ttl_seconds=60), **kwargs)
    return _make
