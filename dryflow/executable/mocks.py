# dryflow/executable/mocks.py
"""
Synthetic runtime data for offline execution of code nodes.

The fixture table maps node names to the item that node would have emitted
last at runtime. It is hand-curated (company research pipeline and weekly
report workflows) and never derived from the workflow itself.
"""
from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from dryflow.errors import ConfigError
from dryflow.utils.io import load_any

# ---------- Fixture data ----------

SEARCH_COMPANY = {
    "results": [
        {
            "title": "Acme Corp | LinkedIn",
            "url": "https://www.linkedin.com/company/acme",
            "content": "Acme Corp is a technology company specializing in cloud solutions...",
        },
    ],
}

SEARCH_LEADERS = {
    "results": [
        {
            "title": "Jane Doe - CTO - Acme Corp | LinkedIn",
            "url": "https://www.linkedin.com/in/janedoe",
            "content": "Chief Technology Officer at Acme Corp. Former VP Engineering at BigCo.",
        },
        {
            "title": "John Smith - CISO - Acme Corp | LinkedIn",
            "url": "https://www.linkedin.com/in/johnsmith",
            "content": "Chief Information Security Officer at Acme Corp. Cybersecurity expert.",
        },
    ],
}

PARSED_LEADERS = {
    "people": [
        {
            "name": "Jane Doe",
            "title": "CTO",
            "linkedin_url": "https://www.linkedin.com/in/janedoe",
            "source": "searxng",
            "snippet": "Chief Technology Officer at Acme Corp. Former VP Engineering at BigCo.",
        },
        {
            "name": "John Smith",
            "title": "CISO",
            "linkedin_url": "https://www.linkedin.com/in/johnsmith",
            "source": "searxng",
            "snippet": "Chief Information Security Officer at Acme Corp. Cybersecurity expert.",
        },
    ],
    "totalFound": 2,
}

FILING_SEARCH = {
    "hits": {
        "hits": [
            {
                "_source": {
                    "form_type": "10-K",
                    "file_date": "2025-06-15",
                    "entity_name": "Acme Corp",
                    "file_url": "/Archives/edgar/data/123/filing.htm",
                    "accession_no": "0001234-25-000001",
                },
            },
        ],
    },
}

FILING_HTML = (
    "<html><body>Technology investments include cloud migration and cybersecurity initiatives. "
    "Information technology infrastructure modernization is underway.</body></html>"
)

ANALYSIS = {
    "company": {"name": "Acme Corp", "ticker": "ACME", "website": "acme.com"},
    "it_leaders": [
        {
            "name": "Jane Doe",
            "title": "CTO",
            "linkedin_url": "https://linkedin.com/in/janedoe",
            "key_background": "Former VP Engineering at BigCo",
            "talking_points": ["Cloud migration expert", "Led digital transformation"],
        },
    ],
    "strategic_initiatives": [
        {
            "initiative": "Cloud Migration",
            "description": "Multi-year cloud migration program",
            "filing_reference": "10-K 2025",
        },
    ],
    "technology_themes": [
        {"theme": "Cloud", "priority": "high", "evidence": "10-K filing mentions cloud 15 times"},
    ],
    "summary": "Acme Corp is investing heavily in cloud and cybersecurity.",
}

DELTA = {
    "company": "Acme Corp",
    "week_of": "2026-01-30",
    "new_leaders": [],
    "changed_leaders": [],
    "departed_leaders": [],
    "new_filings": [],
    "new_initiatives": [],
    "updated_themes": [],
    "executive_summary": "No significant changes this week.",
}

# LLM responses carry the analysis as JSON text inside content[0].text
LLM_ANALYSIS_RESPONSE = {"content": [{"text": json.dumps(ANALYSIS)}]}
LLM_DELTA_RESPONSE = {"content": [{"text": json.dumps(DELTA)}]}

COMPANY_ROW = {
    "Company Name": "Acme Corp",
    "Ticker": "ACME",
    "Website": "acme.com",
    "LinkedIn URL": "",
    "Status": "",
    "Last Researched": "",
}

EXISTING_LEADERS = [
    {
        "Company": "Acme Corp",
        "Name": "Jane Doe",
        "Title": "CTO",
        "LinkedIn URL": "https://linkedin.com/in/janedoe",
        "Key Background": "Former VP Engineering at BigCo",
        "Talking Points": "Cloud migration expert; Led digital transformation",
        "Date Found": "2026-01-20",
    },
]

PARSED_FILING = {
    "form": "10-K",
    "date": "2025-06-15",
    "company": "Acme Corp",
    "url": "/Archives/edgar/data/123/filing.htm",
}

DEFAULT_FIXTURES: Dict[str, Any] = {
    # research pipeline
    "SEC EDGAR Search 10-K": FILING_SEARCH,
    "Fetch 10-K Filing": {"data": FILING_HTML, "body": FILING_HTML},
    "Parse EDGAR Results": {
        "filingUrl": "https://www.sec.gov/Archives/edgar/data/123/filing.htm",
        "filings": [PARSED_FILING],
        "rawResultAvailable": True,
    },
    "Claude Analysis": LLM_ANALYSIS_RESPONSE,
    "Loop Over Companies": COMPANY_ROW,
    "SearXNG Company Search": SEARCH_COMPANY,
    "SearXNG Search IT Leaders": SEARCH_LEADERS,
    "Parse LinkedIn Results": PARSED_LEADERS,
    "Format Results": {
        "companyName": "Acme Corp",
        "leaderRows": [
            {
                "Company": "Acme Corp",
                "Name": "Jane Doe",
                "Title": "CTO",
                "LinkedIn URL": "https://linkedin.com/in/janedoe",
                "Key Background": "Former VP Engineering at BigCo",
                "Talking Points": "Cloud migration expert; Led digital transformation",
                "Date Found": "2026-01-30",
            },
            {
                "Company": "Acme Corp",
                "Name": "John Smith",
                "Title": "CISO",
                "LinkedIn URL": "https://linkedin.com/in/johnsmith",
                "Key Background": "Security expert",
                "Talking Points": "Zero trust advocate",
                "Date Found": "2026-01-30",
            },
        ],
        "docContent": "# Acme Corp - IT Leadership Research\n...",
        "analysis": ANALYSIS,
    },
    # weekly report
    "SEC EDGAR Check New Filings": FILING_SEARCH,
    "Claude Delta Analysis": LLM_DELTA_RESPONSE,
    "Read Existing Leaders": EXISTING_LEADERS,
    "Format Weekly Delta": {
        "companyName": "Acme Corp",
        "weeklyUpdateText": "### Week of 2026-01-30\n\n**Summary:** No significant changes.",
        "newLeaderRows": [],
        "masterSummaryLine": "**Acme Corp:** No significant changes this week.",
        "weekOf": "2026-01-30",
        "delta": DELTA,
    },
    "Parse New Filings": {
        "newFilings": [dict(PARSED_FILING, accession="0001234-25-000001")],
        "hasNewFilings": True,
    },
}

DEFAULT_INPUT_ITEMS: Tuple[Dict[str, Any], ...] = (
    {"companyName": "Acme Corp", "summaryLine": "**Acme Corp:** No significant changes this week."},
    {"companyName": "Widget Inc", "summaryLine": "**Widget Inc:** New CTO appointed."},
)

DEFAULT_CURRENT_ITEM: Dict[str, Any] = {
    "filingText": "Technology investments include cloud migration and cybersecurity...",
    "filingUrl": "https://www.sec.gov/Archives/edgar/data/123/filing.htm",
    "filings": [{"form": "10-K", "date": "2025-06-15", "company": "Acme Corp", "url": ""}],
}


# ---------- Context ----------

@dataclass(frozen=True)
class MockContext:
    """
    Read-only runtime stand-in. All accessors hand out deep copies, so callers
    can never alter the table shared by every execution of a run.
    """
    fixtures: Mapping[str, Any]
    input_items: Tuple[Dict[str, Any], ...]
    current: Mapping[str, Any]

    def lookup(self, name: str) -> Dict[str, Any]:
        """Last item emitted by `name`, shaped like `$('name')`: {"item": {"json": ...}}."""
        data = self.fixtures.get(name)
        if isinstance(data, list):
            data = data[0] if data else {}
        if data is None:
            data = {}
        return {"item": {"json": copy.deepcopy(data)}}

    def all_items(self) -> List[Dict[str, Any]]:
        return [{"json": copy.deepcopy(item)} for item in self.input_items]

    def current_item(self) -> Dict[str, Any]:
        return copy.deepcopy(dict(self.current))

    def to_payload(self) -> Dict[str, Any]:
        """Plain JSON-able snapshot handed to the script sandbox."""
        return {
            "fixtures": copy.deepcopy(dict(self.fixtures)),
            "input": [copy.deepcopy(item) for item in self.input_items],
            "current": self.current_item(),
        }


def build_mock_context(extra_fixtures: Optional[Mapping[str, Any]] = None) -> MockContext:
    """The default fixture table, optionally extended/overridden by node name."""
    table = copy.deepcopy(DEFAULT_FIXTURES)
    if extra_fixtures:
        table.update(copy.deepcopy(dict(extra_fixtures)))
    return MockContext(
        fixtures=MappingProxyType(table),
        input_items=tuple(copy.deepcopy(i) for i in DEFAULT_INPUT_ITEMS),
        current=MappingProxyType(copy.deepcopy(DEFAULT_CURRENT_ITEM)),
    )


def load_fixtures(path: Union[str, Path]) -> Dict[str, Any]:
    """Read extra fixtures (node name -> emitted item) from JSON or YAML."""
    try:
        data = load_any(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read fixtures {path}: {e}")
    if not isinstance(data, dict):
        raise ConfigError(f"fixtures file {path} must map node names to items")
    return data
