from __future__ import annotations

import json

import pytest

from conftest import FakeCompletions, FakeOpenAI
from scent_layering.advice import LayeringAdvisor
from scent_layering.core.exceptions import ConfigurationError, UpstreamError
from scent_layering.core.models import FragranceRecord, Note, SearchHit
from scent_layering.orchestrator import PairingWorkflow

BLEU = SearchHit(id="9099", name="Bleu de Chanel", brand="Chanel", url="https://example.com/bleu-9099.html")
CHANCE = SearchHit(id="102", name="Chance", brand="Chanel", url="102")


class StubScrape:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.closed = False

    async def search(self, query):
        if self.error is not None:
            raise self.error
        return self.results

    async def resolve(self, hit):
        record = FragranceRecord.from_hit(hit, source="scraped", completeness="full")
        record.top_notes = [Note(name="bergamot")]
        record.base_notes = [Note(name="vanilla" if hit.id == BLEU.id else "sandalwood")]
        return record

    async def close(self):
        self.closed = True


class StubCatalog:
    def __init__(self, results=None):
        self.results = results or []
        self.queries: list[str] = []
        self.closed = False

    async def search(self, query):
        self.queries.append(query)
        return self.results

    async def resolve(self, fragrance_id, name_hint=None):
        return FragranceRecord(id=fragrance_id, name=name_hint or "", brand="Chanel", source="structured")

    async def close(self):
        self.closed = True


def make_workflow(settings, *, scrape=None, catalog=None, advisor=None):
    return PairingWorkflow(
        settings,
        scrape=scrape or StubScrape(),
        catalog=catalog or StubCatalog(),
        advisor=advisor or LayeringAdvisor(settings),
    )


async def test_search_prefers_scraped_source(settings):
    catalog = StubCatalog([CHANCE])
    workflow = make_workflow(settings, scrape=StubScrape([BLEU]), catalog=catalog)

    outcome = await workflow.search("bleu")

    assert outcome.source == "scraped"
    assert outcome.results == [BLEU]
    assert outcome.warning is None
    assert catalog.queries == []


async def test_search_falls_back_to_catalog_on_failure(settings):
    scrape = StubScrape(error=UpstreamError("proxy down", status_code=503))
    workflow = make_workflow(settings, scrape=scrape, catalog=StubCatalog([CHANCE]))

    outcome = await workflow.search("chance")

    assert outcome.source == "structured"
    assert outcome.results == [CHANCE]
    assert "proxy down" in outcome.warning


async def test_search_falls_back_to_catalog_on_empty_results(settings):
    workflow = make_workflow(settings, catalog=StubCatalog([CHANCE]))
    outcome = await workflow.search("chance")
    assert outcome.source == "structured"
    assert outcome.warning is None


async def test_search_reports_none_when_both_sources_are_empty(settings):
    outcome = await make_workflow(settings).search("nothing")
    assert outcome.source == "none"
    assert outcome.results == []


async def test_search_without_fallback_raises(settings):
    scrape = StubScrape(error=UpstreamError("proxy down"))
    workflow = make_workflow(settings, scrape=scrape, catalog=StubCatalog([CHANCE]))
    with pytest.raises(UpstreamError):
        await workflow.search("chance", fallback=False)


async def test_configuration_error_is_not_masked(settings):
    workflow = make_workflow(settings, scrape=StubScrape(error=ConfigurationError("no key")))
    with pytest.raises(ConfigurationError):
        await workflow.search("bleu")


async def test_short_query_searches_nothing(settings):
    catalog = StubCatalog([CHANCE])
    outcome = await make_workflow(settings, catalog=catalog).search(" b ")
    assert outcome.source == "none"
    assert catalog.queries == []


async def test_compare_resolves_and_scores_both_hits(settings):
    other = SearchHit(id="77", name="Santal", brand="House", url="https://example.com/santal-77.html")
    workflow = make_workflow(settings)

    result = await workflow.compare(BLEU, other, with_advice=True)

    assert result.first.id == "9099"
    assert result.second.id == "77"
    assert result.analysis.score == 65
    assert result.analysis.shared_notes == ["bergamot"]
    assert result.advice is not None
    assert result.advice.source == "fallback"


async def test_compare_structured_hits_use_catalog(settings):
    result = await make_workflow(settings).compare(CHANCE, BLEU, source="structured")
    assert result.first.source == "structured"
    assert result.advice is None


async def test_resolve_pairings_skips_record_and_duplicates(settings):
    content = json.dumps(
        {
            "pairings": [
                {"name": "Chance", "brand": "Chanel", "reason": "Floral lift"},
                {"name": "Chance Eau Tendre", "brand": "Chanel", "reason": "Softer"},
            ]
        }
    )
    advisor = LayeringAdvisor(settings, client=FakeOpenAI(FakeCompletions(content=content)))
    catalog = StubCatalog([CHANCE, BLEU])
    workflow = make_workflow(settings, catalog=catalog, advisor=advisor)
    record = FragranceRecord(id="9099", name="Bleu de Chanel", brand="Chanel", source="structured")

    pairings = await workflow.resolve_pairings(record)

    assert [item.hit.id for item in pairings] == ["102"]
    assert pairings[0].reason == "Floral lift"
    assert catalog.queries == ["Chance Chanel", "Chance Eau Tendre Chanel"]


async def test_context_manager_closes_sources(settings):
    scrape, catalog = StubScrape(), StubCatalog()
    async with make_workflow(settings, scrape=scrape, catalog=catalog):
        pass
    assert scrape.closed and catalog.closed
