from unittest.mock import AsyncMock

import pytest

from fightnight.errors import ResolutionFailed, UpstreamError
from fightnight.espn.schemas import CalendarEntry, Competition, CoreBout, ESPNEvent
from fightnight.services.resolver import (
    CardSource,
    Tier,
    bout_from_competition,
    event_id_from_ref,
    resolve_card,
    resolve_event,
    similar_name,
)

REF = "http://sports.core.api.espn.com/v2/sports/mma/leagues/ufc/events/600051234?lang=en&region=us"


def _entry(label="UFC 313", start="2025-03-01T02:00Z", ref=REF) -> CalendarEntry:
    return CalendarEntry.model_validate({"label": label, "startDate": start, "event": {"$ref": ref}})


def _event(id="600051234", name="UFC 313: Pereira vs. Ankalaev", date="2025-03-01T02:00Z",
           short_name="UFC 313", **kw) -> ESPNEvent:
    return ESPNEvent.model_validate({"id": id, "name": name, "shortName": short_name, "date": date, **kw})


def _competition(red="Alex Pereira", blue="Magomed Ankalaev", state="pre", winner_order=None, **kw):
    competitors = []
    for order, name, record in ((1, red, "12-2-0"), (2, blue, "19-1-1")):
        competitors.append({
            "order": order,
            "winner": order == winner_order,
            "athlete": {"fullName": name},
            "records": [{"summary": record}],
        })
    return {
        "id": kw.pop("id", "1"),
        "date": kw.pop("date", "2025-03-01T05:00Z"),
        "type": {"id": "7", "abbreviation": kw.pop("abbreviation", "LHW")},
        "competitors": competitors,
        "status": {"type": {"state": state}},
        **kw,
    }


class TestHelpers:
    def test_event_id_from_ref(self):
        assert event_id_from_ref(REF) == "600051234"
        assert event_id_from_ref("https://example.com/cards/1") is None
        assert event_id_from_ref("") is None

    def test_similar_name_is_bidirectional(self):
        assert similar_name("UFC 313", "UFC 313: Pereira vs. Ankalaev")
        assert similar_name("ufc 313: pereira vs. ankalaev", "UFC 313")
        assert not similar_name("UFC 313", "UFC 314")
        assert not similar_name("", "UFC 313")


class TestResolveEvent:
    @pytest.mark.asyncio
    async def test_id_match_skips_later_tiers(self):
        fetch = AsyncMock()
        events = [_event(id="1", name="UFC 313"), _event()]
        res = await resolve_event(_entry(), events, fetch)
        assert res.tier is Tier.ID_MATCH
        assert res.event.id == "600051234"
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fuzzy_match_within_48_hours(self):
        fetch = AsyncMock()
        events = [_event(id="999", date="2025-03-02T20:00Z")]
        res = await resolve_event(_entry(ref=""), events, fetch)
        assert res.tier is Tier.FUZZY_MATCH
        assert res.event.id == "999"
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fuzzy_match_uses_competition_date_when_event_date_missing(self):
        events = [_event(id="999", date="", competitions=[_competition(startDate="2025-03-01T01:00Z")])]
        res = await resolve_event(_entry(ref=""), events)
        assert res.tier is Tier.FUZZY_MATCH

    @pytest.mark.asyncio
    async def test_name_match_outside_window_falls_through_to_fetch(self):
        fetched = _event(id="600051234")
        fetch = AsyncMock(return_value=fetched)
        events = [_event(id="999", date="2025-03-05T02:00Z")]
        res = await resolve_event(_entry(), events, fetch)
        assert res.tier is Tier.FETCHED
        assert res.event is fetched
        fetch.assert_awaited_once_with(REF)

    @pytest.mark.asyncio
    async def test_no_match_and_no_fetcher_fails(self):
        with pytest.raises(ResolutionFailed):
            await resolve_event(_entry(), [_event(id="1", name="Other Card", short_name="UFC 300")])

    @pytest.mark.asyncio
    async def test_no_match_and_no_ref_fails_without_fetching(self):
        fetch = AsyncMock()
        with pytest.raises(ResolutionFailed):
            await resolve_event(_entry(ref=""), [], fetch)
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_failure_becomes_resolution_failed(self):
        fetch = AsyncMock(side_effect=UpstreamError("ESPN 404", status_code=404))
        with pytest.raises(ResolutionFailed):
            await resolve_event(_entry(), [], fetch)


class TestBouts:
    def test_bout_from_competition(self):
        comp = Competition.model_validate(_competition())
        bout = bout_from_competition(comp)
        assert bout.red_name == "Alex Pereira"
        assert bout.blue_record == "19-1-1"
        assert bout.weight_class == "LHW"
        assert bout.winner is None
        assert bout.scheduled.hour == 5

    def test_winner_only_after_completion(self):
        finished = Competition.model_validate(_competition(state="post", winner_order=2))
        live = Competition.model_validate(_competition(state="in", winner_order=2))
        assert bout_from_competition(finished).winner == "Magomed Ankalaev"
        assert bout_from_competition(live).winner is None

    def test_competitor_order_is_respected(self):
        data = _competition()
        data["competitors"].reverse()
        bout = bout_from_competition(Competition.model_validate(data))
        assert bout.red_name == "Alex Pereira"
        assert bout.blue_name == "Magomed Ankalaev"

    def test_weight_class_falls_back_to_type_id(self):
        bout = bout_from_competition(Competition.model_validate(_competition(abbreviation="")))
        assert bout.weight_class == "7"


class TestResolveCard:
    @pytest.mark.asyncio
    async def test_scoreboard_competitions(self):
        fetch = AsyncMock()
        event = _event(competitions=[_competition(id="1"), _competition(id="2")])
        card = await resolve_card(event, fetch)
        assert card.source is CardSource.SCOREBOARD
        assert len(card.bouts) == 2
        assert not card.degraded
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_core_api_fallback(self):
        fetch = AsyncMock(return_value=[
            CoreBout(fighter1="Alex Pereira", fighter2="Magomed Ankalaev", weight_class="Light Heavyweight"),
        ])
        card = await resolve_card(_event(), fetch)
        assert card.source is CardSource.CORE_API
        assert card.degraded
        bout = card.bouts[0]
        assert bout.weight_class == "Light Heavyweight"
        assert bout.red_record == ""
        assert bout.winner is None
        fetch.assert_awaited_once_with("600051234")

    @pytest.mark.asyncio
    async def test_fallback_error_degrades_to_empty(self):
        fetch = AsyncMock(side_effect=UpstreamError("timeout"))
        card = await resolve_card(_event(), fetch)
        assert card.source is CardSource.NONE
        assert card.bouts == ()

    @pytest.mark.asyncio
    async def test_fallback_empty_result(self):
        card = await resolve_card(_event(), AsyncMock(return_value=[]))
        assert card.source is CardSource.NONE

    @pytest.mark.asyncio
    async def test_no_fetcher(self):
        card = await resolve_card(_event())
        assert card.source is CardSource.NONE
