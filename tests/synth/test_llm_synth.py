"""Tests for inferno_island.synth.llm — JSON replies into the shared payloads."""

import json
import logging
from unittest.mock import AsyncMock

import pytest

from inferno_island.llm import LLMError
from inferno_island.models import CeremonyRequest, EventRequest
from inferno_island.roster import set_flags
from inferno_island.synth import LLMSynthesizer, SynthesisError
from inferno_island.synth.llm import extract_json_object

EVENT_REPLY = {
    "title": "Sunset Talk",
    "eventType": "conversation",
    "location": "inferno",
    "participants": ["ryu", "mia"],
    "narrative": "Ryu and Mia talk by the fire.",
    "dialogue": [{"characterId": "ryu", "text": "Hey.", "emotion": "flirty"}],
    "innerThoughts": [{"characterId": "mia", "thought": "He's fun."}],
    "affinityChanges": [{"fromId": "ryu", "toId": "mia", "change": 6, "reason": "chat"}],
    "paradiseInvite": None,
}

INVITE_REPLY = {
    **EVENT_REPLY,
    "eventType": "paradise_invite",
    "paradiseInvite": {
        "inviterId": "ryu",
        "inviteeId": "mia",
        "accepted": True,
        "inviterMessage": "Come with me.",
        "inviteeResponse": "Yes!",
    },
}

DATE_REPLY = {
    "title": "Paradise Date",
    "eventType": "paradise_date",
    "location": "paradise",
    "participants": ["ryu", "mia"],
    "narrative": "They reveal their jobs.",
    "dialogue": [],
    "affinityChanges": [{"fromId": "ryu", "toId": "mia", "change": 20, "reason": "paradise"}],
}

CEREMONY_REPLY = {
    "narrative": "The night of choices.",
    "dialogue": [{"characterId": "ryu", "text": "It's you.", "emotion": "happy"}],
    "couples": [{"person1Id": "ryu", "person2Id": "mia"}],
    "uncoupled": ["kenji", "takeshi", "yuki", "hana"],
}


def _llm(*replies) -> AsyncMock:
    """LLM mock returning replies in order; exceptions are raised."""
    return AsyncMock(side_effect=[
        r if isinstance(r, Exception) else f"Sure! Here it is:\n{json.dumps(r)}\nEnjoy."
        for r in replies
    ])


@pytest.fixture
def event_request(characters, zero_affinities) -> EventRequest:
    return EventRequest(
        day=2, time_of_day="evening", characters=characters, affinities=zero_affinities
    )


@pytest.fixture
def ceremony_request(characters, zero_affinities) -> CeremonyRequest:
    affinities = {**zero_affinities, "mia|ryu": 60, "kenji|mia": 50, "kenji|yuki": 30}
    return CeremonyRequest(characters=characters, affinities=affinities)


class TestExtractJsonObject:
    def test_strips_surrounding_prose(self) -> None:
        assert extract_json_object('ok {"a": {"b": 1}} done') == {"a": {"b": 1}}

    def test_no_object(self) -> None:
        with pytest.raises(SynthesisError, match="No JSON object"):
            extract_json_object("I'd rather not.")

    def test_invalid_json(self) -> None:
        with pytest.raises(SynthesisError, match="invalid JSON"):
            extract_json_object("{title: 'nope'}")


class TestSynthesizeEvent:
    async def test_parses_reply(self, event_request) -> None:
        llm = _llm(EVENT_REPLY)
        bundle = await LLMSynthesizer(llm).synthesize_event(event_request)
        assert bundle.event.title == "Sunset Talk"
        assert bundle.event.affinity_changes[0].change == 6
        assert bundle.paradise_event is None
        stage, prompt = llm.call_args.args
        assert stage == "event"
        assert "day 2, evening" in prompt

    async def test_schema_violation(self, event_request) -> None:
        bad = {**EVENT_REPLY, "eventType": "karaoke"}
        with pytest.raises(SynthesisError, match="EventResult"):
            await LLMSynthesizer(_llm(bad)).synthesize_event(event_request)

    async def test_out_of_range_change(self, event_request) -> None:
        bad = {**EVENT_REPLY, "affinityChanges": [
            {"fromId": "ryu", "toId": "mia", "change": 40, "reason": "too much"}
        ]}
        with pytest.raises(SynthesisError):
            await LLMSynthesizer(_llm(bad)).synthesize_event(event_request)

    async def test_transport_error_propagates(self, event_request) -> None:
        llm = _llm(LLMError("Cannot connect to LLM backend at http://x"))
        with pytest.raises(LLMError):
            await LLMSynthesizer(llm).synthesize_event(event_request)

    async def test_accepted_invite_requests_date(self, event_request) -> None:
        llm = _llm(INVITE_REPLY, DATE_REPLY)
        bundle = await LLMSynthesizer(llm).synthesize_event(event_request)
        assert bundle.event.paradise_invite.accepted
        assert bundle.paradise_event.event_type == "paradise_date"
        stages = [c.args[0] for c in llm.call_args_list]
        assert stages == ["event", "paradise_date"]
        assert "Occupation: Musician" in llm.call_args_list[1].args[1]

    async def test_rejected_invite_single_call(self, event_request) -> None:
        reply = {**INVITE_REPLY, "paradiseInvite": {**INVITE_REPLY["paradiseInvite"], "accepted": False}}
        llm = _llm(reply)
        bundle = await LLMSynthesizer(llm).synthesize_event(event_request)
        assert bundle.paradise_event is None
        assert llm.await_count == 1

    async def test_failed_date_keeps_invite(self, event_request, caplog) -> None:
        llm = _llm(INVITE_REPLY, LLMError("LLM backend returned HTTP 500"))
        with caplog.at_level(logging.WARNING, logger="inferno_island.synth.llm"):
            bundle = await LLMSynthesizer(llm).synthesize_event(event_request)
        assert bundle.event.paradise_invite.accepted
        assert bundle.paradise_event is None
        assert "Paradise date generation failed" in caplog.text

    async def test_invite_with_unknown_ids_skips_date(self, event_request) -> None:
        reply = {**INVITE_REPLY, "paradiseInvite": {**INVITE_REPLY["paradiseInvite"], "inviterId": "zed"}}
        llm = _llm(reply)
        bundle = await LLMSynthesizer(llm).synthesize_event(event_request)
        assert bundle.paradise_event is None
        assert llm.await_count == 1

    @pytest.mark.parametrize("changes,match", [
        ([{"fromId": "ryu", "toId": "kenji", "change": 10}], "same gender"),
        ([{"fromId": "ryu", "toId": "hana", "change": 10}], "not in the event"),
    ])
    async def test_bad_affinity_change(self, event_request, changes, match) -> None:
        bad = {**EVENT_REPLY, "participants": ["ryu", "mia", "kenji"], "affinityChanges": changes}
        with pytest.raises(SynthesisError, match=match):
            await LLMSynthesizer(_llm(bad)).synthesize_event(event_request)

    async def test_change_with_stranger_tolerated(self, event_request) -> None:
        reply = {**EVENT_REPLY, "affinityChanges": [{"fromId": "ryu", "toId": "zed", "change": 3}]}
        bundle = await LLMSynthesizer(_llm(reply)).synthesize_event(event_request)
        assert bundle.event.affinity_changes[0].to_id == "zed"

    @pytest.mark.parametrize("participants,match", [
        (["kenji"] * 5, "participants"),
        (["ryu"], "participants"),
        (["ryu", "mia", "ryu"], "twice"),
    ])
    async def test_bad_participants(self, event_request, participants, match) -> None:
        bad = {**EVENT_REPLY, "participants": participants, "affinityChanges": []}
        with pytest.raises(SynthesisError, match=match):
            await LLMSynthesizer(_llm(bad)).synthesize_event(event_request)

    async def test_invalid_date_dropped(self, event_request) -> None:
        bad_date = {**DATE_REPLY, "affinityChanges": [
            {"fromId": "ryu", "toId": "takeshi", "change": 20}
        ]}
        bundle = await LLMSynthesizer(_llm(INVITE_REPLY, bad_date)).synthesize_event(event_request)
        assert bundle.paradise_event is None


class TestSynthesizeCeremony:
    async def test_parses_reply(self, ceremony_request) -> None:
        llm = _llm(CEREMONY_REPLY)
        result = await LLMSynthesizer(llm).synthesize_ceremony(ceremony_request)
        assert [(c.person1_id, c.person2_id) for c in result.couples] == [("ryu", "mia")]
        assert llm.call_args.args[0] == "ceremony"

    async def test_character_in_two_couples(self, ceremony_request) -> None:
        bad = {**CEREMONY_REPLY, "couples": [
            {"person1Id": "ryu", "person2Id": "mia"},
            {"person1Id": "kenji", "person2Id": "mia"},
        ]}
        with pytest.raises(SynthesisError, match="more than one couple"):
            await LLMSynthesizer(_llm(bad)).synthesize_ceremony(ceremony_request)

    async def test_self_couple(self, ceremony_request) -> None:
        bad = {**CEREMONY_REPLY, "couples": [{"person1Id": "ryu", "person2Id": "ryu"}]}
        with pytest.raises(SynthesisError, match="themselves"):
            await LLMSynthesizer(_llm(bad)).synthesize_ceremony(ceremony_request)

    @pytest.mark.parametrize("couple,match", [
        ({"person1Id": "kenji", "person2Id": "ryu"}, "same gender"),
        ({"person1Id": "kenji", "person2Id": "zed"}, "active cast"),
        ({"person1Id": "kenji", "person2Id": "yuki"}, "threshold"),
    ])
    async def test_invalid_couple(self, ceremony_request, couple, match) -> None:
        bad = {**CEREMONY_REPLY, "couples": [couple]}
        with pytest.raises(SynthesisError, match=match):
            await LLMSynthesizer(_llm(bad)).synthesize_ceremony(ceremony_request)

    async def test_eliminated_partner(self, ceremony_request) -> None:
        cast = set_flags(ceremony_request.characters, {"mia"}, is_eliminated=True)
        request = ceremony_request.model_copy(update={"characters": cast})
        with pytest.raises(SynthesisError, match="active cast"):
            await LLMSynthesizer(_llm(CEREMONY_REPLY)).synthesize_ceremony(request)
