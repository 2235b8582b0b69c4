import logging

from happymatch.components.narrative_message import NarrativeMessage
from happymatch.events.bus import EventBus, EVENT_LEVEL_ENDED, EVENT_LEVEL_STARTED, EVENT_NARRATIVE_READY
from happymatch.systems.narrative_system import DEFAULT_MESSAGES, NarrativeSystem, build_prompt
from happymatch.world import create_world
from tests.helpers import record


def _setup(provider=None):
    bus = EventBus()
    world = create_world(bus)
    system = NarrativeSystem(world, bus, provider=provider)
    return bus, world, system


def _message(world) -> NarrativeMessage:
    for _, message in world.get_component(NarrativeMessage):
        return message
    raise AssertionError("no narrative message")


def test_default_message_without_provider():
    bus, world, _ = _setup()
    ready = record(bus, EVENT_NARRATIVE_READY)[EVENT_NARRATIVE_READY]
    bus.emit(EVENT_LEVEL_ENDED, status="won", score=2100, moves_remaining=3)
    assert ready == [{"status": "won", "text": DEFAULT_MESSAGES["won"]}]
    assert _message(world).text == DEFAULT_MESSAGES["won"]


def test_provider_text_is_used_and_prompt_has_numbers():
    prompts = []

    def provider(prompt):
        prompts.append(prompt)
        return "  Sweet victory!  "

    bus, world, _ = _setup(provider)
    bus.emit(EVENT_LEVEL_ENDED, status="won", score=2100, moves_remaining=3)
    assert _message(world).text == "Sweet victory!"
    assert "Score: 2100" in prompts[0] and "Moves left: 3" in prompts[0]


def test_failing_provider_falls_back_and_warns(caplog):
    def provider(prompt):
        raise ConnectionError("offline")

    bus, world, _ = _setup(provider)
    with caplog.at_level(logging.WARNING):
        bus.emit(EVENT_LEVEL_ENDED, status="lost", score=40, moves_remaining=0)
    assert _message(world).text == DEFAULT_MESSAGES["lost"]
    assert "offline" in caplog.text


def test_empty_provider_answer_falls_back():
    _, _, system = _setup(lambda prompt: "   ")
    assert system.generate("lost", 10, 0) == DEFAULT_MESSAGES["lost"]
    _, _, system = _setup(lambda prompt: None)
    assert system.generate("won", 10, 0) == DEFAULT_MESSAGES["won"]


def test_level_start_clears_message():
    bus, world, _ = _setup()
    bus.emit(EVENT_LEVEL_ENDED, status="lost", score=40, moves_remaining=0)
    bus.emit(EVENT_LEVEL_STARTED, level_id=1, mode=None)
    assert _message(world).text == ""


def test_prompts_differ_by_status():
    assert "beat a level" in build_prompt("won", 10, 2)
    assert "lost" in build_prompt("lost", 10, 0)
