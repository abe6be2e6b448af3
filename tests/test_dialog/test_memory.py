import threading

from convstate.core.events import SceneEvent
from convstate.dialog.memory import ResponseMemory


def test_memory_starts_empty():
    memory = ResponseMemory()

    assert len(memory) == 0
    assert list(memory) == []


def test_remember_and_lookup(memory, entry):
    memory.remember(entry(1), entry(2))
    memory.remember(entry(1), entry(3))

    assert memory.last_chosen(entry(1)) == entry(3)
    assert memory.last_chosen(entry(9)) is None
    assert entry(1) in memory
    assert list(memory) == [entry(1)]


def test_forget_single_source(memory, entry):
    memory.remember(entry(1), entry(2))
    memory.remember(entry(4), entry(5))

    assert memory.forget(entry(1))
    assert not memory.forget(entry(1))
    assert len(memory) == 1


def test_absent_destination_is_remembered(memory, entry):
    memory.remember(entry(1), None)

    assert entry(1) in memory
    assert memory.last_chosen(entry(1)) is None
    assert memory.forget(entry(1))
    assert entry(1) not in memory


def test_clear(memory, entry):
    memory.remember(entry(1), entry(2))
    memory.remember(entry(4), entry(5))

    memory.clear()

    assert len(memory) == 0
    assert memory.last_chosen(entry(1)) is None


def test_clear_on_event(event_bus, memory, entry):
    memory.clear_on(event_bus, SceneEvent.SCENE_SWITCHED)
    memory.remember(entry(1), entry(2))

    event_bus.publish(SceneEvent.SCENE_LOADED)
    assert len(memory) == 1

    event_bus.publish(SceneEvent.SCENE_SWITCHED, scene="town")
    assert len(memory) == 0


def test_concurrent_first_visits_record_one_choice(make_state, response, entry):
    memory = ResponseMemory()
    state = make_state(npc=[response(1), response(2)], source=10)
    results = []
    barrier = threading.Barrier(8)

    def pick():
        barrier.wait()
        results.append(state.get_random_npc_entry(no_duplicate=True, memory=memory))

    threads = [threading.Thread(target=pick) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    # Selections are serialized, so every pick alternates from the previous one
    assert results.count(entry(1)) == 4
    assert results.count(entry(2)) == 4
    assert len(memory) == 1
