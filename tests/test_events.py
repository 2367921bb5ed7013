from types import SimpleNamespace

import pytest

pygame_locals = pytest.importorskip("pygame.locals")

from events import EventManager  # noqa: E402


@pytest.fixture(autouse=True)
def clean_manager():
    EventManager.reset()
    yield
    EventManager.reset()


def _key(key):
    return SimpleNamespace(type=pygame_locals.KEYDOWN, key=key)


def test_listeners_run_in_registration_order():
    calls = []
    EventManager.on("file-loaded", lambda: calls.append("a"))
    EventManager.on("file-loaded", lambda: calls.append("b"))
    EventManager.on("end-file", lambda: calls.append("end"))

    EventManager.emit("file-loaded")
    assert calls == ["a", "b"]
    EventManager.emit("nothing-registered")
    assert calls == ["a", "b"]


def test_commands_return_their_result():
    EventManager.register_command("auto-fps-test", lambda: {"phase": "armed"})
    assert EventManager.run_command("auto-fps-test") == {"phase": "armed"}
    assert EventManager.commands() == ["auto-fps-test"]


def test_unknown_command_is_ignored(caplog):
    assert EventManager.run_command("does-not-exist") is None
    assert "Unknown command" in caplog.text


def test_post_and_poll_fifo():
    EventManager.post({"type": "quit"})
    EventManager.post({"type": "toggle_pause"})
    assert EventManager.poll() == {"type": "quit"}
    assert EventManager.poll() == {"type": "toggle_pause"}
    assert EventManager.poll() is None


@pytest.mark.parametrize(
    "key, name",
    [
        (pygame_locals.K_r, "auto-fps-reset"),
        (pygame_locals.K_a, "auto-fps-toggle"),
        (pygame_locals.K_d, "auto-fps-test"),
    ],
)
def test_auto_fps_keys_become_commands(key, name):
    EventManager.handle(_key(key))
    assert EventManager.poll() == {"type": "command", "name": name}


def test_player_keys():
    EventManager.handle(_key(pygame_locals.K_SPACE))
    EventManager.handle(_key(pygame_locals.K_RIGHT))
    EventManager.handle(_key(pygame_locals.K_LEFT))
    EventManager.handle(SimpleNamespace(type=pygame_locals.QUIT))
    assert EventManager.poll() == {"type": "toggle_pause"}
    assert EventManager.poll() == {"type": "switch_file", "to": "next"}
    assert EventManager.poll() == {"type": "switch_file", "to": "prev"}
    assert EventManager.poll() == {"type": "quit"}


def test_unbound_key_is_dropped():
    EventManager.handle(_key(pygame_locals.K_z))
    assert EventManager.poll() is None
