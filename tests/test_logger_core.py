import logging

from rich.logging import RichHandler


def _file_handlers():
    return [
        h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)
    ]


def test_logger_creates_command_log(tmp_path, monkeypatch):
    monkeypatch.setenv("DISCOTUBE_COMMAND", "auth")

    from logger import init_logging, get_logger

    logfile = init_logging()
    get_logger("test").info("hello")

    logs = list((tmp_path / "logs").rglob("*.log"))
    assert logs == [logfile]
    assert logfile.name.startswith("auth-")
    assert "| [INFO] | test | hello" in logfile.read_text(encoding="utf-8")


def test_logger_artist_scoped(tmp_path, monkeypatch):
    monkeypatch.setenv("DISCOTUBE_COMMAND", "collect")
    monkeypatch.setenv("DISCOTUBE_ARTIST_ID", "7")

    from logger import init_logging

    logfile = init_logging()

    assert logfile.parent == tmp_path / "logs" / "collect" / "7"


def test_init_logging_twice_does_not_stack_handlers(monkeypatch):
    monkeypatch.setenv("DISCOTUBE_COMMAND", "push")

    from logger import init_logging

    init_logging()
    init_logging()

    assert len(_file_handlers()) == 1


def test_quiet_attaches_no_console_handler(monkeypatch):
    monkeypatch.setenv("DISCOTUBE_COMMAND", "push")
    monkeypatch.setenv("DISCOTUBE_QUIET", "1")

    from logger import init_logging

    init_logging()

    root = logging.getLogger()
    assert not any(isinstance(h, RichHandler) for h in root.handlers)
    assert len(_file_handlers()) == 1


def test_verbose_forces_debug(monkeypatch):
    monkeypatch.setenv("DISCOTUBE_COMMAND", "push")
    monkeypatch.setenv("DISCOTUBE_VERBOSE", "1")

    from logger import init_logging

    init_logging()

    assert logging.getLogger().level == logging.DEBUG
