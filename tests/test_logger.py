from __future__ import annotations

import logging
import warnings
from pathlib import Path

from ctxassist.logger import (
    LogManager,
    configure_logging,
    get_log_manager,
    init_log_manager,
    logger,
)


def test_log_manager_captures_structured_events() -> None:
    manager = init_log_manager(max_entries=None)
    assert isinstance(manager, LogManager)
    assert get_log_manager() is manager
    manager.clear()

    logger.warning("suggestion_provider_failed", trigger="i need", generation=3)

    records = manager.find("suggestion_provider_failed")
    assert len(records) == 1
    assert records[0].level == logging.WARNING
    assert records[0].logger_name == "ctxassist"
    assert "trigger=i need" in records[0].message
    assert "generation=3" in records[0].message


def test_log_manager_trims_to_max_entries() -> None:
    manager = LogManager(max_entries=2)
    base = logging.getLogger("ctxassist.tests")
    for index in range(4):
        manager.add_record(
            base.makeRecord("ctxassist.tests", logging.INFO, __file__, 0, f"m{index}", (), None)
        )
    assert [r.message for r in manager.get_records()] == ["m2", "m3"]


def test_configure_logging_writes_file_and_captures_warnings(tmp_path: Path) -> None:
    package_logger = logging.getLogger("ctxassist")
    saved_handlers = list(package_logger.handlers)
    saved_level = package_logger.level
    saved_propagate = package_logger.propagate
    saved_showwarning = warnings.showwarning
    log_file = tmp_path / "ctxassist.log"
    try:
        configure_logging(level="info", log_file=log_file)
        assert package_logger.level == logging.INFO

        logger.info("settings_loaded", preset="editor")
        logger.debug("suggestion_result_stale")
        warnings.warn("legacy option", UserWarning)
        for handler in package_logger.handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "settings_loaded" in text
        assert "suggestion_result_stale" not in text
        assert "legacy option" in text
    finally:
        for handler in list(package_logger.handlers):
            if handler not in saved_handlers:
                package_logger.removeHandler(handler)
                handler.close()
        package_logger.setLevel(saved_level)
        package_logger.propagate = saved_propagate
        warnings.showwarning = saved_showwarning
