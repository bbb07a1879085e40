"""Tests for shared.logger -- component logger and JSON file output."""
from __future__ import annotations

import json
import logging

from shared.config import GlobalConfig
from shared.logger import ExecviewLogger


class TestExecviewLogger:

    def test_name_and_component(self):
        log = ExecviewLogger("parser")
        assert log.component == "parser"
        assert log.underlying.name == "execview.parser"

    def test_package_root_carries_null_handler(self):
        root = logging.getLogger("execview")
        assert any(isinstance(h, logging.NullHandler) for h in root.handlers)

    def test_bare_logger_leaves_host_configuration(self):
        host = logging.getLogger("execview.hosted")
        handler = logging.StreamHandler()
        host.addHandler(handler)
        host.setLevel(logging.INFO)
        try:
            log = ExecviewLogger("hosted")
            assert log.underlying is host
            assert host.handlers == [handler]
            assert host.level == logging.INFO
            assert host.propagate is True
        finally:
            host.removeHandler(handler)
            host.setLevel(logging.NOTSET)

    def test_rebuilding_replaces_only_own_handlers(self, tmp_path):
        host = logging.getLogger("execview.rebuilt")
        handler = logging.StreamHandler()
        host.addHandler(handler)
        try:
            ExecviewLogger("rebuilt", log_level="INFO", log_file=tmp_path / "a.log")
            log = ExecviewLogger("rebuilt", log_level="INFO", log_file=tmp_path / "b.log")
            files = [h for h in log.underlying.handlers if h is not handler]
            assert handler in log.underlying.handlers
            assert len(files) == 1
            assert files[0].baseFilename.endswith("b.log")
        finally:
            for h in list(host.handlers):
                host.removeHandler(h)
                if h is not handler:
                    h.close()
            host.propagate = True

    def test_json_file_output(self, tmp_path):
        path = tmp_path / "logs" / "execview.jsonl"
        log = ExecviewLogger("jsontest", log_level="DEBUG", log_file=path, json_logs=True)
        with log.operation("sections"):
            log.debug("Decoded %d sections", 31, table_offset=7372)
        log.info("done")
        for handler in log.underlying.handlers:
            handler.flush()

        lines = path.read_text(encoding="utf-8").splitlines()
        first, second = (json.loads(line) for line in lines)
        assert first["message"] == "Decoded 31 sections"
        assert first["level"] == "DEBUG"
        assert first["component"] == "jsontest"
        assert first["operation"] == "sections"
        assert first["extra"] == {"table_offset": 7372}
        assert "operation" not in second
        assert log.underlying.propagate is False

    def test_level_filters_debug(self, tmp_path):
        path = tmp_path / "plain.log"
        log = ExecviewLogger("leveltest", log_level="INFO", log_file=path)
        log.debug("hidden")
        log.warning("shown")
        for handler in log.underlying.handlers:
            handler.flush()
        text = path.read_text(encoding="utf-8")
        assert "hidden" not in text
        assert "WARNING" in text and "shown" in text

    def test_from_config(self, tmp_path):
        settings = GlobalConfig(log_level="ERROR", log_file=str(tmp_path / "x.log"))
        log = ExecviewLogger.from_config("cfgtest", settings)
        assert log.underlying.level == logging.ERROR

    def test_timed_reports_elapsed(self, caplog):
        log = ExecviewLogger("timer", log_level="DEBUG")
        with caplog.at_level(logging.DEBUG, logger="execview.timer"):
            with log.timed("work") as timer:
                pass
        assert timer.elapsed >= 0
        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "Started: work"
        assert messages[1].startswith("Completed: work (")
