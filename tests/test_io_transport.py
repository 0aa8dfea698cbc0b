# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for the console/file transport."""

import json
from io import StringIO
from pathlib import Path

import pytest

from copilot_eventlog.event import ExceptionInfo, Frame, StructuredEvent
from copilot_eventlog.exceptions import TransportConfigurationError
from copilot_eventlog.io_transport import (
    Colors,
    IOTransport,
    create_console_transport,
    create_file_transport,
    render_contexts,
    render_line,
)
from copilot_eventlog.severity import Severity


def _event(severity=Severity.INFO, message="M", contexts=None, error=None, frames=()):
    exception = ExceptionInfo.from_error(error, tuple(frames)) if error is not None else None
    return StructuredEvent(severity=severity, message=message, contexts=contexts or {}, exception=exception)


FRAMES = (
    Frame("app.main", "main", "/srv/app/main.py", 7, "    run()  "),
    Frame("app.jobs", "run", "/srv/app/jobs.py", 31, None),
)


class TestRendering:
    """Tests for line-mode rendering."""

    def test_message_and_context(self):
        line = render_line(_event(contexts={"request": {"k": "v"}}))

        assert "M" in line
        assert " k=v" in line
        assert "Stacktrace:" not in line

    def test_error_text_and_stacktrace(self):
        line = render_line(
            _event(contexts={"request": {"k": "v"}}, error=RuntimeError("boom"), frames=FRAMES)
        )

        assert line.startswith("M | boom k=v")
        assert "\nStacktrace:\n" in line
        assert "\t/srv/app/main.py:7 >>  run()" in line
        assert line.endswith("\t/srv/app/jobs.py:31")

    def test_reserved_groups_are_hidden(self):
        event = _event(
            contexts={
                "os": {"name": "linux"},
                "device": {"arch": "x86_64"},
                "runtime": {"version": "3.12"},
                "app": {"k": "v"},
            }
        )

        line = render_line(event)

        assert "os" in event.contexts
        assert "name=" not in line
        assert "arch=" not in line
        assert "version=" not in line
        assert " k=v" in line

    def test_non_string_values_are_json_encoded(self):
        rendered = render_contexts({"g": {"count": 3, "ok": True, "ratio": 0.5, "none": None}})

        assert rendered == " count=3 ok=true ratio=0.5 none=null"

    def test_context_key_color(self):
        colors = Colors(reset="<r>", context_key="<k>")

        assert render_contexts({"g": {"k": "v"}}, colors) == " <k>k=<r>v"


class TestIOTransport:
    """Tests for IOTransport delivery."""

    def test_line_layout(self, streams):
        transport, stdout, _ = streams
        event = _event(contexts={"request": {"k": "v"}})

        transport.receive(event)

        timestamp = event.timestamp.astimezone().strftime("%H:%M:%S")
        assert stdout.getvalue() == f"INF {timestamp} M k=v\n"

    @pytest.mark.parametrize(
        "severity,label",
        [(Severity.DEBUG, "DBG"), (Severity.INFO, "INF"), (Severity.WARN, "WRN")],
    )
    def test_low_severities_go_to_stdout(self, streams, severity, label):
        transport, stdout, stderr = streams

        transport.receive(_event(severity=severity))

        assert stdout.getvalue().startswith(label + " ")
        assert stderr.getvalue() == ""

    @pytest.mark.parametrize("severity,label", [(Severity.ERROR, "ERR"), (Severity.FATAL, "FTL")])
    def test_high_severities_go_to_stderr(self, streams, severity, label):
        transport, stdout, stderr = streams

        transport.receive(_event(severity=severity, error=ValueError("bad"), frames=FRAMES))

        assert stdout.getvalue() == ""
        output = stderr.getvalue()
        assert output.startswith(label + " ")
        assert " | bad" in output
        assert "Stacktrace:" in output
        assert output.endswith("\n")

    def test_below_threshold_is_dropped(self, streams):
        transport, stdout, stderr = streams
        transport.set_level("WARN")

        transport.receive(_event(severity=Severity.INFO))
        transport.receive(_event(severity=Severity.DEBUG))

        assert stdout.getvalue() == ""
        assert stderr.getvalue() == ""

    def test_raw_mode_dumps_json(self, streams):
        transport, stdout, _ = streams
        transport.configure({"raw": True})
        event = _event(contexts={"request": {"k": "v"}})

        transport.receive(event)

        label, _time, body = stdout.getvalue().split(" ", 2)
        assert label == "INF"
        data = json.loads(body)
        assert data["message"] == "M"
        assert data["contexts"] == {"request": {"k": "v"}}
        assert data["event_id"] == event.event_id

    def test_configure_level(self, streams):
        transport, _, _ = streams

        transport.configure({"level": "error"})

        assert transport.min_level is Severity.ERROR

    def test_flush_reports_success(self, streams):
        transport, _, _ = streams

        assert transport.flush(0.0) is True

    def test_default_streams_resolve_at_write_time(self, capsys):
        transport = IOTransport(colors=Colors())

        transport.receive(_event(message="to stdout"))
        transport.receive(_event(severity=Severity.ERROR, message="to stderr"))

        captured = capsys.readouterr()
        assert "to stdout" in captured.out
        assert "to stderr" in captured.err

    def test_console_transport_uses_colors(self):
        stdout = StringIO()
        transport = create_console_transport(stdout=stdout, stderr=StringIO())

        transport.receive(_event(contexts={"g": {"k": "v"}}))

        output = stdout.getvalue()
        assert output.startswith("\033[92mINF\033[0m ")
        assert "\033[36mk=\033[0mv" in output

    def test_set_colors(self, streams):
        transport, stdout, _ = streams

        transport.set_colors(Colors(levels={Severity.INFO: "<info>"}))
        transport.receive(_event())

        assert stdout.getvalue().startswith("<info>INF ")


class TestFileTransport:
    """Tests for file-backed transports."""

    def test_writes_to_separate_files(self, tmp_path: Path):
        out_file, err_file = tmp_path / "app.log", tmp_path / "app.err"
        transport = create_file_transport(str(out_file), str(err_file))

        transport.receive(_event(message="normal"))
        transport.receive(_event(severity=Severity.ERROR, message="broken", error=OSError("disk")))
        transport.close()

        out_text = out_file.read_text(encoding="utf-8")
        err_text = err_file.read_text(encoding="utf-8")
        assert "normal" in out_text
        assert "broken" not in out_text
        assert "broken | disk" in err_text
        assert "\033[" not in out_text + err_text

    def test_file_lines_include_date(self, tmp_path: Path):
        out_file = tmp_path / "app.log"
        transport = create_file_transport(str(out_file))
        event = _event()

        transport.receive(event)
        transport.close()

        expected = event.timestamp.astimezone().strftime("%Y/%m/%d %H:%M:%S")
        assert out_file.read_text(encoding="utf-8") == f"INF {expected} M\n"

    def test_same_path_shares_one_handle(self, tmp_path: Path):
        log_file = tmp_path / "app.log"
        transport = create_file_transport(str(log_file), str(log_file))

        assert transport.stream_for(Severity.INFO) is transport.stream_for(Severity.ERROR)

        transport.receive(_event(message="first"))
        transport.receive(_event(severity=Severity.ERROR, message="second"))
        transport.close()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("INF ")
        assert lines[1].startswith("ERR ")

    def test_appends_to_existing_file(self, tmp_path: Path):
        log_file = tmp_path / "app.log"
        log_file.write_text("existing line\n", encoding="utf-8")
        transport = create_file_transport(str(log_file))

        transport.receive(_event(message="appended"))
        transport.close()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "existing line"
        assert lines[1].endswith("appended")

    def test_creates_parent_directories(self, tmp_path: Path):
        log_file = tmp_path / "nested" / "dir" / "app.log"

        transport = create_file_transport(str(log_file))
        transport.close()

        assert log_file.exists()

    def test_unopenable_file_raises(self, tmp_path: Path):
        with pytest.raises(TransportConfigurationError, match="Cannot open log file"):
            create_file_transport(str(tmp_path))

    def test_close_is_idempotent(self, tmp_path: Path):
        transport = create_file_transport(str(tmp_path / "app.log"))

        transport.close()
        transport.close()

        assert transport.flush(1.0) is True
