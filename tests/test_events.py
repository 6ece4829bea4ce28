import logging

from diagnostics.events import DRAW_FAILED, LoggingEventSink, RecordingEventSink, default_sink


def test_logging_sink_writes_warning(caplog):
    sink = LoggingEventSink()
    with caplog.at_level(logging.WARNING, logger="diagnostics.events"):
        sink(DRAW_FAILED, face_index=2, error="boom")

    (record,) = caplog.records
    assert record.levelno == logging.WARNING
    assert "[draw_failed]" in record.getMessage()
    assert "face_index=2" in record.getMessage()
    assert record.event == DRAW_FAILED
    assert record.fields == {"face_index": 2, "error": "boom"}


def test_recording_sink_keeps_order():
    sink = RecordingEventSink()
    sink("a", x=1)
    sink("b")
    sink("a", x=2)
    assert sink.names() == ["a", "b", "a"]
    assert sink.count("a") == 2
    sink.clear()
    assert sink.events == []


def test_default_sink_logs():
    assert isinstance(default_sink(), LoggingEventSink)
