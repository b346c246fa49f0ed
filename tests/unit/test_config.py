import pytest
from pydantic import ValidationError

from app.models.schemas import ConsumerMode, FileExistsMode
from app.utils.config import FileSinkSettings, FileSourceSettings, TimeUnit, TriggerSettings


def test_source_defaults():
    settings = FileSourceSettings()

    assert settings.consumer.mode is ConsumerMode.CONTENTS
    assert settings.consumer.with_markers is False
    assert settings.trigger.delay_seconds == 1.0
    assert settings.prevent_duplicates is True
    assert settings.content_type == "application/json"


def test_source_nested_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("FILE_SOURCE_DIRECTORY", str(tmp_path))
    monkeypatch.setenv("FILE_SOURCE_CONSUMER__MODE", "lines")
    monkeypatch.setenv("FILE_SOURCE_CONSUMER__WITH_MARKERS", "true")
    monkeypatch.setenv("FILE_SOURCE_TRIGGER__FIXED_DELAY", "100")
    monkeypatch.setenv("FILE_SOURCE_TRIGGER__TIME_UNIT", "milliseconds")

    settings = FileSourceSettings()

    assert settings.directory == tmp_path
    assert settings.consumer.mode is ConsumerMode.LINES
    assert settings.consumer.with_markers is True
    assert settings.trigger.time_unit is TimeUnit.MILLISECONDS
    assert settings.trigger.delay_seconds == pytest.approx(0.1)


def test_pattern_and_regex_are_exclusive():
    with pytest.raises(ValidationError):
        FileSourceSettings(filename_pattern="*.txt", filename_regex=".*txt")


def test_invalid_regex_rejected():
    with pytest.raises(ValidationError):
        FileSourceSettings(filename_regex="(unclosed")


def test_trigger_delays():
    trigger = TriggerSettings(fixed_delay=2, time_unit="MINUTES", initial_delay=500)

    assert trigger.delay_seconds == 120
    assert trigger.initial_delay_seconds == 30000

    with pytest.raises(ValidationError):
        TriggerSettings(fixed_delay=0)


def test_sink_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("FILE_SINK_DIRECTORY", str(tmp_path))
    monkeypatch.setenv("FILE_SINK_NAME_EXPRESSION", "payload[:4]")
    monkeypatch.setenv("FILE_SINK_BINARY", "true")
    monkeypatch.setenv("FILE_SINK_MODE", "APPEND")

    settings = FileSinkSettings()

    assert settings.directory == tmp_path
    assert settings.name == "file-sink"
    assert settings.name_expression == "payload[:4]"
    assert settings.binary is True
    assert settings.mode is FileExistsMode.APPEND
