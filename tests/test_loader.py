from pathlib import Path

import pytest
import requests  # type: ignore[import-untyped]

from topics.exceptions import ConfigurationError, LoadError
from topics.services.kb import loader
from topics.services.kb.loader import (
    InputShape,
    classify,
    decode_records,
    detect_format,
    load,
    load_source,
)

FIXTURES = Path(__file__).parent / "fixtures"


class FakeResponse:
    def __init__(self, status_code: int | None, text: str = "") -> None:
        self.status_code = status_code
        self.text = text


def test_detect_format_by_extension() -> None:
    assert detect_format("faq.json") == "json"
    assert detect_format("faq.YML") == "yaml"
    assert detect_format("faq.yaml") == "yaml"
    assert detect_format("faq.EDN") == "edn"
    assert detect_format("guide.md") == "markdown"
    assert detect_format("page.htm") == "html"
    assert detect_format("https://example.org/data/faq.yaml?v=2") == "yaml"
    assert detect_format("no-extension") == "json"


def test_detect_format_forced_and_invalid() -> None:
    assert detect_format("faq.json", "yaml") == "yaml"
    with pytest.raises(ConfigurationError):
        detect_format("faq.json", "toml")


def test_classify_shapes() -> None:
    assert classify([]) is InputShape.TOPIC_LIST
    assert classify({"title": "x"}) is InputShape.SINGLE_TOPIC
    assert classify({"type": "document", "children": []}) is InputShape.DOCUMENT_TREE
    with pytest.raises(LoadError):
        classify("just a string")
    with pytest.raises(LoadError):
        classify(42)


def test_load_json_fixture_filters_and_categorizes() -> None:
    result = load_source(str(FIXTURES / "topics.json"))
    titles = [topic.title for topic in result.topics]
    assert titles == ["Install the tool", "Café settings", "Troubleshooting", "Update the tool"]
    assert result.rejected == 3
    assert result.headers == 1
    categories = [topic.category for topic in result.topics]
    assert categories == ["Basics", "Kitchen", "Support", "Basics"]
    assert result.topics[0].path == ("Basics", "Install")


def test_load_yaml_flat_list() -> None:
    result = load_source(str(FIXTURES / "flat.yaml"))
    assert len(result.topics) == 3
    assert all(topic.category is None for topic in result.topics)
    assert result.topics[1].title == "Où trouver l'aide ?"


def test_single_object_is_wrapped() -> None:
    result = load({"title": "Alone", "content": "<p>x</p>"})
    assert [topic.title for topic in result.topics] == ["Alone"]


def test_explicit_category_wins_over_path() -> None:
    topics, rejected, headers = decode_records(
        [{"title": "A", "category": "Explicit", "path": ["First", "Second"]}]
    )
    assert topics[0].category == "Explicit"
    assert (rejected, headers) == (0, 0)


def test_single_segment_path_is_kept_in_flat_data() -> None:
    topics, _, headers = decode_records([{"title": "A", "path": ["Only"]}, {"title": "B"}])
    assert [t.category for t in topics] == [None, None]
    assert headers == 0


def test_scalar_content_is_stringified() -> None:
    topics, _, _ = decode_records([{"title": 12, "content": 3.5}])
    assert topics[0].title == "12"
    assert topics[0].content == "3.5"


def test_unparseable_content_raises(tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("[{", encoding="utf-8")
    with pytest.raises(LoadError):
        load_source(str(bad))


def test_top_level_scalar_raises(tmp_path: Path) -> None:
    bad = tmp_path / "scalar.yaml"
    bad.write_text("just text\n", encoding="utf-8")
    with pytest.raises(LoadError, match="list or map"):
        load_source(str(bad))


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(LoadError):
        load_source(str(tmp_path / "missing.json"))


def test_forced_unknown_format_is_load_error(tmp_path: Path) -> None:
    with pytest.raises(LoadError):
        load_source(str(FIXTURES / "topics.json"), fmt="toml")


def test_remote_source_is_fetched(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_get(url: str, headers: dict, timeout: float) -> FakeResponse:
        calls.append((url, timeout))
        return FakeResponse(200, '[{"title": "Remote", "path": ["Web", "Remote"]}]')

    monkeypatch.setattr(loader.requests, "get", fake_get)
    result = load_source("https://example.org/faq.json", timeout=5.0)
    assert [topic.title for topic in result.topics] == ["Remote"]
    assert calls == [("https://example.org/faq.json", 5.0)]


@pytest.mark.parametrize("status", [404, 500, 302, None])
def test_remote_non_2xx_is_fatal(monkeypatch: pytest.MonkeyPatch, status: int | None) -> None:
    monkeypatch.setattr(loader.requests, "get", lambda *a, **kw: FakeResponse(status, "[]"))
    with pytest.raises(LoadError) as excinfo:
        load_source("http://example.org/faq.json")
    assert excinfo.value.details["http_status"] == status


def test_remote_transport_error_is_fatal(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def boom(*args: object, **kwargs: object) -> FakeResponse:
        calls.append(1)
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr(loader.requests, "get", boom)
    with pytest.raises(LoadError, match="unreachable"):
        load_source("https://example.org/faq.json")
    assert len(calls) == 1


def test_edn_topics_file() -> None:
    result = load_source(str(FIXTURES / "topics.edn"))
    assert [(t.title, t.category) for t in result.topics] == [
        ("Install the tool", "Basics"),
        ("Troubleshooting", "Support"),
    ]
    assert result.topics[0].path == ("Basics", "Install")
    assert result.rejected == 1
    assert result.headers == 1


def test_edn_keywords_become_plain_values() -> None:
    parsed = loader.parse_content('{:type :document :children [{:title "A" :content "x"}]}', "edn")
    assert parsed == {"type": "document", "children": [{"title": "A", "content": "x"}]}
    assert classify(parsed) is InputShape.DOCUMENT_TREE


def test_malformed_edn_is_load_error(tmp_path: Path) -> None:
    bad = tmp_path / "bad.edn"
    bad.write_text("[{:title ", encoding="utf-8")
    with pytest.raises(LoadError, match="edn"):
        load_source(str(bad))
