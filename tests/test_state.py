from topics.services.kb.models import Topic
from topics.services.kb.state import View, resolve
from topics.services.kb.store import TopicStore

CATEGORIZED = TopicStore(
    [
        Topic(title="First", content="<p>one</p>", category="Cat1"),
        Topic(title="Second", content="<p>two</p>", category="Cat2"),
    ]
)
FLAT = TopicStore([Topic(title="Alpha"), Topic(title="Beta")])


def test_initial_state_is_grid() -> None:
    state = resolve(CATEGORIZED)
    assert state.view is View.CATEGORIES_GRID
    assert [c.name for c in state.categories] == ["Cat1", "Cat2"]
    assert state.empty_message_key is None


def test_category_selection() -> None:
    state = resolve(CATEGORIZED, category="Cat1")
    assert state.view is View.CATEGORY_DETAIL
    assert [t.title for t in state.topics] == ["First"]
    assert state.show_back_link


def test_unknown_category_uses_category_empty_message() -> None:
    state = resolve(CATEGORIZED, category="Nope")
    assert state.topics == ()
    assert state.empty_message_key == "no_category_results"


def test_query_wins_over_category() -> None:
    state = resolve(CATEGORIZED, query="second", category="Cat1")
    assert state.view is View.SEARCH_RESULTS
    assert [t.title for t in state.topics] == ["Second"]
    assert state.category == "Cat1"
    assert not state.show_back_link


def test_search_without_results_uses_search_empty_message() -> None:
    state = resolve(CATEGORIZED, query="zzz", category="Cat1")
    assert state.empty_message_key == "no_search_results"


def test_clearing_query_returns_to_selected_category() -> None:
    state = resolve(CATEGORIZED, query="   ", category="Cat2")
    assert state.view is View.CATEGORY_DETAIL
    assert [t.title for t in state.topics] == ["Second"]


def test_query_is_sanitized_for_echo() -> None:
    state = resolve(CATEGORIZED, query='<script>"one"</script>')
    assert state.query == "scriptone/script"
    assert "<" not in state.query


def test_flat_mode_skips_grid() -> None:
    state = resolve(FLAT, all_label="All")
    assert state.view is View.CATEGORY_DETAIL
    assert state.implicit_category
    assert state.category == "All"
    assert [t.title for t in state.topics] == ["Alpha", "Beta"]
    assert not state.show_back_link


def test_flat_mode_any_category_lists_everything() -> None:
    state = resolve(FLAT, category="Whatever")
    assert [t.title for t in state.topics] == ["Alpha", "Beta"]


def test_empty_store_lists_nothing_with_category_message() -> None:
    state = resolve(TopicStore([]))
    assert state.view is View.CATEGORY_DETAIL
    assert state.empty_message_key == "no_category_results"
