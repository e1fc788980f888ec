import pytest

from videobot.titleinfo import (
    BRACKETS_REASON,
    FALSE_SUBPAGE_REASON,
    HASH_REASON,
    PIPE_REASON,
    TitleInfo,
    clean_title,
    namespace_reason,
    unescape_html,
)

NAMESPACES = {"", "Talk", "User", "File", "Template", "Category"}


@pytest.mark.parametrize("raw", ["", None])
def test_empty_title_returns_sentinel(raw):
    info = clean_title(NAMESPACES, raw)
    assert info == TitleInfo("", "", (), "")
    assert info == TitleInfo.empty()


@pytest.mark.parametrize(
    "raw",
    [
        "Plain Title",
        "Episode 12 - The Return",
        "Q&A with the team",
        "Ünïcödé Title ✓",
        "Ends with colon:",
    ],
)
def test_clean_titles_pass_through(raw):
    info = clean_title(NAMESPACES, raw)
    assert info.title == raw
    assert info.original_title == raw
    assert info.restricted_title_reasons == ()


def test_entities_and_curly_quotes_normalized():
    info = clean_title(NAMESPACES, "Rock &amp; Roll ‘Live’ “Now” &lt;3 &gt; &quot;x&quot; it&#39;s")
    assert info.title == "Rock & Roll 'Live' \"Now\" <3 > \"x\" it's"
    assert info.restricted_title_reasons == ()


def test_unescape_is_single_pass_and_limited():
    assert unescape_html("&amp;lt;") == "&lt;"
    assert unescape_html("&nbsp;&copy;") == "&nbsp;&copy;"
    assert unescape_html("&#124;") == "&#124;"


def test_numeric_reference_triggers_hash_rule():
    info = clean_title(NAMESPACES, "A &#124; B")
    assert info.title == "A &124; B"
    assert info.original_title == "A &#124; B"
    assert info.restricted_title_reasons == (HASH_REASON,)


def test_pipe_is_replaced_and_escaped_for_display():
    info = clean_title(NAMESPACES, "Best Of | Part 2 | Final")
    assert info.title == "Best Of - Part 2 - Final"
    assert info.original_title == "Best Of {{!}} Part 2 {{!}} Final"
    assert info.restricted_title_reasons == (PIPE_REASON,)
    assert "|" not in info.title


def test_hash_overwrites_pipe_display_form():
    info = clean_title(NAMESPACES, "A|B #1")
    assert info.title == "A-B 1"
    assert info.original_title == "A-B #1"
    assert info.restricted_title_reasons == (PIPE_REASON, HASH_REASON)


def test_square_brackets_become_parentheses():
    info = clean_title(NAMESPACES, "Trailer [HD]")
    assert info.title == "Trailer (HD)"
    assert info.original_title == "Trailer [HD]"
    assert info.media_title == "Trailer (HD)"
    assert info.restricted_title_reasons == (BRACKETS_REASON,)


def test_slash_is_detected_but_kept():
    info = clean_title(NAMESPACES, "Before/After")
    assert info.title == "Before/After"
    assert info.original_title == "Before/After"
    assert info.media_title == "Before-After"
    assert info.restricted_title_reasons == (FALSE_SUBPAGE_REASON,)


def test_reasons_follow_rule_order():
    info = clean_title(NAMESPACES, "Template: [Live] #3 | A/B")
    assert info.restricted_title_reasons == (
        PIPE_REASON,
        HASH_REASON,
        BRACKETS_REASON,
        FALSE_SUBPAGE_REASON,
        namespace_reason("Template"),
    )
    assert info.title == "Template - (Live) 3 - A/B"
    assert info.original_title == "Template: (Live) 3 - A/B"
    assert info.media_title == "Template-(Live) 3 - A-B"


def test_lowercase_title_is_not_uppercased():
    info = clean_title(NAMESPACES, "lowercase start")
    assert info.title == "lowercase start"
    assert info.original_title == "lowercase start"
    assert info.media_title == "Lowercase start"
    assert info.restricted_title_reasons == ()


def test_namespace_collision_rewrites_title():
    info = clean_title({"Category"}, "Category: Best Videos")
    assert info.title == "Category - Best Videos"
    assert info.media_title == "Category-Best Videos"
    assert info.original_title == "Category: Best Videos"
    assert info.restricted_title_reasons == (
        "actual name begins with 'Category:', putting it in the wrong namespace; "
        "displaytitle used",
    )


def test_namespace_collision_without_space():
    info = clean_title({"File"}, "File:Missing")
    assert info.title == "File - Missing"
    assert info.media_title == "File-Missing"


def test_colon_tolerates_repeated_spaces():
    info = clean_title({"User"}, "User:    Spotlight")
    assert info.title == "User - Spotlight"


def test_non_namespace_colon_is_harmless():
    info = clean_title({"Category"}, "Foo: Bar")
    assert info.title == "Foo: Bar"
    assert info.media_title == "Foo-Bar"
    assert info.restricted_title_reasons == ()


def test_namespace_match_is_case_sensitive():
    info = clean_title({"Category"}, "category: stuff")
    assert info.title == "category: stuff"
    assert info.media_title == "Category-stuff"
    assert info.restricted_title_reasons == ()


def test_namespaces_accept_any_iterable():
    info = clean_title(["Help", "Talk"], "Talk: Show")
    assert info.title == "Talk - Show"


@pytest.mark.parametrize(
    "raw",
    [
        "Plain Title",
        "A | B",
        "#1 Hit [Remix]",
        "Category: Best Videos",
        "Template: x: y",
        "some/path",
        "lower | case #tag",
    ],
)
def test_cleaning_is_idempotent(raw):
    once = clean_title(NAMESPACES, raw).title
    assert clean_title(NAMESPACES, once).title == once


@pytest.mark.parametrize(
    "raw",
    ["a|b", "[x]", "#x#", "Category: a|b[c]#d", "x / y", "s"],
)
def test_title_invariants(raw):
    info = clean_title(NAMESPACES, raw)
    for ch in "|#[]":
        assert ch not in info.title
    assert info.media_title
    assert info.media_title[:1] == info.media_title[:1].upper()


def test_hash_strip_can_form_entity_decoded_on_next_pass():
    once = clean_title(set(), "&l#t;3 Fans")
    assert once.title == "&lt;3 Fans"
    assert once.restricted_title_reasons == (HASH_REASON,)
    assert clean_title(set(), once.title).title == "<3 Fans"
