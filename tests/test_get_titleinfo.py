import json

from videobot.get_titleinfo import format_title_info, interactive_loop
from videobot.titleinfo import clean_title


def test_format_title_info_is_json():
    data = json.loads(format_title_info(clean_title(["Category"], "Category: Hits")))
    assert data == {
        "title": "Category - Hits",
        "media_title": "Category-Hits",
        "restricted_title_reasons": [
            "actual name begins with 'Category:', putting it in the wrong namespace; "
            "displaytitle used"
        ],
        "original_title": "Category: Hits",
    }


def test_interactive_loop_stops_on_exit_word():
    lines = iter(["  ", "A | B", "Quit", "never read"])
    out = []

    interactive_loop([], read=lambda prompt: next(lines), write=out.append)

    assert len(out) == 1
    assert json.loads(out[0])["title"] == "A - B"


def test_interactive_loop_stops_on_eof():
    def _read(prompt):
        raise EOFError

    out = []
    interactive_loop([], read=_read, write=out.append)
    assert out == []
