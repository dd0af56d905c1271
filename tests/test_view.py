"""Test viewport scrolling, line rendering and selection highlighting."""

import pytest

from pledit.model import TextBuffer
from pledit.view import Box, Viewport, char_repr, display_column

from fake_terminal import FakeScreen


def make_view(lines, width=10, height=5, **kwargs):
    screen = FakeScreen(width=width, height=height)
    buf = TextBuffer(lines)
    view = Viewport(buf, screen, Box(1, 1, height, width), **kwargs)
    return buf, view, screen


class TestRendering:
    def test_lines_and_end_of_text(self):
        buf, view, screen = make_view(["abc", "de"])
        assert view.redisplay()
        assert screen.line(1) == "abc"
        assert screen.line(2) == "de"
        assert screen.line(3) == "~"
        assert screen.line(5) == "~"
        assert (screen.row, screen.col) == (1, 1)

    def test_row_is_cleared(self):
        buf, view, screen = make_view(["abcdef"])
        view.redisplay()
        buf.set_cursor(1, 1)
        buf.delete(1, 5)
        view.redisplay()
        assert screen.line(1) == "ef"

    def test_overflow_marker(self):
        buf, view, screen = make_view(["abcdefghijkl"])
        view.redisplay()
        assert screen.line(1) == "abcdefghi»"
        assert view.render_line(1, "abcdefghijkl") == 10

    def test_short_line_returns_none(self):
        buf, view, screen = make_view(["abc"])
        assert view.render_line(1, "abc") is None

    def test_tab_expansion(self):
        buf, view, screen = make_view(["a\tb"], width=20)
        buf.set_cursor(1, 3)
        view.redisplay()
        assert screen.line(1) == "a       b"
        assert view.cursor_col == 9

    def test_non_displayable_characters(self):
        buf, view, screen = make_view(["a\x01b\x85c\x7f"])
        view.redisplay()
        assert screen.line(1) == "a·b·c·"

    def test_box_offset_and_status(self):
        screen = FakeScreen(width=20, height=6)
        buf = TextBuffer(["hello"])
        view = Viewport(buf, screen, Box(2, 1, 4, 20), status_row=1)
        buf.set_cursor(1, 3)
        view.redisplay("cur=1,3")
        assert screen.line(1) == "cur=1,3"
        assert screen.style_at(1, 1) == "status"
        assert screen.line(2) == "hello"
        assert (screen.row, screen.col) == (2, 3)


def test_char_repr():
    assert char_repr("x", 0) == "x"
    assert char_repr("\t", 0) == " " * 8
    assert char_repr("\t", 5) == "   "
    assert char_repr("\t", 2, tab_width=4) == "  "
    assert char_repr("\x1b", 0) == "·"
    assert char_repr("\x9f", 0) == "·"
    assert char_repr("\xa0", 0) == "\xa0"


def test_display_column():
    assert display_column("abc", 1) == 0
    assert display_column("abc", 4) == 3
    assert display_column("\t\tx", 3) == 16
    assert display_column("ab\tx", 4, tab_width=4) == 4


class TestRedrawDecisions:
    def test_repaint_once(self):
        buf, view, screen = make_view(["abc", "de"])
        assert view.redisplay()
        assert not view.redisplay()

    def test_cursor_move_inside_box_does_not_repaint(self):
        buf, view, screen = make_view(["abc", "de"])
        view.redisplay()
        writes = screen.writes
        buf.set_cursor(2, 2)
        assert not view.redisplay()
        assert screen.writes == writes
        assert (view.cursor_row, view.cursor_col) == (2, 2)
        assert (screen.row, screen.col) == (2, 2)

    def test_edit_repaints(self):
        buf, view, screen = make_view(["abc"])
        view.redisplay()
        buf.insert("x")
        assert view.redisplay()
        assert screen.line(1) == "xabc"

    def test_active_selection_always_repaints(self):
        buf, view, screen = make_view(["abc"])
        buf.set_mark()
        assert view.redisplay()
        assert view.redisplay()

    def test_full_redisplay(self):
        buf, view, screen = make_view(["abc"])
        view.redisplay()
        assert view.full_redisplay()


class TestVerticalScroll:
    def setup_method(self):
        lines = [f"line{i}" for i in range(1, 21)]
        self.buf, self.view, self.screen = make_view(lines)
        self.view.redisplay()

    def test_cursor_below_box_is_centered(self):
        self.buf.set_cursor(10, 1)
        assert self.view.redisplay()
        assert self.view.top_line == 8
        assert self.screen.line(1) == "line8"
        assert self.view.cursor_row == 3

    def test_no_scroll_inside_box(self):
        self.buf.set_cursor(10, 1)
        self.view.redisplay()
        self.buf.set_cursor(12, 1)
        assert not self.view.redisplay()
        assert self.view.top_line == 8

    def test_scroll_up_clamps_to_first_line(self):
        self.buf.set_cursor(10, 1)
        self.view.redisplay()
        self.buf.set_cursor(2, 1)
        assert self.view.redisplay()
        assert self.view.top_line == 1

    def test_last_line_shows_end_of_text(self):
        self.buf.set_cursor(20, 1)
        self.view.redisplay()
        assert self.view.top_line == 18
        assert self.screen.line(3) == "line20"
        assert self.screen.line(4) == "~"

    def test_page_size(self):
        assert self.view.page_size() == 3


class TestHorizontalScroll:
    def test_stride(self):
        buf, view, screen = make_view(["x" * 100], width=80)
        buf.set_cursor(1, 85)
        assert view.redisplay()
        assert view.hscroll == 40
        assert view.cursor_col == 45

    def test_no_scroll_left_of_last_column(self):
        buf, view, screen = make_view(["x" * 100], width=80)
        buf.set_cursor(1, 79)
        view.redisplay()
        assert view.hscroll == 0
        buf.set_cursor(1, 80)
        assert view.redisplay()
        assert view.hscroll == 40

    def test_stride_capped_by_narrow_box(self):
        buf, view, screen = make_view(["abcdefghijklmnopqrstuvwxyz"])
        buf.set_cursor(1, 12)
        view.redisplay()
        assert view.hscroll == 9
        assert view.cursor_col == 3
        assert screen.line(1) == "jklmnopqr»"

    def test_custom_stride(self):
        buf, view, screen = make_view(["abcdefghijklmnopqrstuvwxyz"], hscroll_step=4)
        buf.set_cursor(1, 12)
        view.redisplay()
        assert view.hscroll == 4
        assert screen.line(1) == "efghijklm»"

    def test_scroll_back(self):
        buf, view, screen = make_view(["x" * 100], width=80)
        buf.set_cursor(1, 85)
        view.redisplay()
        buf.set_cursor(1, 1)
        assert view.redisplay()
        assert view.hscroll == 0


class TestSelection:
    @pytest.mark.parametrize("mark,cursor", [((1, 3), (1, 7)), ((1, 7), (1, 3))])
    def test_single_line(self, mark, cursor):
        buf, view, screen = make_view(["hello world"], width=20)
        buf.set_cursor(*mark)
        buf.set_mark()
        buf.set_cursor(*cursor)
        view.redisplay()
        assert screen.styled(1, "selection") == "llo "
        assert screen.style_at(1, 2) == "normal"
        assert screen.style_at(1, 7) == "normal"

    @pytest.mark.parametrize("mark,cursor", [((1, 2), (3, 2)), ((3, 2), (1, 2))])
    def test_multi_line(self, mark, cursor):
        buf, view, screen = make_view(["abc", "def", "ghi", "jkl"])
        buf.set_cursor(*mark)
        buf.set_mark()
        buf.set_cursor(*cursor)
        view.redisplay()
        assert screen.styled(1, "selection") == "bc"
        assert screen.styled(2, "selection") == "def"
        assert screen.styled(3, "selection") == "g"
        assert screen.styled(4, "selection") == ""

    def test_cleared_selection_is_unstyled(self):
        buf, view, screen = make_view(["abc"])
        buf.set_mark()
        buf.set_cursor(1, 3)
        view.redisplay()
        buf.clear_mark()
        view.redisplay()
        assert screen.styled(1, "selection") == ""
