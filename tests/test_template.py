"""Tests for token substitution in the profile template."""

from __future__ import annotations

from profile_pdf.renderer.template import (
    LIST_FIELDS,
    format_field,
    render,
    unresolved_tokens,
)


class TestUnknownTokens:
    def test_missing_key_keeps_token(self):
        assert render("<h1>{{name}}</h1>", {}) == "<h1>{{name}}</h1>"

    def test_missing_key_left_exactly_as_written(self):
        assert render("<p>{{ region }}</p>", {}) == "<p>{{ region }}</p>"
        assert render("{{  region}}", {}) == "{{  region}}"

    def test_none_value_renders_null(self):
        assert render("{{name}}", {"name": None}) == "null"

    def test_none_list_value_renders_null_paragraph(self):
        assert render("{{team}}", {"team": None}) == "<p>null</p>"

    def test_surrounding_text_untouched(self):
        template = "<p>Hello {{ name }}, from {{ unknown }}!</p>"
        assert render(template, {"name": "Ana"}) == "<p>Hello Ana, from {{ unknown }}!</p>"

    def test_non_token_braces_pass_through(self):
        template = "<style>p { color: red; }</style>{{ not-a-token }}{{}}"
        assert render(template, {"not": "x"}) == template


class TestListFields:
    def test_multi_line_becomes_list(self):
        result = render("{{interests}}", {"interests": "a\n- b\n \nc"})
        assert result == "<ul><li>a</li><li>b</li><li>c</li></ul>"

    def test_single_line_becomes_paragraph(self):
        assert render("{{tasks}}", {"tasks": "solo"}) == "<p>solo</p>"

    def test_single_line_with_blank_lines(self):
        assert render("{{trips}}", {"trips": "\n  solo  \n\n"}) == "<p>solo</p>"

    def test_single_line_keeps_marker(self):
        # Only list items have their "- " stripped
        assert render("{{team}}", {"team": "- Eco club"}) == "<p>- Eco club</p>"

    def test_blank_value_gives_empty_list(self):
        assert render("{{webinars}}", {"webinars": "   \n  "}) == "<ul></ul>"

    def test_empty_string_gives_empty_list(self):
        assert render("{{position}}", {"position": ""}) == "<ul></ul>"

    def test_only_one_marker_stripped(self):
        result = render("{{tasks}}", {"tasks": "- - nested\n-  spaced"})
        assert result == "<ul><li>- nested</li><li>spaced</li></ul>"

    def test_number_value(self):
        assert render("{{trips}}", {"trips": 3}) == "<p>3</p>"

    def test_list_field_set(self):
        assert LIST_FIELDS == {
            "interests", "webinars", "team", "position",
            "trips", "tasks", "leadershipAcademy",
        }


class TestPlainFields:
    def test_newlines_to_br(self):
        assert render("{{futurePlans}}", {"futurePlans": "x\ny"}) == "x<br>y"

    def test_no_escaping(self):
        value = "<b>bold</b> & more"
        assert render("{{storyText}}", {"storyText": value}) == value

    def test_zero_renders(self):
        assert render("{{previousTasks}}", {"previousTasks": 0}) == "0"

    def test_empty_string_renders_empty(self):
        assert render("[{{storyLink}}]", {"storyLink": ""}) == "[]"

    def test_integral_float(self):
        assert format_field("age", 17.0) == "17"

    def test_bool(self):
        assert format_field("status", True) == "true"


class TestSinglePass:
    def test_value_containing_token_not_reexpanded(self):
        result = render("{{name}} {{region}}", {"name": "{{region}}", "region": "Shirak"})
        assert result == "{{region}} Shirak"

    def test_repeated_token(self):
        assert render("{{name}}/{{ name }}", {"name": "Ana"}) == "Ana/Ana"


class TestUnresolvedTokens:
    def test_lists_leftovers_in_order(self):
        html = render("{{a}} {{b}} {{c}}", {"b": "x"})
        assert unresolved_tokens(html) == ["a", "c"]

    def test_none_left(self):
        assert unresolved_tokens("<p>done</p>") == []
