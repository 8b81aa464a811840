"""Tests for samplegen.prompts -- prompt template rendering."""

from __future__ import annotations

from samplegen.models import PromptTemplate
from samplegen.prompts import NO_TEMPLATE, escape_string, quote, render_prompt_template


class TestEscaping:
    def test_newlines_become_two_character_escapes(self) -> None:
        assert escape_string("a\r\nb\nc") == "a\\r\\nb\\nc"

    def test_quotes_and_backslashes_escaped(self) -> None:
        assert escape_string('say "hi"\\') == 'say \\"hi\\"\\\\'

    def test_quote_wraps_in_double_quotes(self) -> None:
        assert quote("x") == '"x"'


class TestRenderPromptTemplate:
    def test_missing_template_renders_sentinel(self) -> None:
        assert render_prompt_template(None, 8) == NO_TEMPLATE == "None"

    def test_all_fields_rendered_in_order(self) -> None:
        template = PromptTemplate(
            system="<|system|>\n{{CONTENT}}<|end|>\n",
            user="<|user|>\n{{CONTENT}}<|end|>\n",
            assistant="<|assistant|>\n{{CONTENT}}<|end|>\n",
            stop=("<|end|>", "<|user|>"),
        )
        rendered = render_prompt_template(template, 4)
        assert rendered == (
            "LlmPromptTemplate(\n"
            '        system="<|system|>\\n{{CONTENT}}<|end|>\\n",\n'
            '        user="<|user|>\\n{{CONTENT}}<|end|>\\n",\n'
            '        assistant="<|assistant|>\\n{{CONTENT}}<|end|>\\n",\n'
            '        stop=["<|end|>", "<|user|>"],\n'
            "    )"
        )

    def test_absent_and_empty_fields_omitted(self) -> None:
        template = PromptTemplate(system="", user="[INST]{{CONTENT}}[/INST]", stop=())
        rendered = render_prompt_template(template, 0)
        assert rendered == 'LlmPromptTemplate(\n    user="[INST]{{CONTENT}}[/INST]",\n)'

    def test_empty_template_renders_bare_constructor(self) -> None:
        assert render_prompt_template(PromptTemplate(), 2) == "LlmPromptTemplate(\n  )"

    def test_every_continuation_line_is_indented(self) -> None:
        template = PromptTemplate(system="s", user="u", stop=("x",))
        lines = render_prompt_template(template, 12).split("\n")
        assert lines[0] == "LlmPromptTemplate("
        assert all(line.startswith(" " * 12) for line in lines[1:])

    def test_whitespace_prefix_used_verbatim(self) -> None:
        template = PromptTemplate(system="s")
        assert render_prompt_template(template, "\t") == 'LlmPromptTemplate(\n\t\tsystem="s",\n\t)'
        assert render_prompt_template(template, "  ") == 'LlmPromptTemplate(\n      system="s",\n  )'

    def test_stop_sequences_escaped(self) -> None:
        template = PromptTemplate(stop=("\n\n", "</s>"))
        rendered = render_prompt_template(template, 0)
        assert 'stop=["\\n\\n", "</s>"],' in rendered
