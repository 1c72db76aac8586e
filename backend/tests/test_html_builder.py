from mathpaste.core.compiler.html_builder import (
    build_preview_html,
    build_word_html,
    render_markdown_with_placeholders,
)
from mathpaste.core.compiler.math_handler import OMML_NS
from mathpaste.core.compiler.tokenizer import tokenize_and_convert


def test_display_math_in_sentence():
    tokens = tokenize_and_convert("Solve $$x^2$$ for x.", run_key="k")
    assert len(tokens) == 3

    preview = build_preview_html(tokens)
    assert preview.count("<div>") == 1
    assert "MATHPH" not in preview
    assert tokens[1].rendered_html in preview

    word = build_word_html(tokens)
    assert word.count("<div>") == 1
    assert f"<div>{tokens[1].omml}</div>" in word
    assert "MATHPH" not in word


def test_inline_math_preview_uses_span():
    tokens = tokenize_and_convert("Let $x$ be real.", run_key="k")
    preview = build_preview_html(tokens)
    assert f"<span>{tokens[1].rendered_html}</span>" in preview
    assert "<div>" not in preview


def test_word_html_envelope():
    tokens = tokenize_and_convert("**bold** $y$", run_key="k")
    word = build_word_html(tokens, title="A <b> title")

    assert word.startswith("<!DOCTYPE html>")
    assert f'xmlns:m="{OMML_NS}"' in word
    assert '<meta charset="UTF-8">' in word
    assert "<title>A &lt;b&gt; title</title>" in word
    assert "<strong>bold</strong>" in word
    assert tokens[1].omml in word


def test_placeholder_inside_emphasis_is_replaced():
    tokens = tokenize_and_convert("*a $z$ b*", run_key="k")
    html = render_markdown_with_placeholders(tokens, lambda t: f"[{t.latex}]")
    assert "<em>a [z] b</em>" in html


def test_every_placeholder_replaced_in_lists_and_headings():
    text = "# Title $a$\n\n- item $b$\n- item $c$\n\n$$d$$"
    tokens = tokenize_and_convert(text, run_key="k")
    html = render_markdown_with_placeholders(tokens, lambda t: "<m/>")
    assert "MATHPH" not in html
    assert html.count("<m/>") == 4
