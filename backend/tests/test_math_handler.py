from unittest.mock import patch

import latex2mathml.converter

from mathpaste.core.compiler.math_handler import (
    OMML_NS,
    convert_math,
    is_plain_omml,
    latex_to_mathml,
    mathml_to_omml,
    omml_element,
    omml_text,
    render_math_html,
)

PLAIN = f'<m:oMath xmlns:m="{OMML_NS}"><m:r><m:t>x</m:t></m:r></m:oMath>'
FRACTION = (
    f'<m:oMath xmlns:m="{OMML_NS}"><m:f>'
    "<m:num><m:r><m:t>1</m:t></m:r></m:num>"
    "<m:den><m:r><m:t>2</m:t></m:r></m:den>"
    "</m:f></m:oMath>"
)


def test_render_math_html_keeps_tex_annotation():
    html = render_math_html(r"\frac{a}{b}")
    assert html.startswith('<span class="math-render">')
    assert "math" in html
    assert 'encoding="application/x-tex"' in html
    assert r"\frac{a}{b}" in html


def test_render_math_html_marks_display_mode():
    assert "math-display" in render_math_html("x", display_mode=True)
    assert "math-display" not in render_math_html("x", display_mode=False)


def test_render_math_html_error_span():
    with patch("latex2mathml.converter.convert", side_effect=ValueError("boom")):
        html = render_math_html(r"\alpha")
    assert 'class="math-error"' in html
    assert 'title="boom"' in html
    assert "α" in html


def test_latex_to_mathml_display_attribute():
    assert 'display="block"' in latex_to_mathml("x", display_mode=True)
    assert 'display="inline"' in latex_to_mathml("x", display_mode=False)


def test_latex_to_mathml_fallback_is_merror():
    with patch("latex2mathml.converter.convert", side_effect=ValueError("boom")):
        mathml = latex_to_mathml(r"a \times b")
    assert "<merror>" in mathml
    assert "a × b" in mathml


def test_structured_formula_is_not_plain():
    markup = convert_math(r"\frac{1}{2}", display_mode=True)
    assert "oMath" in markup.omml
    assert not markup.omml.lstrip().startswith("<?xml")
    assert is_plain_omml(markup.omml) is False


def test_mathml_to_omml_fallback_keeps_text():
    with patch("mathml2omml.convert", side_effect=RuntimeError("boom")):
        omml = mathml_to_omml('<math xmlns="http://www.w3.org/1998/Math/MathML"><mi>y</mi></math>')
    assert omml == f'<m:oMath xmlns:m="{OMML_NS}"><m:r><m:t>y</m:t></m:r></m:oMath>'


def test_is_plain_omml():
    assert is_plain_omml(PLAIN) is True
    assert is_plain_omml(FRACTION) is False
    # undeclared prefix gets its namespace added
    assert is_plain_omml("<m:oMath><m:r><m:t>x</m:t></m:r></m:oMath>") is True
    assert is_plain_omml("<m:oMath><m:r>") is False


def test_omml_text_concatenates_runs():
    assert omml_text(PLAIN) == "x"
    assert omml_text(FRACTION) == "12"


def test_omml_element_parses_fragment_without_declarations():
    el = omml_element("<m:oMath><m:r><m:t>z</m:t></m:r></m:oMath>")
    assert el.tag == f"{{{OMML_NS}}}oMath"


def test_converter_output_for_plain_formulas_is_plain():
    for latex in ("x", "1", "ab"):
        omml = convert_math(latex).omml
        assert "box" not in omml
        assert is_plain_omml(omml) is True
        assert omml_text(omml) == latex


def test_mathml_to_omml_unwraps_single_child_boxes():
    boxed = (
        "<m:oMath><m:box><m:e><m:r><m:rPr><m:sty m:val=\"i\"/></m:rPr>"
        "<m:t>n</m:t></m:r></m:e></m:box></m:oMath>"
    )
    with patch("mathml2omml.convert", return_value=boxed):
        omml = mathml_to_omml("<math><mi>n</mi></math>")
    assert "box" not in omml and "<m:e>" not in omml
    assert is_plain_omml(omml) is True
    assert omml_text(omml) == "n"


def test_mathml_to_omml_keeps_box_with_properties():
    boxed = "<m:oMath><m:box><m:boxPr/><m:e><m:r><m:t>n</m:t></m:r></m:e></m:box></m:oMath>"
    with patch("mathml2omml.convert", return_value=boxed):
        omml = mathml_to_omml("<math><mi>n</mi></math>")
    assert "m:box" in omml
    assert is_plain_omml(omml) is False


def test_convert_math_runs_latex2mathml_once():
    with patch("latex2mathml.converter.convert", wraps=latex2mathml.converter.convert) as conv:
        markup = convert_math(r"\frac{1}{2}", display_mode=True)
    assert conv.call_count == 1
    assert "math-display" in markup.rendered_html
    assert 'display="block"' in markup.mathml


def test_convert_math_failure_degrades_every_field():
    with patch("latex2mathml.converter.convert", side_effect=ValueError("boom")):
        markup = convert_math(r"\alpha")
    assert 'class="math-error"' in markup.rendered_html
    assert "<merror>" in markup.mathml
    assert "oMath" in markup.omml
