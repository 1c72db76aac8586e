import pytest

from mathpaste.core.compiler.text_utils import ACCENT_MAP, latex_math_to_text, normalize_accents


def test_hat_folds_to_precomposed_letter():
    assert normalize_accents(r"\hat{a}") == "â"
    assert normalize_accents(r"\hat {E}") == "Ê"


def test_bar_x_uses_combining_macron():
    assert normalize_accents(r"\bar{x}") == "x̄"
    assert normalize_accents(r"\bar{X}") == "X̄"


def test_unmapped_letter_keeps_macro():
    assert normalize_accents(r"\hat{q}") == r"\hat{q}"
    assert normalize_accents(r"\hat{ab}") == r"\hat{ab}"


def test_normalization_is_idempotent():
    src = r"Mean \bar{x}, estimate \hat{y}, \tilde{n} and \dot{z} with \hat{q}"
    once = normalize_accents(src)
    assert normalize_accents(once) == once
    assert "ñ" in once and "ż" in once


def test_accent_map_is_read_only():
    with pytest.raises(TypeError):
        ACCENT_MAP["vec"] = {}  # type: ignore[index]


def test_latex_math_to_text_replaces_symbols_and_strips_markup():
    assert latex_math_to_text(r"a \times b") == "a × b"
    assert latex_math_to_text(r"\alpha^{2}") == "α2"
    assert latex_math_to_text(r"\unknownmacro") == "unknownmacro"
