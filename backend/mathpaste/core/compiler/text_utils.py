"""LaTeX text normalization utilities.

Shared by the tokenizer (accent folding) and math_handler (best-effort
fallback text for formulas that fail to render).
"""

import re
from types import MappingProxyType

# Accent macro → {letter: precomposed character}
ACCENT_MAP = MappingProxyType({
    "hat": MappingProxyType({
        "A": "Â", "a": "â", "E": "Ê", "e": "ê",
        "I": "Î", "i": "î", "O": "Ô", "o": "ô",
        "U": "Û", "u": "û", "Y": "Ŷ", "y": "ŷ",
        "W": "Ŵ", "w": "ŵ", "Z": "Ẑ", "z": "ẑ",
        "C": "Ĉ", "c": "ĉ", "G": "Ĝ", "g": "ĝ",
        "H": "Ĥ", "h": "ĥ", "S": "Ŝ", "s": "ŝ",
    }),
    "bar": MappingProxyType({
        "A": "Ā", "a": "ā", "E": "Ē", "e": "ē",
        "I": "Ī", "i": "ī", "O": "Ō", "o": "ō",
        "U": "Ū", "u": "ū", "Y": "Ȳ", "y": "ȳ",
        # no precomposed x-macron: letter + combining macron
        "x": "x̄", "X": "X̄",
    }),
    "tilde": MappingProxyType({
        "A": "Ã", "a": "ã", "N": "Ñ", "n": "ñ",
        "O": "Õ", "o": "õ", "I": "Ĩ", "i": "ĩ",
        "U": "Ũ", "u": "ũ", "Y": "Ỹ", "y": "ỹ",
        "v": "ṽ", "V": "Ṽ",
    }),
    "dot": MappingProxyType({
        "x": "ẋ", "X": "Ẋ", "y": "ẏ", "Y": "Ẏ",
        "z": "ż", "Z": "Ż",
    }),
})

_ACCENT_PATTERNS = tuple(
    (re.compile(r"\\" + macro + r"\s*\{([A-Za-z])\}"), table)
    for macro, table in ACCENT_MAP.items()
)

# LaTeX symbol commands → Unicode
SYMBOL_MAP = {
    "geq": "≥",      # ≥
    "ge": "≥",
    "leq": "≤",      # ≤
    "le": "≤",
    "neq": "≠",      # ≠
    "ne": "≠",
    "approx": "≈",   # ≈
    "equiv": "≡",    # ≡
    "sim": "∼",      # ∼
    "propto": "∝",   # ∝
    "times": "×",    # ×
    "div": "÷",      # ÷
    "pm": "±",       # ±
    "mp": "∓",       # ∓
    "cdot": "·",     # ·
    "ldots": "…",    # …
    "cdots": "⋯",    # ⋯
    "dots": "…",
    "to": "→",       # →
    "rightarrow": "→",
    "leftarrow": "←",   # ←
    "Rightarrow": "⇒",  # ⇒
    "Leftarrow": "⇐",   # ⇐
    "leftrightarrow": "↔",  # ↔
    "Leftrightarrow": "⇔",  # ⇔
    "mapsto": "↦",   # ↦
    "infty": "∞",    # ∞
    "partial": "∂",  # ∂
    "nabla": "∇",    # ∇
    "forall": "∀",   # ∀
    "exists": "∃",   # ∃
    "in": "∈",       # ∈
    "notin": "∉",    # ∉
    "subset": "⊂",   # ⊂
    "subseteq": "⊆", # ⊆
    "supset": "⊃",   # ⊃
    "cup": "∪",      # ∪
    "cap": "∩",      # ∩
    "emptyset": "∅", # ∅
    "alpha": "α",    # α
    "beta": "β",     # β
    "gamma": "γ",    # γ
    "Gamma": "Γ",
    "delta": "δ",    # δ
    "Delta": "Δ",
    "epsilon": "ε",  # ε
    "varepsilon": "ε",
    "eta": "η",      # η
    "kappa": "κ",    # κ
    "lambda": "λ",   # λ
    "Lambda": "Λ",
    "mu": "μ",       # μ
    "nu": "ν",       # ν
    "rho": "ρ",      # ρ
    "sigma": "σ",    # σ
    "Sigma": "Σ",
    "tau": "τ",      # τ
    "omega": "ω",    # ω
    "Omega": "Ω",
    "pi": "π",       # π
    "Pi": "Π",
    "theta": "θ",    # θ
    "Theta": "Θ",
    "phi": "φ",      # φ
    "Phi": "Φ",
    "psi": "ψ",      # ψ
    "chi": "χ",      # χ
    "xi": "ξ",       # ξ
    "zeta": "ζ",     # ζ
    "sum": "∑",      # ∑
    "prod": "∏",     # ∏
    "int": "∫",      # ∫
    "oint": "∮",     # ∮
    "sqrt": "√",     # √
    "degree": "°",   # °
    "circ": "∘",     # ∘
    "angle": "∠",    # ∠
    "perp": "⊥",     # ⊥
    "parallel": "∥", # ∥
    "hbar": "ℏ",     # ℏ
    "ell": "ℓ",      # ℓ
}


def normalize_accents(text: str) -> str:
    r"""Fold ``\hat{a}``-style accent macros on single letters into Unicode.

    Letters missing from the table keep their macro form, so ``\hat{q}``
    passes through untouched. Output never contains a foldable macro, which
    makes the function idempotent.
    """
    for pattern, table in _ACCENT_PATTERNS:
        text = pattern.sub(lambda m, table=table: table.get(m.group(1), m.group(0)), text)
    return text


def latex_math_to_text(latex_str: str) -> str:
    """Best-effort conversion of LaTeX math to readable Unicode text."""

    def _replace_cmd(m):
        name = m.group(1)
        return SYMBOL_MAP.get(name, m.group(0))

    text = re.sub(r"\\([a-zA-Z]+)", _replace_cmd, latex_str)
    # Clean up remaining LaTeX artifacts
    for ch in ("\\", "{", "}", "^", "_"):
        text = text.replace(ch, "")
    return text.strip()
