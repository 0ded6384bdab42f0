"""License Expression Normalizer 테스트."""
import pytest

from formula_miner.extractors.license import clean_license_sequence, normalize_license


class TestNormalizeLicense:
    """라이선스 표현식 정규화."""

    @pytest.mark.parametrize("raw, expected", [
        ('all_of: ["A","B"]', "A and B"),
        ('any_of: ["A","B","C"]', "A or B or C"),
        ('all_of: ["A", any_of: ["B","C"]]', "A and (B or C)"),
        ('"MIT"', "MIT"),
        ("MIT", "MIT"),
    ])
    def test_basic_forms(self, raw, expected):
        assert normalize_license(raw) == expected

    def test_nested_group_at_end(self):
        raw = ('all_of: ["BSD-2-Clause","LGPL-2.0-only","LGPL-2.0-or-later",'
               'any_of: ["LGPL-2.0-only", "LGPL-3.0-only"],]')
        assert normalize_license(raw) == (
            "BSD-2-Clause and LGPL-2.0-only and LGPL-2.0-or-later "
            "and (LGPL-2.0-only or LGPL-3.0-only)"
        )

    def test_nested_group_first(self):
        assert normalize_license('all_of: [any_of: ["A", "B"], "C"]') == "(A or B) and C"

    def test_sibling_groups(self):
        raw = 'any_of: [all_of: ["A", "B"], all_of: ["C", "D"]]'
        assert normalize_license(raw) == "(A and B) or (C and D)"

    def test_symbolic_licenses(self):
        assert normalize_license("one_of: [:public_domain, :cannot_represent]") == (
            "Public Domain or Cannot Represent"
        )
        assert normalize_license(":public_domain") == "Public Domain"

    def test_exception_clause(self):
        raw = '"LGPL-2.1-only" => { with: "OCaml-LGPL-linking-exception" }'
        assert normalize_license(raw) == "LGPL-2.1-only with OCaml-LGPL-linking-exception"

    def test_exception_clause_inside_group_is_parenthesized(self):
        raw = ('all_of: ["BSD-3-Clause", "GFDL-1.3-no-invariants-only", "GPL-2.0-only", '
               '"GPL-3.0-only" => { with: "Qt-GPL-exception-1.0" }, "LGPL-3.0-only"]')
        assert normalize_license(raw) == (
            "BSD-3-Clause and GFDL-1.3-no-invariants-only and GPL-2.0-only "
            "and (GPL-3.0-only with Qt-GPL-exception-1.0) and LGPL-3.0-only"
        )

    def test_spaces_inside_quotes_are_kept(self):
        assert normalize_license('"Public Domain"') == "Public Domain"
        assert normalize_license('any_of: [ "Public Domain", "MIT" ]') == "Public Domain or MIT"

    def test_empty_uses_fallback(self):
        assert normalize_license("") == "pseudo"
        assert normalize_license("   ", fallback="unknown") == "unknown"

    def test_malformed_input_is_best_effort(self):
        """닫히지 않은 표현식도 예외 없이 문자열을 만든다."""
        assert normalize_license('any_of: ["A", "B"') == "A or B"


class TestCleanLicenseSequence:
    """여러 줄 license 구문 합치기."""

    def test_strips_keyword_comments_and_indent(self):
        lines = [
            "  license all_of: [",
            '    "BSD-3-Clause",',
            '    "GPL-3.0-only" => { with: "Qt-GPL-exception-1.0" }, # compiler',
            '    any_of: ["LGPL-2.1-only", "LGPL-3.0-only"],',
            "  ]",
        ]
        cleaned = clean_license_sequence(lines)
        assert cleaned == (
            'all_of: ["BSD-3-Clause","GPL-3.0-only" => { with: "Qt-GPL-exception-1.0" },'
            'any_of: ["LGPL-2.1-only", "LGPL-3.0-only"],]'
        )
        assert normalize_license(cleaned) == (
            "BSD-3-Clause and (GPL-3.0-only with Qt-GPL-exception-1.0) "
            "and (LGPL-2.1-only or LGPL-3.0-only)"
        )
