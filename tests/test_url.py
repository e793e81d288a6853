"""
Tests for target normalisation and request-URL building.
"""

import unittest

from web_fuzzer.utils.url import (
    collapse_separators,
    join_resource,
    normalise_target,
    substitute_token,
)


class TestJoinResource(unittest.TestCase):
    def test_leading_slash_not_duplicated(self):
        self.assertEqual(
            join_resource("http://example.com", "/admin"),
            "http://example.com/admin",
        )

    def test_trailing_slash_target(self):
        self.assertEqual(join_resource("http://h/", "b/"), "http://h/b/")

    def test_plain_target_gets_separator(self):
        self.assertEqual(join_resource("http://h", "a"), "http://h/a")

    def test_scheme_separator_survives(self):
        url = join_resource("https://example.com///x//", "//y")
        self.assertTrue(url.startswith("https://example.com/"))
        self.assertEqual(url, "https://example.com/x/y")

    def test_nested_directory(self):
        self.assertEqual(join_resource("http://h/b/", "b/"), "http://h/b/b/")


class TestCollapseSeparators(unittest.TestCase):
    def test_runs_collapsed(self):
        self.assertEqual(collapse_separators("http://h//a///b"), "http://h/a/b")

    def test_scheme_untouched(self):
        self.assertEqual(collapse_separators("http://h"), "http://h")


class TestNormaliseTarget(unittest.TestCase):
    def test_trailing_slash_added(self):
        self.assertEqual(normalise_target("http://example.com"), "http://example.com/")

    def test_scheme_added(self):
        self.assertEqual(normalise_target("example.com/app"), "http://example.com/app/")

    def test_https_kept(self):
        self.assertEqual(normalise_target("https://h/"), "https://h/")

    def test_scheme_is_case_insensitive(self):
        self.assertEqual(normalise_target("HTTPS://example.com"), "https://example.com/")
        self.assertEqual(normalise_target("Http://h/app"), "http://h/app/")

    def test_url_in_query_is_not_a_scheme(self):
        self.assertEqual(normalise_target("h/?next=http://x"), "http://h/?next=http://x/")

    def test_fuzz_mode_left_alone(self):
        raw = "http://h/page.php?id=%FUZZME%"
        self.assertEqual(normalise_target(raw, fuzz_token=True), raw)


class TestSubstituteToken(unittest.TestCase):
    def test_every_occurrence_replaced(self):
        self.assertEqual(
            substitute_token("http://h/%FUZZME%?q=%FUZZME%", "x"),
            "http://h/x?q=x",
        )

    def test_no_token(self):
        self.assertEqual(substitute_token("http://h/", "x"), "http://h/")


if __name__ == "__main__":
    unittest.main()
