import unittest

from s3_console.errors import InvalidArgument
from s3_console.models import Breadcrumb
from s3_console.paths import (
    compose_object_key,
    compute_breadcrumbs,
    compute_parent,
    ensure_trailing_separator,
    normalize_prefix,
)


class ComputeParentTests(unittest.TestCase):
    def test_root_like_keys_have_root_parent(self):
        for key in ("", "/", "file.txt", "top"):
            with self.subTest(key=key):
                self.assertEqual("/", compute_parent(key))

    def test_single_level_key(self):
        self.assertEqual("/a", compute_parent("a/b.txt"))
        self.assertEqual("/docs", compute_parent("docs/readme"))

    def test_nested_key(self):
        self.assertEqual("/a/c", compute_parent("a/c/d.txt"))

    def test_result_always_has_leading_separator(self):
        self.assertEqual("//a", compute_parent("/a/b.txt"))
        self.assertEqual("/a/b", compute_parent("a/b/"))


class ComputeBreadcrumbsTests(unittest.TestCase):
    def test_root_has_no_breadcrumbs(self):
        self.assertEqual((), compute_breadcrumbs(""))
        self.assertEqual((), compute_breadcrumbs("/"))

    def test_two_levels(self):
        self.assertEqual(
            (
                Breadcrumb(display_name="a/", cumulative_prefix="a"),
                Breadcrumb(display_name="b/", cumulative_prefix="a/b"),
            ),
            compute_breadcrumbs("a/b/"),
        )

    def test_prefix_without_trailing_separator(self):
        crumbs = compute_breadcrumbs("a/b")
        self.assertEqual(["a/", "b/"], [crumb.display_name for crumb in crumbs])
        self.assertEqual(["a", "a/b"], [crumb.cumulative_prefix for crumb in crumbs])

    def test_empty_components_keep_their_position(self):
        crumbs = compute_breadcrumbs("a//b/")
        self.assertEqual(["a/", "b/"], [crumb.display_name for crumb in crumbs])
        self.assertEqual(["a", "a//b"], [crumb.cumulative_prefix for crumb in crumbs])

    def test_leading_separator_is_kept_in_cumulative_prefix(self):
        crumbs = compute_breadcrumbs("/a/b")
        self.assertEqual(["/a", "/a/b"], [crumb.cumulative_prefix for crumb in crumbs])

    def test_count_matches_non_empty_components(self):
        for prefix in ("x", "x/", "x/y/z/", "/x//y/"):
            with self.subTest(prefix=prefix):
                expected = len([part for part in prefix.split("/") if part])
                self.assertEqual(expected, len(compute_breadcrumbs(prefix)))

    def test_is_idempotent(self):
        self.assertEqual(compute_breadcrumbs("a/b/c/"), compute_breadcrumbs("a/b/c/"))


class PrefixHelpersTests(unittest.TestCase):
    def test_normalize_prefix(self):
        self.assertEqual("", normalize_prefix(""))
        self.assertEqual("", normalize_prefix("/"))
        self.assertEqual("a/", normalize_prefix("a"))
        self.assertEqual("a/", normalize_prefix("/a"))
        self.assertEqual("a/b/", normalize_prefix("a/b/"))

    def test_ensure_trailing_separator(self):
        self.assertEqual("a/", ensure_trailing_separator("a"))
        self.assertEqual("a/", ensure_trailing_separator("a/"))
        self.assertEqual("/", ensure_trailing_separator(""))

    def test_compose_object_key(self):
        self.assertEqual("a/b/c.txt", compose_object_key("a/b", "c.txt"))
        self.assertEqual("c.txt", compose_object_key("/", "c.txt"))

    def test_compose_object_key_keeps_name_verbatim(self):
        self.assertEqual("a/ report.txt", compose_object_key("a/", " report.txt"))
        self.assertEqual("a/b/c.txt ", compose_object_key("a/b/", "c.txt "))

    def test_compose_object_key_requires_name(self):
        with self.assertRaises(InvalidArgument):
            compose_object_key("a/", "  ")


if __name__ == "__main__":
    unittest.main()
