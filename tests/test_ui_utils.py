import unittest
from datetime import datetime

from s3_console.models import Breadcrumb, CommonPrefix, ListingResult, ObjectDetails, ObjectEntry
from s3_console.ui_utils import (
    format_last_modified,
    format_size,
    render_listing,
    render_object_details,
)


class UiUtilsTests(unittest.TestCase):
    def test_format_size_prefers_largest_unit(self):
        self.assertEqual("-", format_size(None))
        self.assertEqual("512 B", format_size(512))
        self.assertEqual("2.0 KB", format_size(2 * 1024))
        self.assertEqual("1.5 MB", format_size(3 * 512 * 1024))

    def test_format_last_modified(self):
        self.assertEqual("-", format_last_modified(None))
        self.assertEqual("2024-01-01 12:00:00", format_last_modified(datetime(2024, 1, 1, 12, 0, 0)))
        self.assertEqual("yesterday", format_last_modified("yesterday"))

    def test_render_listing_shows_trail_directories_then_files(self):
        listing = ListingResult(
            bucket_name="docs",
            query_prefix="a/",
            common_prefixes=(CommonPrefix("a/c/"),),
            objects=(ObjectEntry("a/b.txt", size=3),),
            breadcrumbs=(Breadcrumb(display_name="a/", cumulative_prefix="a"),),
        )

        lines = render_listing(listing)

        self.assertEqual("docs/a/", lines[0])
        self.assertTrue(lines[1].endswith(" c/"))
        self.assertIn("DIR", lines[1])
        self.assertTrue(lines[2].endswith(" b.txt"))
        self.assertIn("3 B", lines[2])
        self.assertEqual(3, len(lines))

    def test_render_listing_marks_empty_and_truncated(self):
        self.assertEqual(["docs/", "(empty)"], render_listing(ListingResult(bucket_name="docs")))

        truncated = ListingResult(bucket_name="docs", objects=(ObjectEntry("x"),), truncated=True)
        self.assertIn("truncated after 1 entries", render_listing(truncated)[-1])

    def test_render_object_details_lists_metadata(self):
        details = ObjectDetails(bucket="docs", key="e.txt", size=5, metadata={"owner": "me"})

        lines = render_object_details(details)

        self.assertIn("Key:           e.txt", lines)
        self.assertIn("Size:          5 B", lines)
        self.assertIn("Metadata:      owner=me", lines)


if __name__ == "__main__":
    unittest.main()
