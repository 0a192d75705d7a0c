"""Tests for the heuristic quick scan scorer."""
import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "backend"))

from quick_scan import (
    IMAGE_ALT_TIERS,
    compute_quick_scan,
    default_requirements,
    page_type_label,
    resolve_requirements,
)


def perfect_category_signal(**overrides):
    signal = {
        "title": "T" * 55,
        "description": "D" * 155,
        "word_count": 850,
        "heading_counts": {"h1": 1, "h2": 3, "h3": 2, "h4": 0, "h5": 0, "h6": 0},
        "internal_link_count": 40,
        "content_link_count": 6,
        "images_without_alt_count": 0,
        "schema_org_types": ["BreadcrumbList"],
        "page_type": "category",
    }
    signal.update(overrides)
    return signal


class TestScenarios(unittest.TestCase):
    """Reference scenarios with exact expected scores."""

    def test_empty_category_page(self):
        result = compute_quick_scan(
            {
                "title": "",
                "description": None,
                "heading_counts": {"h1": 0},
                "word_count": 0,
                "page_type": "category",
                "schema_org_types": [],
                "content_link_count": 0,
            }
        )

        self.assertEqual(result["score"], 100 - 15 - 15 - 10 - 10 - 8 - 3 - 5)
        self.assertEqual(result["score"], 34)
        self.assertEqual(len(result["issues"]), 7)
        self.assertEqual(
            [issue["category"] for issue in result["issues"]],
            ["Meta", "Meta", "Headings", "Content", "Schema", "Schema", "Links"],
        )
        errors = [issue for issue in result["issues"] if issue["severity"] == "error"]
        self.assertEqual(len(errors), 3)
        self.assertTrue(all(issue["priority"] == "high" for issue in errors))

    def test_clean_category_page_scores_full_marks(self):
        result = compute_quick_scan(perfect_category_signal())

        self.assertEqual(result["score"], 100)
        self.assertEqual(result["issues"], [])
        self.assertEqual(result["page_type"], "category")

    def test_many_images_without_alt(self):
        result = compute_quick_scan(perfect_category_signal(images_without_alt_count=15))

        self.assertEqual(result["score"], 90)
        self.assertEqual(len(result["issues"]), 1)
        self.assertEqual(result["issues"][0]["severity"], "error")
        self.assertEqual(result["issues"][0]["category"], "Images")

    def test_unknown_page_type_uses_other_defaults(self):
        result = compute_quick_scan(perfect_category_signal(page_type="landing-page??", word_count=250))

        self.assertEqual(result["page_type"], "other")
        self.assertEqual(result["requirements"]["min_word_count"], 300)
        self.assertEqual(result["requirements"]["required_schema_types"], [])
        self.assertEqual(result["score"], 90)
        self.assertEqual(result["issues"][0]["category"], "Content")


class TestChecks(unittest.TestCase):

    def test_title_length_bands(self):
        short = compute_quick_scan(perfect_category_signal(title="T" * 49))
        too_long = compute_quick_scan(perfect_category_signal(title="T" * 61))
        upper_edge = compute_quick_scan(perfect_category_signal(title="T" * 60))

        self.assertEqual(short["score"], 95)
        self.assertIn("Title too short", short["issues"][0]["message"])
        self.assertEqual(too_long["score"], 95)
        self.assertIn("Title too long", too_long["issues"][0]["message"])
        self.assertEqual(upper_edge["score"], 100)

    def test_ideal_title_length_never_scores_lower(self):
        ideal = compute_quick_scan(perfect_category_signal(title="T" * 55))["score"]
        for length in range(0, 100):
            score = compute_quick_scan(perfect_category_signal(title="T" * length))["score"]
            if 50 <= length <= 60:
                self.assertEqual(score, ideal)
            else:
                self.assertLessEqual(score, ideal)

    def test_branding_artifact_in_title(self):
        title = "x" * 46 + " - YouTube"
        result = compute_quick_scan(perfect_category_signal(title=title))

        self.assertEqual(len(title), 56)
        self.assertEqual(result["score"], 85)
        self.assertEqual(result["issues"][0]["category"], "Branding")
        self.assertEqual(result["issues"][0]["severity"], "error")

    def test_short_title_with_branding_stacks(self):
        result = compute_quick_scan(perfect_category_signal(title="Tiles - YouTube"))

        self.assertEqual(result["score"], 80)
        self.assertEqual([i["category"] for i in result["issues"]], ["Meta", "Branding"])

    def test_description_bands(self):
        cases = {
            None: 85,
            "": 85,
            "   ": 95,
            "D" * 149: 95,
            "D" * 150: 100,
            "D" * 160: 100,
            "D" * 161: 97,
        }
        for description, expected in cases.items():
            with self.subTest(description=description):
                result = compute_quick_scan(perfect_category_signal(description=description))
                self.assertEqual(result["score"], expected)

    def test_missing_description_metrics(self):
        result = compute_quick_scan(perfect_category_signal(description=None))

        self.assertTrue(result["metrics"]["description_missing"])
        self.assertEqual(result["metrics"]["description_length"], 0)
        self.assertFalse(result["metrics"]["description_valid"])

    def test_whitespace_description_is_too_short_not_missing(self):
        result = compute_quick_scan(perfect_category_signal(description="   "))

        self.assertFalse(result["metrics"]["description_missing"])
        self.assertEqual(result["metrics"]["description_length"], 3)
        self.assertEqual([i["message"] for i in result["issues"]], ["Meta description too short (3 characters)"])

    def test_h1_checks(self):
        missing = compute_quick_scan(perfect_category_signal(heading_counts={"h1": 0}))
        duplicated = compute_quick_scan(perfect_category_signal(heading_counts={"h1": 3}))

        self.assertEqual(missing["score"], 90)
        self.assertEqual(missing["issues"][0]["severity"], "error")
        self.assertEqual(duplicated["score"], 95)
        self.assertIn("(3)", duplicated["issues"][0]["message"])

    def test_long_content_is_informational_only(self):
        at_limit = compute_quick_scan(perfect_category_signal(word_count=1500))
        over_limit = compute_quick_scan(perfect_category_signal(word_count=1501))

        self.assertEqual(at_limit["issues"], [])
        self.assertEqual(over_limit["score"], 100)
        self.assertEqual(len(over_limit["issues"]), 1)
        self.assertEqual(over_limit["issues"][0]["severity"], "info")

    def test_image_alt_tiers(self):
        cases = {0: 100, 1: 98, 3: 98, 4: 95, 10: 95, 11: 90}
        for count, expected in cases.items():
            with self.subTest(count=count):
                result = compute_quick_scan(perfect_category_signal(images_without_alt_count=count))
                self.assertEqual(result["score"], expected)

    def test_image_alt_tiers_are_ordered_first_match_wins(self):
        matching = [tier.severity for tier in IMAGE_ALT_TIERS if tier.applies(20)]
        self.assertEqual(matching[0], "error")
        self.assertFalse(any(tier.applies(0) for tier in IMAGE_ALT_TIERS))

    def test_required_schema_is_case_insensitive(self):
        signal = perfect_category_signal(
            page_type="product",
            word_count=200,
            content_link_count=2,
            schema_org_types=["product", "OFFER"],
        )
        self.assertEqual(compute_quick_scan(signal)["score"], 100)

    def test_partially_missing_required_schema(self):
        signal = perfect_category_signal(
            page_type="product",
            word_count=200,
            content_link_count=2,
            schema_org_types=["Product"],
        )
        result = compute_quick_scan(signal)

        self.assertEqual(result["score"], 92)
        self.assertIn("Product, Offer", result["issues"][0]["message"])

    def test_missing_schema_penalties_stack(self):
        result = compute_quick_scan(perfect_category_signal(schema_org_types=[]))

        self.assertEqual(result["score"], 89)
        self.assertEqual([i["severity"] for i in result["issues"]], ["warning", "info"])

    def test_recommended_schema_is_not_penalized(self):
        result = compute_quick_scan(perfect_category_signal(schema_org_types=["BreadcrumbList"]))
        self.assertNotIn("FAQPage", str(result["issues"]))

    def test_content_links_threshold(self):
        self.assertEqual(compute_quick_scan(perfect_category_signal(content_link_count=4))["score"], 95)
        self.assertEqual(compute_quick_scan(perfect_category_signal(content_link_count=5))["score"], 100)


class TestInputTolerance(unittest.TestCase):

    def test_non_mapping_input_returns_fallback(self):
        for bad in (None, "page", 42, ["title"]):
            with self.subTest(bad=bad):
                result = compute_quick_scan(bad)
                self.assertEqual(result["score"], 0)
                self.assertEqual(result["page_type"], "other")
                self.assertEqual(len(result["issues"]), 1)
                self.assertEqual(result["issues"][0]["severity"], "error")

    def test_empty_mapping_is_scored_not_rejected(self):
        result = compute_quick_scan({})

        self.assertEqual(result["page_type"], "other")
        # title, description, h1, word count, no structured data, content links
        self.assertEqual(result["score"], 100 - 15 - 15 - 10 - 10 - 3 - 5)

    def test_garbled_numbers_default_to_zero(self):
        for value in (None, "abc", -5, float("nan"), float("inf"), True, {"n": 1}):
            with self.subTest(value=value):
                result = compute_quick_scan(perfect_category_signal(word_count=value))
                self.assertEqual(result["metrics"]["word_count"], 0)
                self.assertEqual(result["score"], 90)

    def test_numeric_strings_are_accepted(self):
        result = compute_quick_scan(perfect_category_signal(word_count="900", content_link_count=" 6 "))
        self.assertEqual(result["score"], 100)

    def test_decimal_strings_count_like_numbers(self):
        from_string = compute_quick_scan(perfect_category_signal(word_count="850.0", content_link_count="6.0"))
        from_float = compute_quick_scan(perfect_category_signal(word_count=850.0, content_link_count=6.0))

        self.assertEqual(from_string["metrics"]["word_count"], 850)
        self.assertEqual(from_string["metrics"]["content_links_count"], 6)
        self.assertEqual(from_string["metrics"], from_float["metrics"])
        self.assertEqual(from_string["score"], 100)

    def test_garbled_headings_and_schema(self):
        result = compute_quick_scan(perfect_category_signal(heading_counts="h1", schema_org_types=[None, 3, ""]))

        self.assertEqual(result["metrics"]["h1_count"], 0)
        self.assertEqual(result["metrics"]["schema_types_count"], 0)

    def test_score_bounds_over_many_signals(self):
        for title in ("", "T" * 10, "T" * 55, "T" * 90 + " - YouTube"):
            for words in (0, 100, 5000):
                for images in (0, 2, 50):
                    for page_type in ("homepage", "category", "filter", "product", "other", "???"):
                        signal = {
                            "title": title,
                            "word_count": words,
                            "images_without_alt_count": images,
                            "page_type": page_type,
                        }
                        score = compute_quick_scan(signal)["score"]
                        self.assertGreaterEqual(score, 0)
                        self.assertLessEqual(score, 100)

    def test_deterministic(self):
        signal = perfect_category_signal(title="short", images_without_alt_count=5)
        self.assertEqual(compute_quick_scan(signal), compute_quick_scan(signal))


class TestRequirements(unittest.TestCase):

    def test_default_table(self):
        expected = {
            "homepage": (300, 800, ["Organization"], 10, False),
            "category": (700, 1000, ["BreadcrumbList"], 5, True),
            "filter": (200, 400, ["BreadcrumbList"], 3, False),
            "product": (150, 300, ["Product", "Offer"], 2, False),
            "other": (300, 800, [], 3, False),
        }
        for page_type, (min_words, max_words, schema, links, faq) in expected.items():
            with self.subTest(page_type=page_type):
                reqs = default_requirements(page_type)
                self.assertEqual(reqs["min_word_count"], min_words)
                self.assertEqual(reqs["max_word_count"], max_words)
                self.assertEqual(reqs["required_schema_types"], schema)
                self.assertEqual(reqs["min_content_links"], links)
                self.assertEqual(reqs["requires_faq"], faq)

    def test_default_requirements_returns_a_copy(self):
        reqs = default_requirements("product")
        reqs["required_schema_types"].append("Review")
        reqs["min_word_count"] = 1

        fresh = default_requirements("product")
        self.assertEqual(fresh["required_schema_types"], ["Product", "Offer"])
        self.assertEqual(fresh["min_word_count"], 150)

    def test_partial_override_merges_onto_defaults(self):
        reqs = resolve_requirements("category", {"min_word_count": 1000, "requires_faq": "yes"})

        self.assertEqual(reqs["min_word_count"], 1000)
        self.assertEqual(reqs["max_word_count"], 1000)
        self.assertEqual(reqs["required_schema_types"], ["BreadcrumbList"])
        self.assertTrue(reqs["requires_faq"])

    def test_override_changes_score(self):
        stricter = compute_quick_scan(perfect_category_signal(), {"min_word_count": 1000})
        other_schema = compute_quick_scan(perfect_category_signal(), {"required_schema_types": ["FAQPage"]})

        self.assertEqual(stricter["score"], 90)
        self.assertEqual(stricter["requirements"]["min_word_count"], 1000)
        self.assertEqual(other_schema["score"], 92)

    def test_page_type_labels(self):
        self.assertEqual(page_type_label("product"), "Product page")
        self.assertEqual(page_type_label("nonsense"), "Other")


if __name__ == "__main__":
    unittest.main()
