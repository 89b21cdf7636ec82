"""Resource URL synthesis tests."""

from __future__ import annotations

import pytest

from skillpath.catalog.urls import generate_resource_url, is_placeholder_url


class TestPlaceholderUrls:
    @pytest.mark.parametrize(
        "url", [None, "", "#", "https://example.com", " https://example.com ", "https://placeholder.dev/x"]
    )
    def test_placeholders(self, url):
        assert is_placeholder_url(url) is True

    def test_real_url(self):
        assert is_placeholder_url("https://docs.python.org/3/tutorial/") is False


class TestGenerateResourceUrl:
    def test_video_goes_to_youtube_search(self):
        url = generate_resource_url("Intro to Pandas", "video")
        assert url.startswith("https://www.youtube.com/results?search_query=")
        assert "pandas" in url

    def test_javascript_documentation_goes_to_mdn_search(self):
        url = generate_resource_url("JavaScript Closures", "documentation")
        assert url.startswith("https://developer.mozilla.org/en-US/search?q=")

    def test_css_documentation_goes_to_mdn_section(self):
        assert generate_resource_url("CSS Grid docs", "article") == "https://developer.mozilla.org/en-US/docs/Web/CSS"

    def test_tutorial_defaults_to_freecodecamp(self):
        assert generate_resource_url("Flexbox", "tutorial") == "https://www.freecodecamp.org/learn"

    def test_course_defaults_to_coursera(self):
        url = generate_resource_url("Machine Learning", "course")
        assert url.startswith("https://www.coursera.org/search?query=")

    def test_udemy_course(self):
        assert generate_resource_url("Udemy Docker Mastery", "course").startswith("https://www.udemy.com/")

    def test_site_search(self):
        assert generate_resource_url("Awesome lists on GitHub", "article").startswith("https://github.com/search?q=")

    def test_tech_docs_landing(self):
        assert generate_resource_url("Python basics", "article") == "https://docs.python.org/3/"

    def test_java_is_not_javascript(self):
        assert generate_resource_url("Java generics", "article") == "https://docs.oracle.com/en/java/"

    def test_fallback_search(self):
        url = generate_resource_url("Some obscure topic", "article")
        assert url.startswith("https://duckduckgo.com/?q=")
        assert url.endswith("+tutorial")
