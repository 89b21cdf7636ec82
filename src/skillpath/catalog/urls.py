"""Landing/search URL synthesis for resources generated without a usable URL."""

from __future__ import annotations

import re
from urllib.parse import quote, quote_plus

PLACEHOLDER_URLS = frozenset({"", "#", "https://example.com", "http://example.com"})

_PREFIX_RE = re.compile(r"^(youtube:?|video:?|tutorial:?|course:?|guide:?|docs?:?|documentation:?)\s*", re.IGNORECASE)
_SUFFIX_RE = re.compile(r"\s*(tutorial|guide|course|documentation|docs)$", re.IGNORECASE)

# Title keyword -> canonical documentation landing page.
TECH_DOCS: list[tuple[str, str]] = [
    ("react", "https://react.dev/learn"),
    ("vue", "https://vuejs.org/guide/"),
    ("angular", "https://angular.io/docs"),
    ("python", "https://docs.python.org/3/"),
    ("rust", "https://doc.rust-lang.org/book/"),
    ("c++", "https://en.cppreference.com/"),
    ("cpp", "https://en.cppreference.com/"),
    ("golang", "https://go.dev/doc/"),
]

MDN_SECTIONS: list[tuple[str, str]] = [
    ("react", "https://react.dev/learn"),
    ("node", "https://nodejs.org/en/docs"),
    ("css", "https://developer.mozilla.org/en-US/docs/Web/CSS"),
    ("html", "https://developer.mozilla.org/en-US/docs/Web/HTML"),
]

SITE_SEARCH: list[tuple[tuple[str, ...], str]] = [
    (("github",), "https://github.com/search?q={term}&type=repositories"),
    (("stackoverflow", "stack overflow"), "https://stackoverflow.com/search?q={term}"),
    (("medium",), "https://medium.com/search?q={term}"),
    (("dev.to",), "https://dev.to/search?q={term}"),
]


def is_placeholder_url(url: str | None) -> bool:
    """True when a draft URL cannot be used to identify or open the resource."""
    if url is None:
        return True
    url = url.strip()
    return url in PLACEHOLDER_URLS or "placeholder" in url.lower()


def _core_topic(title: str) -> str:
    topic = _PREFIX_RE.sub("", title)
    return _SUFFIX_RE.sub("", topic).strip()


def generate_resource_url(title: str, resource_type: str | None = "article") -> str:
    """Pick a plausible URL for a resource from its title and type."""
    lowered = title.casefold()
    kind = (resource_type or "article").casefold()
    topic = _core_topic(lowered)
    encoded = quote(topic)
    term = quote_plus(re.sub(r"[^\w\s]", "", topic))

    if kind == "video" or "youtube" in lowered:
        return f"https://www.youtube.com/results?search_query={term}"

    if kind == "documentation" or "mdn" in lowered or "docs" in lowered:
        if "javascript" in lowered:
            return f"https://developer.mozilla.org/en-US/search?q={encoded}"
        for keyword, url in MDN_SECTIONS:
            if keyword in lowered:
                return url
        return f"https://developer.mozilla.org/en-US/search?q={encoded}"

    if kind == "tutorial" or "freecodecamp" in lowered or "tutorial" in lowered:
        if "w3schools" in lowered:
            return "https://www.w3schools.com/default.asp"
        return "https://www.freecodecamp.org/learn"

    if kind == "course" or "coursera" in lowered or "udemy" in lowered:
        if "udemy" in lowered:
            return f"https://www.udemy.com/courses/search/?q={term}"
        if "edx" in lowered:
            return f"https://www.edx.org/search?q={term}"
        return f"https://www.coursera.org/search?query={term}"

    for keywords, template in SITE_SEARCH:
        if any(k in lowered for k in keywords):
            return template.format(term=term)

    for keyword, url in TECH_DOCS:
        if keyword in lowered:
            return url
    if "java" in lowered and "javascript" not in lowered:
        return "https://docs.oracle.com/en/java/"

    return f"https://duckduckgo.com/?q={term}+tutorial"
