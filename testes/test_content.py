import os
import sys
from datetime import datetime

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from wp_importer.parsers.content import (
    clean_content,
    generate_excerpt,
    map_post_status,
    parse_wp_datetime,
    slugify,
    strip_html,
)


def test_clean_content_drops_block_comments_and_classes():
    html = (
        '<!-- wp:heading -->\n<h2 class="wp-block-heading">Title</h2>\n<!-- /wp:heading -->\n'
        '<!-- wp:paragraph {"align":"center"} -->\n<p class="has-text-align-center">Body</p>\n<!-- /wp:paragraph -->'
    )
    cleaned = clean_content(html)
    assert cleaned.startswith("<h2>Title</h2>")
    assert cleaned.endswith("<p>Body</p>")
    assert "wp:" not in cleaned
    assert "class=" not in cleaned


def test_clean_content_keeps_classes_outside_paragraphs_and_headings():
    html = '<figure class="wp-block-image"><img src="a.jpg"/></figure>'
    assert clean_content(html) == html


def test_clean_content_more_and_nextpage_markers():
    html = "<p>a</p><!--more--><p>b</p><!--nextpage--><p>c</p>"
    assert clean_content(html) == "<p>a</p><p>b</p><hr/><p>c</p>"


def test_clean_content_wraps_plain_text():
    text = "First line\r\nsecond line\n\n\nNext paragraph"
    assert clean_content(text) == "<p>First line<br>second line</p>\n<p>Next paragraph</p>"


def test_clean_content_empty():
    assert clean_content("") == ""
    assert clean_content("<!-- wp:spacer -->\n<!-- /wp:spacer -->") == ""


def test_strip_html_collapses_whitespace():
    assert strip_html("<p>Hello   <b>world</b></p>\n<p>again</p>") == "Hello world again"
    assert strip_html("") == ""


def test_generate_excerpt_short_text_is_unchanged():
    assert generate_excerpt("<p>Short text.</p>") == "Short text."


def test_generate_excerpt_cuts_on_word_boundary():
    html = "<p>" + " ".join(["palavra"] * 40) + "</p>"
    excerpt = generate_excerpt(html)
    assert excerpt.endswith("...")
    body = excerpt[:-3]
    assert len(body) <= 160
    assert body.split(" ") == ["palavra"] * len(body.split(" "))


def test_generate_excerpt_custom_length():
    assert generate_excerpt("one two three four", max_length=9) == "one two..."


def test_slugify():
    assert slugify("São Paulo: Eleições 2024!") == "sao-paulo-eleicoes-2024"
    assert slugify("  --Hello__World--  ") == "hello-world"
    assert slugify("") == ""


def test_map_post_status():
    assert map_post_status("publish") == "PUBLISHED"
    assert map_post_status("draft") == "DRAFT"
    assert map_post_status("pending") == "DRAFT"
    assert map_post_status("auto-draft") == "DRAFT"
    assert map_post_status("future") == "SCHEDULED"
    assert map_post_status("trash") == "TRASH"
    assert map_post_status("private") == "DRAFT"
    assert map_post_status("") == "DRAFT"


def test_parse_wp_datetime():
    assert parse_wp_datetime("2024-03-05 10:30:00") == datetime(2024, 3, 5, 10, 30)
    assert parse_wp_datetime("2024-03-05") == datetime(2024, 3, 5)
    assert parse_wp_datetime("0000-00-00 00:00:00") is None
    assert parse_wp_datetime("") is None
    assert parse_wp_datetime("yesterday") is None
