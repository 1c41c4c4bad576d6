"""Tests for the HTML helpers behind reading time, excerpts and image linking."""

import hashlib

from django.test import SimpleTestCase, override_settings

from blog import content
from blogsite.net import client_ip, hash_ip


class ReadingTimeTest(SimpleTestCase):
    def test_minimum_one_minute(self):
        self.assertEqual(content.reading_time(""), 1)
        self.assertEqual(content.reading_time("<p>" + "word " * 100 + "</p>"), 1)

    def test_latin_words(self):
        self.assertEqual(content.reading_time("<p>" + "word " * 220 + "</p>"), 1)
        self.assertEqual(content.reading_time("<p>" + "word " * 330 + "</p>"), 2)

    def test_hangul(self):
        self.assertEqual(content.reading_time("<p>" + "가" * 1200 + "</p>"), 2)

    def test_images_add_time(self):
        html = "<p>" + "word " * 220 + "</p>" + '<img src="/a.png">' * 6
        self.assertEqual(content.reading_time(html), 2)

    def test_code_lines_replace_words(self):
        code = "\n".join(["x = 1"] * 30)
        self.assertEqual(content.reading_time(f"<pre>{code}</pre>"), 1)


class HtmlHelpersTest(SimpleTestCase):
    def test_excerpt(self):
        html = "<p>Hello <b>world</b></p>\n<p>again</p>"

        self.assertEqual(content.make_excerpt(html), "Hello world again")
        self.assertEqual(content.make_excerpt("<p>" + "a" * 300 + "</p>"), "a" * 200)

    def test_empty_body(self):
        self.assertTrue(content.is_empty_body("<p></p>"))
        self.assertTrue(content.is_empty_body("  "))
        self.assertTrue(content.is_empty_body(None))
        self.assertFalse(content.is_empty_body("<p>x</p>"))

    def test_image_urls(self):
        html = '<img src="/a.png"><p>text</p><img src="/b.png">![alt](/c.png)<img src="/a.png">'

        self.assertEqual(
            content.extract_image_urls(html, "/d.png"), ["/a.png", "/b.png", "/c.png", "/d.png"]
        )
        self.assertEqual(content.extract_image_urls("", None), [])


class ClientIpTest(SimpleTestCase):
    class FakeRequest:
        def __init__(self, **meta):
            self.META = meta

    def test_client_ip(self):
        self.assertEqual(client_ip(self.FakeRequest(HTTP_X_FORWARDED_FOR="1.1.1.1, 2.2.2.2")), "1.1.1.1")
        self.assertEqual(client_ip(self.FakeRequest(REMOTE_ADDR="3.3.3.3")), "3.3.3.3")
        self.assertEqual(client_ip(self.FakeRequest()), "unknown")

    @override_settings(BLOG_IP_HASH_SALT="pepper")
    def test_hash_uses_salt(self):
        expected = hashlib.sha256(b"1.2.3.4pepper").hexdigest()
        self.assertEqual(hash_ip("1.2.3.4"), expected)
