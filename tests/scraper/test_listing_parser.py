import json
import unittest

from rmc.backend.scraper.listing_parser import ParseError, parse_listing, parse_listing_entries


def listing_payload(children) -> bytes:
    return json.dumps({"kind": "Listing", "data": {"dist": len(children), "children": children}}).encode()


class TestParseListing(unittest.TestCase):
    def test_parses_known_fields_and_ignores_unknown(self) -> None:
        payload = listing_payload(
            [
                {
                    "kind": "t3",
                    "data": {
                        "title": "Sunset",
                        "domain": "i.imgur.com",
                        "id": "abc",
                        "author": "me",
                        "permalink": "/r/pics/comments/abc/sunset/",
                        "post_hint": "image",
                        "url": "https://i.imgur.com/xyz.jpg",
                        "subreddit": "pics",
                        "score": 1234,
                        "preview": {"images": []},
                    },
                }
            ]
        )

        (entry,) = parse_listing_entries(payload)
        self.assertEqual(entry.title, "Sunset")
        self.assertEqual(entry.domain, "i.imgur.com")
        self.assertEqual(entry.url, "https://i.imgur.com/xyz.jpg")
        self.assertEqual(entry.post_hint, "image")

    def test_every_field_is_optional(self) -> None:
        payload = listing_payload([{"data": {}}, {"data": {"url": "https://i.imgur.com/a.jpg"}}])
        entries = parse_listing_entries(payload)
        self.assertEqual(len(entries), 2)
        self.assertIsNone(entries[0].url)
        self.assertIsNone(entries[1].domain)

    def test_children_without_data_are_skipped(self) -> None:
        payload = listing_payload([{"kind": "more"}, {"data": None}, {"data": {"id": "x"}}])
        entries = parse_listing_entries(payload)
        self.assertEqual([e.id for e in entries], ["x"])

    def test_missing_data_is_an_empty_listing(self) -> None:
        self.assertEqual(parse_listing_entries(b"{}"), ())
        self.assertEqual(parse_listing_entries(b'{"data": {}}'), ())

    def test_numeric_fields_are_coerced_to_strings(self) -> None:
        payload = listing_payload([{"data": {"title": 42, "id": "n"}}])
        (entry,) = parse_listing_entries(payload)
        self.assertEqual(entry.title, "42")

    def test_empty_payload_raises_parse_error(self) -> None:
        with self.assertRaises(ParseError):
            parse_listing(b"")
        with self.assertRaises(ParseError):
            parse_listing(b"   \n")

    def test_malformed_payload_raises_parse_error(self) -> None:
        for payload in (b"<html>Too Many Requests</html>", b"[1, 2]", b'{"data": {"children": 5}}'):
            with self.subTest(payload=payload):
                with self.assertRaises(ParseError):
                    parse_listing(payload)


if __name__ == "__main__":
    unittest.main()
