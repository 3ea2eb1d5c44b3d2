"""
HyperLink identity tests.

Critical invariant tested:
    HyperLink.from_link(link.url).keypair == link.keypair
"""

import unittest
from urllib.parse import urlsplit

import base58

from hyperlink import (
    DecodeError,
    HyperLink,
    InvalidLink,
    InvalidVersion,
    LinkVersion,
    config,
    default_suite,
    keypair_from_seed,
    keypair_from_secret,
)


def _counting_random(size):
    return bytes(range(size))


class TestCreate(unittest.TestCase):

    def test_version_0_shape(self):
        link = HyperLink.create(0)

        self.assertEqual(link.version, LinkVersion.HARDENED)
        self.assertTrue(link.url.startswith(config.link_base() + "#"))
        self.assertNotIn("_", link.fragment)
        self.assertEqual(len(base58.b58decode(link.fragment)), 12)

    def test_version_1_shape(self):
        link = HyperLink.create(1)

        self.assertEqual(link.version, LinkVersion.FAST)
        self.assertTrue(link.fragment.startswith("_"))
        self.assertEqual(len(base58.b58decode(link.fragment[1:])), 16)

    def test_default_version_is_0(self):
        self.assertEqual(HyperLink.create().version, LinkVersion.HARDENED)

    def test_invalid_versions(self):
        for version in (2, -1, "1", None, 1.0):
            with self.subTest(version=version):
                with self.assertRaises(InvalidVersion):
                    HyperLink.create(version)

    def test_fixed_random_source(self):
        suite = default_suite().with_random(_counting_random)
        link = HyperLink.create(1, suite=suite)

        secret = bytes(range(16))
        self.assertEqual(
            link.url,
            config.link_base() + "#_" + base58.b58encode(secret).decode("ascii"),
        )
        self.assertEqual(link.keypair, keypair_from_seed(secret + b"\x80" + bytes(15)))

    def test_origin_and_path_override(self):
        link = HyperLink.create(1, origin="https://hyperlink.example/", path="/x")

        self.assertTrue(link.url.startswith("https://hyperlink.example/x#_"))
        self.assertEqual(HyperLink.from_link(link.url).keypair, link.keypair)

    def test_fresh_links_differ(self):
        self.assertNotEqual(HyperLink.create(1).keypair, HyperLink.create(1).keypair)


class TestEndToEnd(unittest.TestCase):
    """create() followed by from_link() reproduces the keypair."""

    def test_round_trip_both_versions(self):
        for version in (0, 1):
            with self.subTest(version=version):
                link = HyperLink.create(version)
                reopened = HyperLink.from_link(link.url)

                self.assertEqual(reopened.keypair, link.keypair)
                self.assertEqual(reopened.version, link.version)
                self.assertEqual(reopened.url, link.url)
                self.assertEqual(reopened, link)

    def test_from_url_matches_from_link(self):
        link = HyperLink.create(1)

        self.assertEqual(HyperLink.from_url(urlsplit(link.url)), HyperLink.from_link(link.url))

    def test_origin_does_not_affect_keypair(self):
        link = HyperLink.create(1)
        moved = "https://elsewhere.example/other/path#" + link.fragment

        self.assertEqual(HyperLink.from_link(moved).keypair, link.keypair)

    def test_reserved_prefix_resolves_to_version_0(self):
        secret = bytes(range(12))
        fragment = base58.b58encode(secret).decode("ascii")

        plain = HyperLink.from_link(f"http://localhost:3000/i#{fragment}")
        prefixed = HyperLink.from_link(f"http://localhost:3000/i#3_{fragment}")

        self.assertEqual(prefixed.version, LinkVersion.HARDENED)
        self.assertEqual(prefixed.keypair, plain.keypair)
        self.assertEqual(plain.keypair, keypair_from_secret(secret, 0))

    def test_surrounding_whitespace_ignored(self):
        link = HyperLink.create(1)
        self.assertEqual(HyperLink.from_link(f"  {link.url}\n").keypair, link.keypair)


class TestInvalidLinks(unittest.TestCase):

    def test_not_a_url(self):
        for text in ("not a link", "", "/i#abc", "localhost:3000"):
            with self.subTest(text=text):
                with self.assertRaises(InvalidLink):
                    HyperLink.from_link(text)

    def test_missing_host(self):
        with self.assertRaises(InvalidLink):
            HyperLink.from_link("http:///i#" + "1" * 12)

    def test_unparseable_url(self):
        with self.assertRaises(InvalidLink):
            HyperLink.from_link("http://[::1/i#abc")

    def test_missing_fragment(self):
        with self.assertRaises(InvalidLink):
            HyperLink.from_link("http://localhost:3000/i")

    def test_fragment_with_trailing_whitespace(self):
        link = HyperLink.create(1)
        url = urlsplit(link.url)

        for padding in ("  ", "\n"):
            with self.subTest(padding=padding):
                with self.assertRaises(InvalidLink):
                    HyperLink.from_url(url._replace(fragment=url.fragment + padding))

    def test_bad_fragment_chains_decode_error(self):
        with self.assertRaises(InvalidLink) as ctx:
            HyperLink.from_link("http://localhost:3000/i#0OIl")
        self.assertIsInstance(ctx.exception.__cause__, DecodeError)

    def test_wrong_length_fragment(self):
        sixteen = base58.b58encode(b"\x01" * 16).decode("ascii")

        with self.assertRaises(InvalidLink):
            HyperLink.from_link(f"http://localhost:3000/i#{sixteen}")

    def test_non_text(self):
        with self.assertRaises(InvalidLink):
            HyperLink.from_link(None)


class TestPresentation(unittest.TestCase):

    def setUp(self):
        self.link = HyperLink.create(1)

    def test_to_dict_has_no_secret(self):
        data = self.link.to_dict()

        self.assertEqual(data["address"], self.link.address)
        self.assertEqual(data["version"], 1)
        self.assertEqual(data["path"], config.HYPERLINK_PATH)
        self.assertNotIn(self.link.fragment, str(data))

    def test_repr_has_no_secret(self):
        text = repr(self.link)

        self.assertIn(self.link.address, text)
        self.assertNotIn(self.link.fragment[1:], text)

    def test_public_key_matches_keypair(self):
        self.assertEqual(self.link.public_key, self.link.keypair.public_key)
        self.assertEqual(base58.b58decode(self.link.address), self.link.public_key)

    def test_immutable(self):
        with self.assertRaises(AttributeError):
            self.link.url = "http://evil.example/#x"

    def test_direct_construction_rejected(self):
        forged = keypair_from_seed(bytes(32))

        with self.assertRaises(TypeError):
            HyperLink(self.link.url, forged, self.link.version)


if __name__ == "__main__":
    unittest.main()
