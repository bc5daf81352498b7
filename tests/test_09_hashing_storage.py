#!/usr/bin/env python3
"""
Test 9: Image Hashing and Key-Value Storage
Tests content hashes for training keys and both storage backends
"""

import hashlib

import pytest

from label_vision.exceptions import ValidationError
from label_vision.training.hashing import generate_image_hash
from label_vision.training.storage import FileKeyValueStore, InMemoryKeyValueStore


class TestImageHash:

    def test_known_digest(self):
        assert generate_image_hash(b"abc") == "ba7816bf8f01cfea"

    def test_default_length_and_alphabet(self):
        digest = generate_image_hash(b"\x89PNG fake image bytes")
        assert len(digest) == 16
        assert set(digest) <= set("0123456789abcdef")

    def test_deterministic_and_content_sensitive(self):
        assert generate_image_hash(b"label one") == generate_image_hash(bytearray(b"label one"))
        assert generate_image_hash(b"label one") != generate_image_hash(b"label two")

    def test_custom_length(self):
        full = hashlib.sha256(b"abc").hexdigest()
        assert generate_image_hash(b"abc", length=64) == full
        assert generate_image_hash(b"abc", length=8) == full[:8]

    def test_path_matches_bytes(self, tmp_path):
        data = bytes(range(256)) * 1000
        path = tmp_path / "label.png"
        path.write_bytes(data)

        assert generate_image_hash(path) == generate_image_hash(data)
        assert generate_image_hash(str(path)) == generate_image_hash(data)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            generate_image_hash(tmp_path / "missing.png")

    @pytest.mark.parametrize("bad", [None, 42, ["bytes"]])
    def test_unsupported_input(self, bad):
        with pytest.raises(ValidationError):
            generate_image_hash(bad)

    @pytest.mark.parametrize("length", [0, 65])
    def test_invalid_length(self, length):
        with pytest.raises(ValidationError):
            generate_image_hash(b"abc", length=length)


class TestInMemoryStore:

    def setup_method(self):
        self.store = InMemoryKeyValueStore()

    def test_missing_key(self):
        assert self.store.get("text_training") is None

    def test_set_get_replace_delete(self):
        self.store.set("text_training", "[]")
        assert self.store.get("text_training") == "[]"

        self.store.set("text_training", "[1]")
        assert self.store.get("text_training") == "[1]"

        self.store.delete("text_training")
        assert self.store.get("text_training") is None

    def test_delete_missing_key(self):
        self.store.delete("nothing")


class TestFileStore:

    def test_creates_root(self, tmp_path):
        root = tmp_path / "nested" / "store"
        FileKeyValueStore(root)
        assert root.is_dir()

    def test_round_trip(self, tmp_path):
        store = FileKeyValueStore(tmp_path)
        store.set("text_training", '[{"imageHash": "é"}]')

        assert store.get("text_training") == '[{"imageHash": "é"}]'
        assert (tmp_path / "text_training.json").exists()

    def test_persists_across_instances(self, tmp_path):
        FileKeyValueStore(tmp_path).set("text_training", "[]")
        assert FileKeyValueStore(tmp_path).get("text_training") == "[]"

    def test_no_temporary_files_left(self, tmp_path):
        store = FileKeyValueStore(tmp_path)
        for i in range(3):
            store.set("text_training", str(i))

        assert sorted(p.name for p in tmp_path.iterdir()) == ["text_training.json"]
        assert store.get("text_training") == "2"

    def test_missing_and_delete(self, tmp_path):
        store = FileKeyValueStore(tmp_path)
        assert store.get("text_training") is None

        store.delete("text_training")
        store.set("text_training", "[]")
        store.delete("text_training")
        assert store.get("text_training") is None

    @pytest.mark.parametrize("key", ["../escape", "a/b", "", "with space"])
    def test_invalid_key(self, tmp_path, key):
        store = FileKeyValueStore(tmp_path)
        with pytest.raises(ValidationError):
            store.set(key, "[]")
        with pytest.raises(ValidationError):
            store.get(key)
