"""Tests for the digester and its configuration."""

from __future__ import annotations

import hashlib
import threading

import pytest

from refhash.config import FingerprintConfig, load_config
from refhash.digest import HashlibPrimitive
from refhash.digester import Digester, default_digester, fingerprint
from refhash.identity import Identified
from refhash.settings import RefHashSettings


class Record(Identified):
    def __init__(self, name: str, link: object = None) -> None:
        self.name = name
        self.link = link


def test_top_level_composite_hashes_fields(digester):
    record = Record("a")
    assert digester.encode_subject(record) == b's:4:"name";s:1:"a";s:4:"link";N;'
    assert digester.digest(record) == hashlib.sha1(
        b's:4:"name";s:1:"a";s:4:"link";N;'
    ).hexdigest()


def test_equal_fields_give_equal_fingerprints(digester):
    assert digester.digest(Record("a")) == digester.digest(Record("a"))
    assert digester.digest(Record("a")) != digester.digest(Record("b"))


def test_nested_composite_contributes_identity(digester):
    child = Record("child")
    parent = Record("parent", child)
    encoded = digester.encode_subject(parent)
    assert digester.encoder.encode_identity(child) in encoded
    assert b"child" not in encoded.replace(digester.encoder.encode_identity(child), b"")


def test_non_composite_subject_uses_structural_encoding(digester):
    value = [1, {"two": 2.0}]
    assert digester.encode_subject(value) == digester.encoder.encode(value)
    assert digester.digest(value) == hashlib.sha1(digester.encoder.encode(value)).hexdigest()


def test_custom_primitive(dummy):
    digester = Digester(HashlibPrimitive("sha256"))
    assert len(digester.digest(dummy)) == 64


def test_from_config():
    digester = Digester.from_config(FingerprintConfig(algorithm="md5", max_depth=8))
    assert len(digester.digest("x")) == 32
    assert digester.encoder.max_depth == 8


def test_default_digester_reads_environment(monkeypatch):
    monkeypatch.setenv("REFHASH_ALGORITHM", "sha512")
    assert len(fingerprint(1)) == 128
    assert default_digester() is default_digester()


def test_settings_tolerate_malformed_values(monkeypatch):
    monkeypatch.setenv("REFHASH_ALGORITHM", "not-a-hash")
    monkeypatch.setenv("REFHASH_MAX_DEPTH", "-5")
    config = load_config()
    assert config == FingerprintConfig()


def test_settings_explicit_values():
    settings = RefHashSettings(REFHASH_ALGORITHM=" SHA256 ", REFHASH_MAX_DEPTH="12")
    assert load_config(settings=settings) == FingerprintConfig("sha256", 12)


def test_settings_reject_variable_length_algorithm():
    settings = RefHashSettings(REFHASH_ALGORITHM="shake_128")
    assert settings.algorithm == "sha1"


def test_config_rejects_non_positive_depth():
    with pytest.raises(ValueError, match="max_depth"):
        FingerprintConfig(max_depth=0)


def test_concurrent_fingerprints_match_serial(dummy_factory):
    subjects = []
    for index in range(32):
        obj = dummy_factory()
        obj.a = [index, {"peer": dummy_factory()}]
        subjects.append(obj)
    expected = [fingerprint(subject) for subject in subjects]
    results: dict[int, str] = {}

    def worker(offset: int) -> None:
        for index in range(offset, len(subjects), 4):
            results[index] = fingerprint(subjects[index])

    threads = [threading.Thread(target=worker, args=(offset,)) for offset in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert [results[index] for index in range(len(subjects))] == expected
