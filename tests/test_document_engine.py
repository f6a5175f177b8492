"""Tests for the pikepdf document engine."""

import io

import pikepdf
import pytest
from conftest import page_labels

from pdfsuite.services.document_engine import PikepdfEngine
from pdfsuite.utils.exceptions import (
    CopyError,
    LoadError,
    PasswordRequiredError,
    SerializeError,
)


def _encrypted_bytes(pdf_bytes: bytes, password: str) -> bytes:
    buf = io.BytesIO()
    with pikepdf.open(io.BytesIO(pdf_bytes)) as pdf:
        pdf.save(buf, encryption=pikepdf.Encryption(owner=password, user=password, R=6))
    return buf.getvalue()


class TestLoad:
    def test_load_and_count(self, pdf_bytes):
        engine = PikepdfEngine()
        doc = engine.load(pdf_bytes(4))
        assert engine.page_count(doc) == 4
        engine.close(doc)

    def test_garbage_raises_load_error(self):
        with pytest.raises(LoadError) as exc:
            PikepdfEngine().load(b"not a pdf at all", name="junk.pdf")
        assert exc.value.source == "junk.pdf"
        assert "junk.pdf" in str(exc.value)

    def test_missing_password(self, pdf_bytes):
        data = _encrypted_bytes(pdf_bytes(2), "secret")
        with pytest.raises(PasswordRequiredError):
            PikepdfEngine().load(data)

    def test_password_is_load_error(self, pdf_bytes):
        data = _encrypted_bytes(pdf_bytes(2), "secret")
        with pytest.raises(LoadError):
            PikepdfEngine().load(data, "wrong")

    def test_correct_password(self, pdf_bytes):
        engine = PikepdfEngine()
        doc = engine.load(_encrypted_bytes(pdf_bytes(2), "secret"), "secret")
        assert engine.page_count(doc) == 2
        engine.close(doc)


class TestCopyAndSerialize:
    def test_copy_order_and_serialize(self, pdf_bytes):
        engine = PikepdfEngine()
        source = engine.load(pdf_bytes(3))
        dst = engine.create_empty()
        for page in engine.copy_pages(source, [2, 0]):
            engine.append_page(dst, page)
        data = engine.serialize(dst)
        assert page_labels(data) == [3, 1]
        assert engine.page_count(source) == 3
        engine.close(dst)
        engine.close(source)

    def test_copy_out_of_range(self, pdf_bytes):
        engine = PikepdfEngine()
        source = engine.load(pdf_bytes(2))
        with pytest.raises(CopyError) as exc:
            engine.copy_pages(source, [0, 5])
        assert exc.value.indices == [5]
        engine.close(source)

    def test_serialize_with_encryption(self, pdf_bytes):
        engine = PikepdfEngine(encryption=pikepdf.Encryption(owner="o", user="u", R=6))
        source = engine.load(pdf_bytes(1))
        data = engine.serialize(source)
        engine.close(source)
        with pytest.raises(PasswordRequiredError):
            PikepdfEngine().load(data)

    def test_serialize_failure_wrapped(self):
        class Unsaveable:
            def save(self, *args, **kwargs):
                raise pikepdf.PdfError("write failed")

        with pytest.raises(SerializeError, match="write failed"):
            PikepdfEngine().serialize(Unsaveable())

    def test_close_twice_is_harmless(self, pdf_bytes):
        engine = PikepdfEngine()
        doc = engine.load(pdf_bytes(1))
        engine.close(doc)
        engine.close(doc)
