"""Tests for the passwordless-link email store."""

import json

from webaffe_console.auth.email_store import EMAIL_FOR_SIGN_IN_KEY, EmailLinkStore


class TestEmailLinkStore:
    """The emailForSignIn key survives between link request and completion."""

    def test_load_without_file(self, tmp_path):
        store = EmailLinkStore(tmp_path / "sign_in.json")
        assert store.load() is None

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "sign_in.json"
        store = EmailLinkStore(path)

        store.save("ada@example.com")

        assert store.load() == "ada@example.com"
        assert json.loads(path.read_text()) == {EMAIL_FOR_SIGN_IN_KEY: "ada@example.com"}

    def test_new_instance_sees_saved_email(self, tmp_path):
        path = tmp_path / "sign_in.json"
        EmailLinkStore(path).save("ada@example.com")

        assert EmailLinkStore(path).load() == "ada@example.com"

    def test_clear_is_idempotent(self, tmp_path):
        store = EmailLinkStore(tmp_path / "sign_in.json")
        store.save("ada@example.com")

        store.clear()
        store.clear()

        assert store.load() is None

    def test_clear_keeps_other_keys(self, tmp_path):
        path = tmp_path / "sign_in.json"
        path.write_text(json.dumps({"other": "x", EMAIL_FOR_SIGN_IN_KEY: "a@b.c"}))

        EmailLinkStore(path).clear()

        assert json.loads(path.read_text()) == {"other": "x"}

    def test_unreadable_file_treated_as_empty(self, tmp_path):
        path = tmp_path / "sign_in.json"
        path.write_text("{not json")
        store = EmailLinkStore(path)

        assert store.load() is None
        store.save("ada@example.com")
        assert store.load() == "ada@example.com"

    def test_invalid_utf8_treated_as_empty(self, tmp_path):
        path = tmp_path / "sign_in.json"
        path.write_bytes(b"\xff\xfe{not text")
        store = EmailLinkStore(path)

        assert store.load() is None
        store.clear()
        store.save("ada@example.com")
        assert store.load() == "ada@example.com"

    def test_non_object_json_treated_as_empty(self, tmp_path):
        path = tmp_path / "sign_in.json"
        path.write_text("[]")
        store = EmailLinkStore(path)

        assert store.load() is None
        store.save("ada@example.com")
        assert json.loads(path.read_text()) == {EMAIL_FOR_SIGN_IN_KEY: "ada@example.com"}
